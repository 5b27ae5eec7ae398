__all__ = (
    "BIGDECIMAL_ZERO",
    "DAI_ADDRESS",
    "HOURS_PER_DAY",
    "SECONDS_PER_DAY",
    "SECONDS_PER_HOUR",
    "VAT_ADDRESS",
    "ZERO_ADDRESS",
)

from decimal import Decimal

from eth_typing import ChecksumAddress

from lending_metrics.checksum_cache import get_checksum_address

SECONDS_PER_HOUR = 3_600
HOURS_PER_DAY = 24
SECONDS_PER_DAY = SECONDS_PER_HOUR * HOURS_PER_DAY

BIGDECIMAL_ZERO = Decimal(0)

ZERO_ADDRESS: ChecksumAddress = get_checksum_address("0x0000000000000000000000000000000000000000")

# Maker core accounting contract, used as the default protocol id
VAT_ADDRESS: ChecksumAddress = get_checksum_address("0x35D1b3F3D7966A1DFe207aa4514C12a259A0492B")
DAI_ADDRESS: ChecksumAddress = get_checksum_address("0x6B175474E89094C44Da98b954EedeAC495271d0F")
