import functools

from cchecksum import to_checksum_address
from eth_typing import ChecksumAddress, HexAddress


@functools.lru_cache(maxsize=4096)
def get_checksum_address(address: HexAddress | str | bytes) -> ChecksumAddress:
    """
    Normalize an account, market or token address. Every address is checksummed before it is used
    as an entity id, so lowercase and mixed-case inputs resolve to the same entity.
    """

    return to_checksum_address(address)
