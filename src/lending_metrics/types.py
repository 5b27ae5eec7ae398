from enum import Enum


class TransactionType(Enum):
    """User-facing transaction classes, each counted once per event."""

    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    BORROW = "BORROW"
    REPAY = "REPAY"
    LIQUIDATE = "LIQUIDATE"


class Granularity(Enum):
    """Snapshot bucket width. The value prefixes active account ids."""

    DAILY = "daily"
    HOURLY = "hourly"


class ProtocolSideRevenueType(Enum):
    """Source of revenue retained by the protocol."""

    STABILITY_FEE = "stability_fee"
    LIQUIDATION = "liquidation"
    STABILIZATION_MODULE = "stabilization_module"
