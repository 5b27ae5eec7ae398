from .accounts import AccountTable, ActiveAccountTable
from .base import Base
from .lending import CollateralTypeTable, MarketTable, ProtocolTable, TokenTable
from .snapshots import (
    FinancialsDailySnapshotTable,
    MarketDailySnapshotTable,
    MarketHourlySnapshotTable,
    UsageMetricsDailySnapshotTable,
    UsageMetricsHourlySnapshotTable,
)
from .transactions import (
    BorrowTable,
    DepositTable,
    LiquidateTable,
    ProcessedEventTable,
    RepayTable,
    TransactionTable,
    WithdrawTable,
)

__all__ = (
    "AccountTable",
    "ActiveAccountTable",
    "Base",
    "BorrowTable",
    "CollateralTypeTable",
    "DepositTable",
    "FinancialsDailySnapshotTable",
    "LiquidateTable",
    "MarketDailySnapshotTable",
    "MarketHourlySnapshotTable",
    "MarketTable",
    "ProcessedEventTable",
    "ProtocolTable",
    "RepayTable",
    "TokenTable",
    "TransactionTable",
    "UsageMetricsDailySnapshotTable",
    "UsageMetricsHourlySnapshotTable",
    "WithdrawTable",
)
