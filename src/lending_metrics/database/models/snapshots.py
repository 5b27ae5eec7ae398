from sqlalchemy.orm import Mapped

from .base import Base, BigDecimal, BigInteger
from .types import ForeignKeyMarketId, ForeignKeyProtocolId, PrimaryKeyStr


class SnapshotBlockMixin:
    """
    Block number and timestamp of the last event that contributed to a snapshot.
    """

    block_number: Mapped[int]
    timestamp: Mapped[int]


class ProtocolFinancialsMixin:
    """
    Protocol-wide values carried forward from the protocol entity on every update.
    """

    total_value_locked_usd: Mapped[BigDecimal]
    total_deposit_balance_usd: Mapped[BigDecimal]
    total_borrow_balance_usd: Mapped[BigDecimal]
    cumulative_deposit_usd: Mapped[BigDecimal]
    cumulative_borrow_usd: Mapped[BigDecimal]
    cumulative_liquidate_usd: Mapped[BigDecimal]
    cumulative_supply_side_revenue_usd: Mapped[BigDecimal]
    cumulative_protocol_side_revenue_usd: Mapped[BigDecimal]
    cumulative_total_revenue_usd: Mapped[BigDecimal]
    cumulative_protocol_side_stability_fee_revenue_usd: Mapped[BigDecimal]
    cumulative_protocol_side_liquidation_revenue_usd: Mapped[BigDecimal]
    cumulative_protocol_side_stabilization_module_revenue_usd: Mapped[BigDecimal]


class MarketTotalsMixin:
    """
    Market values carried forward from the market entity on every update.
    """

    input_token_balance: Mapped[BigInteger]
    input_token_price_usd: Mapped[BigDecimal]
    total_value_locked_usd: Mapped[BigDecimal]
    total_deposit_balance_usd: Mapped[BigDecimal]
    total_borrow_balance_usd: Mapped[BigDecimal]
    cumulative_deposit_usd: Mapped[BigDecimal]
    cumulative_borrow_usd: Mapped[BigDecimal]
    cumulative_liquidate_usd: Mapped[BigDecimal]
    cumulative_supply_side_revenue_usd: Mapped[BigDecimal]
    cumulative_protocol_side_revenue_usd: Mapped[BigDecimal]
    cumulative_total_revenue_usd: Mapped[BigDecimal]


class UsageMetricsDailySnapshotTable(SnapshotBlockMixin, Base):
    __tablename__ = "usage_metrics_daily_snapshots"

    id: Mapped[PrimaryKeyStr]
    protocol_id: Mapped[ForeignKeyProtocolId]

    daily_active_users: Mapped[int]
    cumulative_unique_users: Mapped[int]
    total_pool_count: Mapped[int]
    daily_transaction_count: Mapped[int]
    daily_deposit_count: Mapped[int]
    daily_withdraw_count: Mapped[int]
    daily_borrow_count: Mapped[int]
    daily_repay_count: Mapped[int]
    daily_liquidate_count: Mapped[int]


class UsageMetricsHourlySnapshotTable(SnapshotBlockMixin, Base):
    __tablename__ = "usage_metrics_hourly_snapshots"

    id: Mapped[PrimaryKeyStr]
    protocol_id: Mapped[ForeignKeyProtocolId]

    hourly_active_users: Mapped[int]
    cumulative_unique_users: Mapped[int]
    total_pool_count: Mapped[int]
    hourly_transaction_count: Mapped[int]
    hourly_deposit_count: Mapped[int]
    hourly_withdraw_count: Mapped[int]
    hourly_borrow_count: Mapped[int]
    hourly_repay_count: Mapped[int]
    hourly_liquidate_count: Mapped[int]


class FinancialsDailySnapshotTable(SnapshotBlockMixin, ProtocolFinancialsMixin, Base):
    __tablename__ = "financials_daily_snapshots"

    id: Mapped[PrimaryKeyStr]
    protocol_id: Mapped[ForeignKeyProtocolId]

    daily_deposit_usd: Mapped[BigDecimal]
    daily_withdraw_usd: Mapped[BigDecimal]
    daily_borrow_usd: Mapped[BigDecimal]
    daily_repay_usd: Mapped[BigDecimal]
    daily_liquidate_usd: Mapped[BigDecimal]
    daily_supply_side_revenue_usd: Mapped[BigDecimal]
    daily_protocol_side_revenue_usd: Mapped[BigDecimal]
    daily_total_revenue_usd: Mapped[BigDecimal]
    daily_protocol_side_stability_fee_revenue_usd: Mapped[BigDecimal]
    daily_protocol_side_liquidation_revenue_usd: Mapped[BigDecimal]
    daily_protocol_side_stabilization_module_revenue_usd: Mapped[BigDecimal]


class MarketDailySnapshotTable(SnapshotBlockMixin, MarketTotalsMixin, Base):
    __tablename__ = "market_daily_snapshots"

    id: Mapped[PrimaryKeyStr]
    protocol_id: Mapped[ForeignKeyProtocolId]
    market_id: Mapped[ForeignKeyMarketId]

    daily_deposit_usd: Mapped[BigDecimal]
    daily_withdraw_usd: Mapped[BigDecimal]
    daily_borrow_usd: Mapped[BigDecimal]
    daily_repay_usd: Mapped[BigDecimal]
    daily_liquidate_usd: Mapped[BigDecimal]
    daily_supply_side_revenue_usd: Mapped[BigDecimal]
    daily_protocol_side_revenue_usd: Mapped[BigDecimal]
    daily_total_revenue_usd: Mapped[BigDecimal]


class MarketHourlySnapshotTable(SnapshotBlockMixin, MarketTotalsMixin, Base):
    __tablename__ = "market_hourly_snapshots"

    id: Mapped[PrimaryKeyStr]
    protocol_id: Mapped[ForeignKeyProtocolId]
    market_id: Mapped[ForeignKeyMarketId]

    hourly_deposit_usd: Mapped[BigDecimal]
    hourly_withdraw_usd: Mapped[BigDecimal]
    hourly_borrow_usd: Mapped[BigDecimal]
    hourly_repay_usd: Mapped[BigDecimal]
    hourly_liquidate_usd: Mapped[BigDecimal]
    hourly_supply_side_revenue_usd: Mapped[BigDecimal]
    hourly_protocol_side_revenue_usd: Mapped[BigDecimal]
    hourly_total_revenue_usd: Mapped[BigDecimal]
