"""
Snapshot rollover.

A snapshot is created lazily by the first event whose timestamp falls in its bucket. Carried
fields are copied from the parent aggregate (the protocol for usage and financials snapshots, the
market for market snapshots) at creation and again on every later update, so the snapshot always
holds the parent's values as of the last event in the bucket. Period-local fields start at zero
and only receive the contributions of events inside the bucket.
"""

from decimal import Decimal
from typing import Any

from lending_metrics.bucketing import bucket_id, market_bucket_id
from lending_metrics.constants import BIGDECIMAL_ZERO
from lending_metrics.context import MetricsContext, MetricsDelta
from lending_metrics.database.models import (
    FinancialsDailySnapshotTable,
    MarketDailySnapshotTable,
    MarketHourlySnapshotTable,
    MarketTable,
    UsageMetricsDailySnapshotTable,
    UsageMetricsHourlySnapshotTable,
)
from lending_metrics.metrics.revenue import RevenueScope, apply_revenue
from lending_metrics.types import Granularity, ProtocolSideRevenueType, TransactionType

ACTIVITY_KINDS = ("deposit", "withdraw", "borrow", "repay", "liquidate")

PROTOCOL_CARRIED_FIELDS = (
    "total_value_locked_usd",
    "total_deposit_balance_usd",
    "total_borrow_balance_usd",
    "cumulative_deposit_usd",
    "cumulative_borrow_usd",
    "cumulative_liquidate_usd",
    "cumulative_supply_side_revenue_usd",
    "cumulative_protocol_side_revenue_usd",
    "cumulative_total_revenue_usd",
    "cumulative_protocol_side_stability_fee_revenue_usd",
    "cumulative_protocol_side_liquidation_revenue_usd",
    "cumulative_protocol_side_stabilization_module_revenue_usd",
)

MARKET_CARRIED_FIELDS = (
    "input_token_balance",
    "input_token_price_usd",
    "total_value_locked_usd",
    "total_deposit_balance_usd",
    "total_borrow_balance_usd",
    "cumulative_deposit_usd",
    "cumulative_borrow_usd",
    "cumulative_liquidate_usd",
    "cumulative_supply_side_revenue_usd",
    "cumulative_protocol_side_revenue_usd",
    "cumulative_total_revenue_usd",
)

USAGE_CARRIED_FIELDS = ("cumulative_unique_users", "total_pool_count")


def activity_kind(transaction_type: TransactionType) -> str:
    return transaction_type.value.lower()


def period_contribution(delta: MetricsDelta) -> tuple[str, Decimal] | None:
    """
    Get the activity kind and the positive USD magnitude an event adds to period-local volume
    fields, or None if the event is not a classified transaction.
    """

    match delta.transaction_type:
        case None:
            return None
        case TransactionType.DEPOSIT:
            amount_usd = delta.delta_collateral_usd
        case TransactionType.WITHDRAW:
            amount_usd = -delta.delta_collateral_usd
        case TransactionType.BORROW:
            amount_usd = delta.delta_debt_usd
        case TransactionType.REPAY:
            amount_usd = -delta.delta_debt_usd
        case TransactionType.LIQUIDATE:
            amount_usd = delta.liquidate_usd
    return activity_kind(delta.transaction_type), amount_usd


def _carry(snapshot: Any, parent: Any, fields: tuple[str, ...]) -> None:  # noqa: ANN401
    for name in fields:
        setattr(snapshot, name, getattr(parent, name))


def _seed(parent: Any, fields: tuple[str, ...]) -> dict[str, Any]:  # noqa: ANN401
    return {name: getattr(parent, name) for name in fields}


def _zero_volume(prefix: str, *, with_sub_types: bool) -> dict[str, Decimal]:
    volume = {f"{prefix}_{kind}_usd": BIGDECIMAL_ZERO for kind in ACTIVITY_KINDS}
    for revenue in ("supply_side", "protocol_side", "total"):
        volume[f"{prefix}_{revenue}_revenue_usd"] = BIGDECIMAL_ZERO
    if with_sub_types:
        for revenue_type in ProtocolSideRevenueType:
            volume[f"{prefix}_protocol_side_{revenue_type.value}_revenue_usd"] = BIGDECIMAL_ZERO
    return volume


def _add_period_values(
    snapshot: Any,  # noqa: ANN401
    scope: RevenueScope,
    delta: MetricsDelta,
    *,
    revenue_type: ProtocolSideRevenueType | None,
) -> None:
    if (contribution := period_contribution(delta)) is not None:
        kind, amount_usd = contribution
        if amount_usd > 0:
            attribute = f"{scope.value}_{kind}_usd"
            setattr(snapshot, attribute, getattr(snapshot, attribute) + amount_usd)

    if delta.has_revenue:
        apply_revenue(
            snapshot,
            scope=scope,
            new_total_revenue_usd=delta.new_total_revenue_usd,
            new_supply_side_revenue_usd=delta.new_supply_side_revenue_usd,
            revenue_type=revenue_type,
        )


def get_or_create_usage_daily_snapshot(ctx: MetricsContext) -> UsageMetricsDailySnapshotTable:
    protocol = ctx.protocol
    snapshot, _ = ctx.resolver.resolve(
        UsageMetricsDailySnapshotTable,
        bucket_id(Granularity.DAILY, ctx.timestamp),
        {
            "protocol_id": protocol.id,
            "block_number": ctx.block_number,
            "timestamp": ctx.timestamp,
            "daily_active_users": 0,
            "daily_transaction_count": 0,
            **{f"daily_{kind}_count": 0 for kind in ACTIVITY_KINDS},
            **_seed(protocol, USAGE_CARRIED_FIELDS),
        },
    )
    return snapshot


def get_or_create_usage_hourly_snapshot(ctx: MetricsContext) -> UsageMetricsHourlySnapshotTable:
    protocol = ctx.protocol
    snapshot, _ = ctx.resolver.resolve(
        UsageMetricsHourlySnapshotTable,
        bucket_id(Granularity.HOURLY, ctx.timestamp),
        {
            "protocol_id": protocol.id,
            "block_number": ctx.block_number,
            "timestamp": ctx.timestamp,
            "hourly_active_users": 0,
            "hourly_transaction_count": 0,
            **{f"hourly_{kind}_count": 0 for kind in ACTIVITY_KINDS},
            **_seed(protocol, USAGE_CARRIED_FIELDS),
        },
    )
    return snapshot


def refresh_usage_snapshots(
    ctx: MetricsContext,
    daily: UsageMetricsDailySnapshotTable,
    hourly: UsageMetricsHourlySnapshotTable,
) -> None:
    """
    Overwrite the carried fields of the usage snapshots with the protocol's current values and
    record the event's block.
    """

    protocol = ctx.protocol
    for snapshot in (daily, hourly):
        _carry(snapshot, protocol, USAGE_CARRIED_FIELDS)
        snapshot.block_number = ctx.block_number
        snapshot.timestamp = ctx.timestamp
        ctx.store.save(snapshot)


def get_or_create_financials_snapshot(ctx: MetricsContext) -> FinancialsDailySnapshotTable:
    protocol = ctx.protocol
    snapshot, _ = ctx.resolver.resolve(
        FinancialsDailySnapshotTable,
        bucket_id(Granularity.DAILY, ctx.timestamp),
        {
            "protocol_id": protocol.id,
            "block_number": ctx.block_number,
            "timestamp": ctx.timestamp,
            **_zero_volume("daily", with_sub_types=True),
            **_seed(protocol, PROTOCOL_CARRIED_FIELDS),
        },
    )
    return snapshot


def update_financials_snapshot(
    ctx: MetricsContext,
    delta: MetricsDelta | None = None,
) -> FinancialsDailySnapshotTable:
    """
    Refresh the protocol's daily financials snapshot and add the event's period-local volume and
    revenue. Without a delta only the carried fields and block are refreshed.
    """

    snapshot = get_or_create_financials_snapshot(ctx)
    if delta is not None:
        _add_period_values(snapshot, RevenueScope.DAILY, delta, revenue_type=delta.revenue_type)

    _carry(snapshot, ctx.protocol, PROTOCOL_CARRIED_FIELDS)
    snapshot.block_number = ctx.block_number
    snapshot.timestamp = ctx.timestamp
    ctx.store.save(snapshot)
    return snapshot


def _get_or_create_market_snapshot[S: (MarketDailySnapshotTable, MarketHourlySnapshotTable)](
    ctx: MetricsContext,
    kind: type[S],
    granularity: Granularity,
    market: MarketTable,
) -> S:
    snapshot, _ = ctx.resolver.resolve(
        kind,
        market_bucket_id(granularity, market.id, ctx.timestamp),
        {
            "protocol_id": ctx.protocol.id,
            "market_id": market.id,
            "block_number": ctx.block_number,
            "timestamp": ctx.timestamp,
            **_zero_volume(granularity.value, with_sub_types=False),
            **_seed(market, MARKET_CARRIED_FIELDS),
        },
    )
    return snapshot


def update_market_snapshots(
    ctx: MetricsContext,
    market: MarketTable,
    delta: MetricsDelta | None = None,
) -> tuple[MarketDailySnapshotTable, MarketHourlySnapshotTable]:
    """
    Refresh the market's daily and hourly snapshots and add the event's period-local volume and
    revenue to both. Without a delta only the carried fields and block are refreshed.
    """

    daily = _get_or_create_market_snapshot(
        ctx, MarketDailySnapshotTable, Granularity.DAILY, market
    )
    hourly = _get_or_create_market_snapshot(
        ctx, MarketHourlySnapshotTable, Granularity.HOURLY, market
    )

    for snapshot, scope in ((daily, RevenueScope.DAILY), (hourly, RevenueScope.HOURLY)):
        if delta is not None:
            _add_period_values(snapshot, scope, delta, revenue_type=None)
        _carry(snapshot, market, MARKET_CARRIED_FIELDS)
        snapshot.block_number = ctx.block_number
        snapshot.timestamp = ctx.timestamp
        ctx.store.save(snapshot)

    return daily, hourly
