from collections.abc import Iterable
from decimal import Decimal

from lending_metrics.checksum_cache import get_checksum_address
from lending_metrics.constants import BIGDECIMAL_ZERO
from lending_metrics.context import MetricsContext
from lending_metrics.database.models import (
    UsageMetricsDailySnapshotTable,
    UsageMetricsHourlySnapshotTable,
)
from lending_metrics.logging import logger
from lending_metrics.metrics.snapshots import (
    activity_kind,
    get_or_create_usage_daily_snapshot,
    get_or_create_usage_hourly_snapshot,
    refresh_usage_snapshots,
)
from lending_metrics.types import Granularity, TransactionType


def classify_transaction(
    delta_collateral: int,
    delta_debt: int,
    liquidate_usd: Decimal = BIGDECIMAL_ZERO,
) -> TransactionType | None:
    """
    Classify an event into exactly one transaction type. A liquidation also moves collateral, so
    it is checked first, followed by the collateral sign and then the debt sign.
    """

    if liquidate_usd != 0:
        return TransactionType.LIQUIDATE
    if delta_collateral > 0:
        return TransactionType.DEPOSIT
    if delta_collateral < 0:
        return TransactionType.WITHDRAW
    if delta_debt > 0:
        return TransactionType.BORROW
    if delta_debt < 0:
        return TransactionType.REPAY
    return None


def update_usage_metrics(
    ctx: MetricsContext,
    addresses: Iterable[str],
    transaction_type: TransactionType | None,
) -> tuple[UsageMetricsDailySnapshotTable, UsageMetricsHourlySnapshotTable]:
    """
    Track the accounts taking part in an event and count the event's transaction.

    Each distinct address is counted once as a unique user over the protocol's lifetime and once
    as an active user per daily and hourly bucket. The event is counted once in the daily and
    hourly transaction counters, regardless of how many accounts it involves.
    """

    daily = get_or_create_usage_daily_snapshot(ctx)
    hourly = get_or_create_usage_hourly_snapshot(ctx)

    for address in dict.fromkeys(get_checksum_address(a) for a in addresses):
        _, new_account = ctx.resolver.get_or_create_account(ctx.protocol, address)
        if new_account:
            logger.debug(f"New account {address}")

        _, new_daily = ctx.resolver.get_or_create_active_account(
            Granularity.DAILY, address, ctx.timestamp
        )
        if new_daily:
            daily.daily_active_users += 1

        _, new_hourly = ctx.resolver.get_or_create_active_account(
            Granularity.HOURLY, address, ctx.timestamp
        )
        if new_hourly:
            hourly.hourly_active_users += 1

    if transaction_type is not None:
        kind = activity_kind(transaction_type)
        daily.daily_transaction_count += 1
        hourly.hourly_transaction_count += 1
        setattr(daily, f"daily_{kind}_count", getattr(daily, f"daily_{kind}_count") + 1)
        setattr(hourly, f"hourly_{kind}_count", getattr(hourly, f"hourly_{kind}_count") + 1)

    refresh_usage_snapshots(ctx, daily, hourly)
    return daily, hourly
