from collections.abc import Callable
from decimal import Decimal

from lending_metrics.context import MetricsContext, MetricsDelta
from lending_metrics.database.models import MarketTable
from lending_metrics.metrics.snapshots import (
    period_contribution,
    update_financials_snapshot,
    update_market_snapshots,
)
from lending_metrics.types import ProtocolSideRevenueType, TransactionType

from .conftest import ETH_A_MARKET_ID

DEPOSIT_100 = MetricsDelta(
    transaction_type=TransactionType.DEPOSIT,
    delta_collateral=1,
    delta_collateral_usd=Decimal(100),
)
WITHDRAW_40 = MetricsDelta(
    transaction_type=TransactionType.WITHDRAW,
    delta_collateral=-1,
    delta_collateral_usd=Decimal(-40),
)


def _market(context: MetricsContext) -> MarketTable:
    market, _ = context.resolver.get_or_create_market(context.protocol, ETH_A_MARKET_ID)
    return market


def test_period_contribution_is_positive_magnitude():
    assert period_contribution(DEPOSIT_100) == ("deposit", Decimal(100))
    assert period_contribution(WITHDRAW_40) == ("withdraw", Decimal(40))
    assert period_contribution(
        MetricsDelta(
            transaction_type=TransactionType.REPAY, delta_debt=-1, delta_debt_usd=Decimal(-7)
        )
    ) == ("repay", Decimal(7))
    assert period_contribution(MetricsDelta(new_total_revenue_usd=Decimal(1))) is None


def test_financials_carry_and_period_fields(make_context: Callable[..., MetricsContext]):
    context = make_context(86_000, 10)
    context.protocol.total_deposit_balance_usd = Decimal(100)
    context.protocol.cumulative_deposit_usd = Decimal(100)

    snapshot = update_financials_snapshot(context, DEPOSIT_100)
    assert snapshot.id == "0"
    assert snapshot.daily_deposit_usd == Decimal(100)
    assert snapshot.total_deposit_balance_usd == Decimal(100)

    context = make_context(86_100, 11)
    context.protocol.total_deposit_balance_usd = Decimal(60)
    snapshot = update_financials_snapshot(context, WITHDRAW_40)

    assert snapshot.daily_deposit_usd == Decimal(100)
    assert snapshot.daily_withdraw_usd == Decimal(40)
    assert snapshot.total_deposit_balance_usd == Decimal(60)
    assert snapshot.cumulative_deposit_usd == Decimal(100)
    assert snapshot.block_number == 11
    assert snapshot.timestamp == 86_100


def test_financials_revenue(make_context: Callable[..., MetricsContext]):
    context = make_context()
    delta = MetricsDelta(
        new_total_revenue_usd=Decimal(10),
        new_supply_side_revenue_usd=Decimal(3),
        revenue_type=ProtocolSideRevenueType.STABILITY_FEE,
    )
    update_financials_snapshot(context, delta)
    snapshot = update_financials_snapshot(context, delta)

    assert snapshot.daily_total_revenue_usd == Decimal(20)
    assert snapshot.daily_supply_side_revenue_usd == Decimal(6)
    assert snapshot.daily_protocol_side_revenue_usd == Decimal(14)
    assert snapshot.daily_protocol_side_stability_fee_revenue_usd == Decimal(14)


def test_day_boundary_starts_new_snapshots(make_context: Callable[..., MetricsContext]):
    before = make_context(86_399, 1)
    market = _market(before)
    before_financials = update_financials_snapshot(before, DEPOSIT_100)
    before_daily, before_hourly = update_market_snapshots(before, market, DEPOSIT_100)

    after = make_context(86_400, 2)
    after_financials = update_financials_snapshot(after, DEPOSIT_100)
    after_daily, after_hourly = update_market_snapshots(after, market, DEPOSIT_100)

    assert before_financials.id == "0"
    assert after_financials.id == "1"
    assert before_daily.id == f"{ETH_A_MARKET_ID}-0"
    assert after_daily.id == f"{ETH_A_MARKET_ID}-1"
    assert before_hourly.id == f"{ETH_A_MARKET_ID}-23"
    assert after_hourly.id == f"{ETH_A_MARKET_ID}-24"

    for snapshot in (before_financials, after_financials, before_daily, after_daily):
        assert snapshot.daily_deposit_usd == Decimal(100)
    for snapshot in (before_hourly, after_hourly):
        assert snapshot.hourly_deposit_usd == Decimal(100)


def test_market_snapshot_carries_market_values(make_context: Callable[..., MetricsContext]):
    context = make_context()
    market = _market(context)
    market.input_token_balance = 5
    market.total_deposit_balance_usd = Decimal(500)
    market.cumulative_total_revenue_usd = Decimal(3)

    daily, hourly = update_market_snapshots(context, market)

    for snapshot in (daily, hourly):
        assert snapshot.market_id == ETH_A_MARKET_ID
        assert snapshot.input_token_balance == 5
        assert snapshot.total_deposit_balance_usd == Decimal(500)
        assert snapshot.cumulative_total_revenue_usd == Decimal(3)
    assert daily.daily_deposit_usd == Decimal(0)
    assert hourly.hourly_total_revenue_usd == Decimal(0)


def test_market_snapshot_revenue(make_context: Callable[..., MetricsContext]):
    context = make_context()
    market = _market(context)

    daily, hourly = update_market_snapshots(
        context,
        market,
        MetricsDelta(new_total_revenue_usd=Decimal(4), new_supply_side_revenue_usd=Decimal(1)),
    )

    assert daily.daily_protocol_side_revenue_usd == Decimal(3)
    assert hourly.hourly_protocol_side_revenue_usd == Decimal(3)
