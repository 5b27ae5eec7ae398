from collections.abc import Callable
from decimal import Decimal

import pytest

from lending_metrics.context import MetricsContext
from lending_metrics.database.models import MarketTable
from lending_metrics.exceptions import InvalidEventInput
from lending_metrics.metrics.market import apply_market_delta, mark_to_market
from lending_metrics.resolver import MarketDefaults

from .conftest import ETH_A_MARKET_ID, WETH_ADDRESS, FixedPriceProvider

ONE_ETHER = 10**18


@pytest.fixture
def market(make_context: Callable[..., MetricsContext]) -> MarketTable:
    context = make_context()
    market, _ = context.resolver.get_or_create_market(
        context.protocol,
        ETH_A_MARKET_ID,
        MarketDefaults(protocol_id=context.protocol.id, name="ETH-A", input_token_id=WETH_ADDRESS),
    )
    return market


class TestMarkToMarket:
    def test_deposit_balance_follows_price(self, market: MarketTable):
        prices = FixedPriceProvider({WETH_ADDRESS: Decimal(2000)})

        # The decoder priced the deposit at a stale 1900 USD per token
        apply_market_delta(
            market,
            prices,
            delta_collateral=10 * ONE_ETHER,
            delta_collateral_usd=Decimal(19_000),
        )

        assert market.input_token_balance == 10 * ONE_ETHER
        assert market.input_token_price_usd == Decimal(2000)
        assert market.total_deposit_balance_usd == Decimal(20_000)
        assert market.total_value_locked_usd == Decimal(20_000)
        assert market.cumulative_deposit_usd == Decimal(19_000)

    def test_reprice_without_delta(self, market: MarketTable):
        apply_market_delta(
            market,
            FixedPriceProvider({WETH_ADDRESS: Decimal(2000)}),
            delta_collateral=2 * ONE_ETHER,
            delta_collateral_usd=Decimal(4000),
        )

        assert mark_to_market(market, FixedPriceProvider({WETH_ADDRESS: Decimal(1500)}))
        assert market.total_deposit_balance_usd == Decimal(3000)
        assert market.total_value_locked_usd == Decimal(3000)

    def test_token_decimals_respected(self, market: MarketTable):
        apply_market_delta(
            market,
            FixedPriceProvider({WETH_ADDRESS: Decimal(30_000)}, decimals=8),
            delta_collateral=3 * 10**8,
            delta_collateral_usd=Decimal(90_000),
        )
        assert market.total_deposit_balance_usd == Decimal(90_000)

    def test_missing_price_falls_back_to_delta(self, market: MarketTable):
        prices = FixedPriceProvider()

        assert not mark_to_market(market, prices)

        apply_market_delta(
            market,
            prices,
            delta_collateral=ONE_ETHER,
            delta_collateral_usd=Decimal(100),
        )
        apply_market_delta(
            market,
            prices,
            delta_collateral=-ONE_ETHER // 2,
            delta_collateral_usd=Decimal(-40),
        )

        assert market.total_deposit_balance_usd == Decimal(60)
        assert market.total_value_locked_usd == Decimal(60)
        assert market.cumulative_deposit_usd == Decimal(100)
        assert market.input_token_price_usd == Decimal(0)


class TestDeltas:
    def test_borrow_and_repay(self, market: MarketTable):
        prices = FixedPriceProvider()
        apply_market_delta(market, prices, delta_debt_usd=Decimal(500))
        apply_market_delta(market, prices, delta_debt_usd=Decimal(-200))

        assert market.total_borrow_balance_usd == Decimal(300)
        assert market.cumulative_borrow_usd == Decimal(500)

    def test_liquidation(self, market: MarketTable):
        apply_market_delta(
            market,
            FixedPriceProvider(),
            delta_collateral=-ONE_ETHER,
            delta_collateral_usd=Decimal(-50),
            delta_debt_usd=Decimal(-40),
            liquidate_usd=Decimal(50),
        )

        assert market.cumulative_liquidate_usd == Decimal(50)
        assert market.cumulative_deposit_usd == Decimal(0)
        assert market.cumulative_total_revenue_usd == Decimal(0)
        assert market.cumulative_protocol_side_revenue_usd == Decimal(0)

    def test_revenue(self, market: MarketTable):
        apply_market_delta(
            market,
            FixedPriceProvider(),
            new_total_revenue_usd=Decimal(12),
            new_supply_side_revenue_usd=Decimal(2),
        )

        assert market.cumulative_total_revenue_usd == Decimal(12)
        assert market.cumulative_supply_side_revenue_usd == Decimal(2)
        assert market.cumulative_protocol_side_revenue_usd == Decimal(10)

    def test_negative_revenue_leaves_market_unchanged(self, market: MarketTable):
        with pytest.raises(InvalidEventInput):
            apply_market_delta(
                market,
                FixedPriceProvider(),
                delta_collateral=ONE_ETHER,
                delta_collateral_usd=Decimal(100),
                new_total_revenue_usd=Decimal(-1),
            )

        assert market.input_token_balance == 0
        assert market.total_deposit_balance_usd == Decimal(0)
