from decimal import Decimal

from lending_metrics.constants import BIGDECIMAL_ZERO
from lending_metrics.database.models import MarketTable
from lending_metrics.logging import logger
from lending_metrics.metrics.revenue import RevenueScope, apply_revenue
from lending_metrics.prices import PriceProvider, to_decimal_units


def mark_to_market(market: MarketTable, prices: PriceProvider) -> bool:
    """
    Re-price the market's deposit balance from its input token balance at the current price.

    Returns False without changing the market if no price is available.
    """

    price = prices.current_price_usd(market.input_token_id)
    if price is None:
        return False

    market.input_token_price_usd = price
    market.total_deposit_balance_usd = (
        to_decimal_units(market.input_token_balance, prices.decimals(market.input_token_id))
        * price
    )
    market.total_value_locked_usd = market.total_deposit_balance_usd
    return True


def apply_market_delta(
    market: MarketTable,
    prices: PriceProvider,
    *,
    delta_collateral: int = 0,
    delta_collateral_usd: Decimal = BIGDECIMAL_ZERO,
    delta_debt_usd: Decimal = BIGDECIMAL_ZERO,
    liquidate_usd: Decimal = BIGDECIMAL_ZERO,
    new_total_revenue_usd: Decimal = BIGDECIMAL_ZERO,
    new_supply_side_revenue_usd: Decimal = BIGDECIMAL_ZERO,
) -> None:
    """
    Apply one event's deltas to a market.

    Revenue inputs are checked before any field changes, so a rejected event leaves the market
    untouched.
    """

    if new_total_revenue_usd != 0 or new_supply_side_revenue_usd != 0:
        apply_revenue(
            market,
            scope=RevenueScope.CUMULATIVE,
            new_total_revenue_usd=new_total_revenue_usd,
            new_supply_side_revenue_usd=new_supply_side_revenue_usd,
        )

    market.input_token_balance += delta_collateral

    if not mark_to_market(market, prices):
        logger.debug(
            f"No price for {market.input_token_id}, "
            f"accumulating deposit balance of market {market.id} by {delta_collateral_usd}"
        )
        market.total_deposit_balance_usd += delta_collateral_usd
        market.total_value_locked_usd = market.total_deposit_balance_usd

    if delta_collateral > 0:
        market.cumulative_deposit_usd += delta_collateral_usd

    market.total_borrow_balance_usd += delta_debt_usd
    if delta_debt_usd > 0:
        market.cumulative_borrow_usd += delta_debt_usd

    if liquidate_usd > 0:
        market.cumulative_liquidate_usd += liquidate_usd
