from decimal import Decimal

from lending_metrics.constants import BIGDECIMAL_ZERO
from lending_metrics.database.models import MarketTable, ProtocolTable
from lending_metrics.logging import logger
from lending_metrics.metrics.revenue import RevenueScope, apply_revenue
from lending_metrics.store import EntityStore
from lending_metrics.types import ProtocolSideRevenueType


def recompute_totals(protocol: ProtocolTable, store: EntityStore) -> None:
    """
    Re-derive the protocol deposit and borrow balances from every market in its market list,
    replacing the previous values.
    """

    total_deposit_balance_usd = BIGDECIMAL_ZERO
    total_borrow_balance_usd = BIGDECIMAL_ZERO

    for market_id in protocol.market_id_list:
        if (market := store.load(MarketTable, market_id)) is None:
            logger.warning(f"Market {market_id} listed by protocol {protocol.id} not found")
            continue
        total_deposit_balance_usd += market.total_deposit_balance_usd
        total_borrow_balance_usd += market.total_borrow_balance_usd

    protocol.total_deposit_balance_usd = total_deposit_balance_usd
    protocol.total_borrow_balance_usd = total_borrow_balance_usd
    protocol.total_value_locked_usd = total_deposit_balance_usd


def update_protocol(
    protocol: ProtocolTable,
    store: EntityStore,
    *,
    delta_collateral_usd: Decimal = BIGDECIMAL_ZERO,
    delta_debt_usd: Decimal = BIGDECIMAL_ZERO,
    liquidate_usd: Decimal = BIGDECIMAL_ZERO,
    new_total_revenue_usd: Decimal = BIGDECIMAL_ZERO,
    new_supply_side_revenue_usd: Decimal = BIGDECIMAL_ZERO,
    revenue_type: ProtocolSideRevenueType | None = None,
) -> None:
    """
    Accumulate one event's cumulative counters into the protocol, re-derive the balance totals
    from the markets and apply revenue with the protocol-side sub-type split.
    """

    if new_total_revenue_usd != 0 or new_supply_side_revenue_usd != 0:
        apply_revenue(
            protocol,
            scope=RevenueScope.CUMULATIVE,
            new_total_revenue_usd=new_total_revenue_usd,
            new_supply_side_revenue_usd=new_supply_side_revenue_usd,
            revenue_type=revenue_type,
        )

    if delta_collateral_usd > 0:
        protocol.cumulative_deposit_usd += delta_collateral_usd
    if delta_debt_usd > 0:
        protocol.cumulative_borrow_usd += delta_debt_usd
    if liquidate_usd > 0:
        protocol.cumulative_liquidate_usd += liquidate_usd

    recompute_totals(protocol, store)
