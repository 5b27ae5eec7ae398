from dataclasses import dataclass
from decimal import Decimal

from lending_metrics.config import ProtocolSettings
from lending_metrics.constants import BIGDECIMAL_ZERO
from lending_metrics.database.models import ProtocolTable
from lending_metrics.prices import PriceProvider
from lending_metrics.resolver import EntityResolver
from lending_metrics.store import EntityStore
from lending_metrics.types import ProtocolSideRevenueType, TransactionType


@dataclass
class MetricsContext:
    """Context object passed to metric updaters for one event, holding the protocol root."""

    store: EntityStore
    resolver: EntityResolver
    prices: PriceProvider
    protocol_settings: ProtocolSettings
    protocol: ProtocolTable
    block_number: int
    timestamp: int


@dataclass(frozen=True, slots=True)
class MetricsDelta:
    """
    Signed contribution of one event to the aggregates.

    Collateral deltas are positive for deposits and negative for withdrawals; debt deltas are
    positive for borrows and negative for repayments.
    """

    transaction_type: TransactionType | None = None
    delta_collateral: int = 0
    delta_collateral_usd: Decimal = BIGDECIMAL_ZERO
    delta_debt: int = 0
    delta_debt_usd: Decimal = BIGDECIMAL_ZERO
    liquidate_usd: Decimal = BIGDECIMAL_ZERO
    new_total_revenue_usd: Decimal = BIGDECIMAL_ZERO
    new_supply_side_revenue_usd: Decimal = BIGDECIMAL_ZERO
    revenue_type: ProtocolSideRevenueType | None = None

    @property
    def has_revenue(self) -> bool:
        return self.new_total_revenue_usd != 0 or self.new_supply_side_revenue_usd != 0
