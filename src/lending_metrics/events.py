"""
Decoded protocol events consumed by the dispatcher.

Position events identify their market either directly by `market_id` or by a protocol collateral
class identifier (`collateral_type`) mapped to a market by an earlier `MarketListedEvent`. USD
values are computed by the decoder at the event's block, so every event is self-contained.
"""

from dataclasses import dataclass
from decimal import Decimal

from hexbytes import HexBytes

from lending_metrics.constants import BIGDECIMAL_ZERO
from lending_metrics.types import ProtocolSideRevenueType


@dataclass(frozen=True, slots=True, kw_only=True)
class LendingEvent:
    block_number: int
    block_timestamp: int
    transaction_hash: HexBytes | bytes | str
    log_index: int

    @property
    def position(self) -> tuple[int, int]:
        return self.block_number, self.log_index


@dataclass(frozen=True, slots=True, kw_only=True)
class MarketEvent(LendingEvent):
    market_id: str | None = None
    collateral_type: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DepositEvent(MarketEvent):
    account: str
    amount: int
    amount_usd: Decimal


@dataclass(frozen=True, slots=True, kw_only=True)
class WithdrawEvent(MarketEvent):
    account: str
    amount: int
    amount_usd: Decimal


@dataclass(frozen=True, slots=True, kw_only=True)
class BorrowEvent(MarketEvent):
    account: str
    amount: int
    amount_usd: Decimal


@dataclass(frozen=True, slots=True, kw_only=True)
class RepayEvent(MarketEvent):
    account: str
    amount: int
    amount_usd: Decimal


@dataclass(frozen=True, slots=True, kw_only=True)
class LiquidateEvent(MarketEvent):
    """
    Collateral seized from `liquidatee` by `liquidator`. `amount` and `amount_usd` describe the
    seized collateral, `debt_repaid_usd` the debt written off. The liquidation penalty retained by
    the protocol may be reported as revenue in the same event.
    """

    liquidator: str
    liquidatee: str
    amount: int
    amount_usd: Decimal
    debt_repaid_usd: Decimal = BIGDECIMAL_ZERO
    profit_usd: Decimal | None = None
    new_total_revenue_usd: Decimal = BIGDECIMAL_ZERO
    new_supply_side_revenue_usd: Decimal = BIGDECIMAL_ZERO


@dataclass(frozen=True, slots=True, kw_only=True)
class PriceUpdateEvent(LendingEvent):
    token_id: str
    price_usd: Decimal


@dataclass(frozen=True, slots=True, kw_only=True)
class RevenueEvent(MarketEvent):
    """
    Revenue accrued by the protocol, e.g. a stability fee collection. Revenue without a market
    reference (e.g. stabilization module fees) only updates the protocol.
    """

    new_total_revenue_usd: Decimal
    new_supply_side_revenue_usd: Decimal = BIGDECIMAL_ZERO
    revenue_type: ProtocolSideRevenueType


@dataclass(frozen=True, slots=True, kw_only=True)
class MarketListedEvent(LendingEvent):
    market_id: str
    collateral_type: str | None = None
    name: str
    input_token_id: str
    input_token_name: str = "unknown"
    input_token_symbol: str = "unknown"
    input_token_decimals: int = 18
    maximum_ltv: Decimal = BIGDECIMAL_ZERO
    liquidation_threshold: Decimal = BIGDECIMAL_ZERO
    liquidation_penalty: Decimal = BIGDECIMAL_ZERO


@dataclass(frozen=True, slots=True, kw_only=True)
class MarketParametersUpdatedEvent(MarketEvent):
    """
    Risk parameter change. Fields left as None are unchanged.
    """

    maximum_ltv: Decimal | None = None
    liquidation_threshold: Decimal | None = None
    liquidation_penalty: Decimal | None = None
    is_active: bool | None = None
    can_borrow_from: bool | None = None


type PositionEvent = DepositEvent | WithdrawEvent | BorrowEvent | RepayEvent | LiquidateEvent
type Event = (
    PositionEvent
    | PriceUpdateEvent
    | RevenueEvent
    | MarketListedEvent
    | MarketParametersUpdatedEvent
)


def normalized_transaction_hash(event: LendingEvent) -> str:
    return HexBytes(event.transaction_hash).to_0x_hex()


def event_id(event: LendingEvent) -> str:
    """
    Get the replay key `<transaction hash>-<log index>` of an event, with the hash normalized to
    lowercase 0x-prefixed hex.
    """

    return f"{normalized_transaction_hash(event)}-{event.log_index}"
