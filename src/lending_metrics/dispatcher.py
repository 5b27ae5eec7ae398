"""
Event dispatcher.

Each event is applied as one unit of work: the sub-updates run in a fixed order (market aggregate,
protocol aggregate and revenue, usage, snapshots, ledger) and are committed together with the
event's replay marker. A store failure rolls back everything written for the event.
"""

import dataclasses
from collections.abc import Callable, Iterable
from decimal import Decimal
from typing import Any

import tqdm

from lending_metrics.checksum_cache import get_checksum_address
from lending_metrics.config import ProtocolSettings, settings
from lending_metrics.context import MetricsContext, MetricsDelta
from lending_metrics.database.models import MarketTable, ProcessedEventTable
from lending_metrics.events import (
    BorrowEvent,
    DepositEvent,
    Event,
    LendingEvent,
    LiquidateEvent,
    MarketEvent,
    MarketListedEvent,
    MarketParametersUpdatedEvent,
    PositionEvent,
    PriceUpdateEvent,
    RepayEvent,
    RevenueEvent,
    WithdrawEvent,
    event_id,
)
from lending_metrics.exceptions import (
    EntityStoreError,
    EventOrderingError,
    InvalidEventInput,
    MissingReference,
    UnknownEventType,
)
from lending_metrics.ledger import record_transaction
from lending_metrics.logging import logger
from lending_metrics.metrics.market import apply_market_delta, mark_to_market
from lending_metrics.metrics.protocol import recompute_totals, update_protocol
from lending_metrics.metrics.revenue import check_revenue_inputs
from lending_metrics.metrics.snapshots import update_financials_snapshot, update_market_snapshots
from lending_metrics.metrics.usage import classify_transaction, update_usage_metrics
from lending_metrics.prices import PriceProvider, StoredTokenPriceProvider
from lending_metrics.resolver import EntityResolver, MarketDefaults, TokenDefaults
from lending_metrics.store import EntityStore
from lending_metrics.types import ProtocolSideRevenueType, TransactionType

RISK_PARAMETERS = (
    "maximum_ltv",
    "liquidation_threshold",
    "liquidation_penalty",
    "is_active",
    "can_borrow_from",
)


def _check_non_negative(**values: int | Decimal) -> None:
    for name, value in values.items():
        if value < 0:
            msg = f"{name} must be non-negative, got {value}"
            raise InvalidEventInput(msg)


def _resolve_market(
    context: MetricsContext,
    event: MarketEvent,
    *,
    create: bool,
) -> MarketTable:
    """
    Get the market referenced by an event, either directly by id or through its collateral type.
    With `create`, a market id seen for the first time is registered with default values.

    Raises `MissingReference` if the reference cannot be resolved.
    """

    if event.market_id is not None:
        market_id = get_checksum_address(event.market_id)
        if create:
            market, _ = context.resolver.get_or_create_market(
                context.protocol,
                market_id,
                MarketDefaults(
                    protocol_id=context.protocol.id,
                    created_timestamp=context.timestamp,
                    created_block_number=context.block_number,
                ),
            )
            return market
        if (market := context.store.load(MarketTable, market_id)) is None:
            raise MissingReference(kind="Market", reference=market_id)
        return market

    if event.collateral_type is not None:
        return context.resolver.get_market_for_collateral_type(event.collateral_type)

    raise MissingReference(kind="Market for event", reference=event_id(event))


def _find_market(
    context: MetricsContext,
    event: MarketEvent,
    *,
    create: bool,
) -> MarketTable | None:
    try:
        return _resolve_market(context, event, create=create)
    except MissingReference as exc:
        logger.warning(f"Skipping market updates for event {event_id(event)}: {exc}")
        return None


def _position_delta(event: PositionEvent) -> MetricsDelta:
    """
    Translate a position event into signed deltas. Raises `InvalidEventInput` for negative
    amounts before anything is written.
    """

    match event:
        case DepositEvent():
            _check_non_negative(amount=event.amount, amount_usd=event.amount_usd)
            delta = MetricsDelta(
                delta_collateral=event.amount,
                delta_collateral_usd=event.amount_usd,
            )
        case WithdrawEvent():
            _check_non_negative(amount=event.amount, amount_usd=event.amount_usd)
            delta = MetricsDelta(
                delta_collateral=-event.amount,
                delta_collateral_usd=-event.amount_usd,
            )
        case BorrowEvent():
            _check_non_negative(amount=event.amount, amount_usd=event.amount_usd)
            delta = MetricsDelta(
                delta_debt=event.amount,
                delta_debt_usd=event.amount_usd,
            )
        case RepayEvent():
            _check_non_negative(amount=event.amount, amount_usd=event.amount_usd)
            delta = MetricsDelta(
                delta_debt=-event.amount,
                delta_debt_usd=-event.amount_usd,
            )
        case LiquidateEvent():
            _check_non_negative(
                amount=event.amount,
                amount_usd=event.amount_usd,
                debt_repaid_usd=event.debt_repaid_usd,
            )
            check_revenue_inputs(event.new_total_revenue_usd, event.new_supply_side_revenue_usd)
            # A liquidation without a USD valuation is still a liquidation
            delta = MetricsDelta(
                transaction_type=TransactionType.LIQUIDATE,
                delta_collateral=-event.amount,
                delta_collateral_usd=-event.amount_usd,
                delta_debt_usd=-event.debt_repaid_usd,
                liquidate_usd=event.amount_usd,
                new_total_revenue_usd=event.new_total_revenue_usd,
                new_supply_side_revenue_usd=event.new_supply_side_revenue_usd,
                revenue_type=ProtocolSideRevenueType.LIQUIDATION,
            )

    if delta.transaction_type is not None:
        return delta
    return dataclasses.replace(
        delta,
        transaction_type=classify_transaction(
            delta.delta_collateral, delta.delta_debt, delta.liquidate_usd
        ),
    )


def _process_position_event(context: MetricsContext, event: PositionEvent) -> None:
    match event:
        case LiquidateEvent():
            acting_account = event.liquidator
            addresses: tuple[str, ...] = (event.liquidator, event.liquidatee)
        case _:
            acting_account = event.account
            addresses = (event.account,)

    try:
        delta = _position_delta(event)
    except InvalidEventInput as exc:
        logger.warning(f"Skipping financial updates for event {event_id(event)}: {exc}")
        update_usage_metrics(context, addresses, None)
        return

    # Liquidations must reference a known market, other position events may list a new one
    market = _find_market(context, event, create=not isinstance(event, LiquidateEvent))

    if market is not None:
        apply_market_delta(
            market,
            context.prices,
            delta_collateral=delta.delta_collateral,
            delta_collateral_usd=delta.delta_collateral_usd,
            delta_debt_usd=delta.delta_debt_usd,
            liquidate_usd=delta.liquidate_usd,
            new_total_revenue_usd=delta.new_total_revenue_usd,
            new_supply_side_revenue_usd=delta.new_supply_side_revenue_usd,
        )
        context.store.save(market)

        update_protocol(
            context.protocol,
            context.store,
            delta_collateral_usd=delta.delta_collateral_usd,
            delta_debt_usd=delta.delta_debt_usd,
            liquidate_usd=delta.liquidate_usd,
            new_total_revenue_usd=delta.new_total_revenue_usd,
            new_supply_side_revenue_usd=delta.new_supply_side_revenue_usd,
            revenue_type=delta.revenue_type,
        )
        context.store.save(context.protocol)

    update_usage_metrics(context, addresses, delta.transaction_type)

    if market is None:
        return

    update_financials_snapshot(context, delta)
    update_market_snapshots(context, market, delta)

    if delta.transaction_type is None:
        return

    record_transaction(
        context,
        transaction_type=delta.transaction_type,
        event=event,
        market=market,
        account=acting_account,
        amount=event.amount,
        amount_usd=event.amount_usd,
        liquidatee=event.liquidatee if isinstance(event, LiquidateEvent) else None,
        profit_usd=event.profit_usd if isinstance(event, LiquidateEvent) else None,
    )


def _process_revenue_event(context: MetricsContext, event: RevenueEvent) -> None:
    try:
        check_revenue_inputs(event.new_total_revenue_usd, event.new_supply_side_revenue_usd)
    except InvalidEventInput as exc:
        logger.warning(f"Skipping revenue event {event_id(event)}: {exc}")
        return

    delta = MetricsDelta(
        new_total_revenue_usd=event.new_total_revenue_usd,
        new_supply_side_revenue_usd=event.new_supply_side_revenue_usd,
        revenue_type=event.revenue_type,
    )

    # Revenue without a market reference is protocol-wide
    market = None
    if event.market_id is not None or event.collateral_type is not None:
        market = _find_market(context, event, create=True)

    if market is not None:
        apply_market_delta(
            market,
            context.prices,
            new_total_revenue_usd=delta.new_total_revenue_usd,
            new_supply_side_revenue_usd=delta.new_supply_side_revenue_usd,
        )
        context.store.save(market)

    update_protocol(
        context.protocol,
        context.store,
        new_total_revenue_usd=delta.new_total_revenue_usd,
        new_supply_side_revenue_usd=delta.new_supply_side_revenue_usd,
        revenue_type=delta.revenue_type,
    )
    context.store.save(context.protocol)

    update_financials_snapshot(context, delta)
    if market is not None:
        update_market_snapshots(context, market, delta)


def _process_price_update_event(context: MetricsContext, event: PriceUpdateEvent) -> None:
    try:
        _check_non_negative(price_usd=event.price_usd)
    except InvalidEventInput as exc:
        logger.warning(f"Skipping price update {event_id(event)}: {exc}")
        return

    token_id = get_checksum_address(event.token_id)
    token = context.resolver.get_or_create_token(token_id)
    token.last_price_usd = event.price_usd
    token.last_price_block_number = event.block_number
    context.store.save(token)

    for market_id in context.protocol.market_id_list:
        if (market := context.store.load(MarketTable, market_id)) is None:
            logger.warning(f"Market {market_id} listed by protocol {context.protocol.id} not found")
            continue
        if market.input_token_id != token_id:
            continue
        mark_to_market(market, context.prices)
        context.store.save(market)
        update_market_snapshots(context, market)

    recompute_totals(context.protocol, context.store)
    context.store.save(context.protocol)
    update_financials_snapshot(context)


def _process_market_listed_event(context: MetricsContext, event: MarketListedEvent) -> None:
    try:
        _check_non_negative(
            maximum_ltv=event.maximum_ltv,
            liquidation_threshold=event.liquidation_threshold,
            liquidation_penalty=event.liquidation_penalty,
        )
    except InvalidEventInput as exc:
        logger.warning(f"Skipping market listing {event_id(event)}: {exc}")
        return

    token_id = get_checksum_address(event.input_token_id)
    context.resolver.get_or_create_token(
        token_id,
        TokenDefaults(
            name=event.input_token_name,
            symbol=event.input_token_symbol,
            decimals=event.input_token_decimals,
        ),
    )

    market, created = context.resolver.get_or_create_market(
        context.protocol,
        get_checksum_address(event.market_id),
        MarketDefaults(
            protocol_id=context.protocol.id,
            name=event.name,
            input_token_id=token_id,
            created_timestamp=context.timestamp,
            created_block_number=context.block_number,
            maximum_ltv=event.maximum_ltv,
            liquidation_threshold=event.liquidation_threshold,
            liquidation_penalty=event.liquidation_penalty,
        ),
    )
    if not created:
        # Referenced by an earlier event before it was listed
        logger.debug(f"Updating listing details of existing market {market.id}")
        market.name = event.name
        market.input_token_id = token_id
        market.maximum_ltv = event.maximum_ltv
        market.liquidation_threshold = event.liquidation_threshold
        market.liquidation_penalty = event.liquidation_penalty
        context.store.save(market)

    if event.collateral_type is not None:
        mapping = context.resolver.get_or_create_collateral_type(event.collateral_type, market.id)
        if mapping.market_id != market.id:
            logger.info(
                f"Remapping collateral type {event.collateral_type} "
                f"from market {mapping.market_id} to {market.id}"
            )
            mapping.market_id = market.id
            context.store.save(mapping)


def _process_market_parameters_updated_event(
    context: MetricsContext,
    event: MarketParametersUpdatedEvent,
) -> None:
    try:
        _check_non_negative(
            **{
                name: value
                for name in ("maximum_ltv", "liquidation_threshold", "liquidation_penalty")
                if (value := getattr(event, name)) is not None
            }
        )
    except InvalidEventInput as exc:
        logger.warning(f"Skipping parameter update {event_id(event)}: {exc}")
        return

    if (market := _find_market(context, event, create=False)) is None:
        return

    for name in RISK_PARAMETERS:
        if (value := getattr(event, name)) is not None:
            setattr(market, name, value)
    context.store.save(market)


EVENT_HANDLERS: dict[type[LendingEvent], Callable[[MetricsContext, Any], None]] = {
    DepositEvent: _process_position_event,
    WithdrawEvent: _process_position_event,
    BorrowEvent: _process_position_event,
    RepayEvent: _process_position_event,
    LiquidateEvent: _process_position_event,
    RevenueEvent: _process_revenue_event,
    PriceUpdateEvent: _process_price_update_event,
    MarketListedEvent: _process_market_listed_event,
    MarketParametersUpdatedEvent: _process_market_parameters_updated_event,
}


class EventDispatcher:
    """
    Applies decoded events to the entity store, one committed unit of work per event.
    """

    def __init__(
        self,
        store: EntityStore,
        *,
        prices: PriceProvider | None = None,
        protocol_settings: ProtocolSettings | None = None,
    ) -> None:
        self.store = store
        self.resolver = EntityResolver(store)
        self.prices = prices if prices is not None else StoredTokenPriceProvider(store)
        self.protocol_settings = (
            protocol_settings if protocol_settings is not None else settings.protocol
        )
        self.last_position: tuple[int, int] | None = None

    def process(self, event: Event) -> bool:
        """
        Apply one event and commit.

        Returns False if the event was already processed. Raises `EventOrderingError` if the
        event precedes the last processed event. Any exception raised while applying the event,
        including `EntityStoreError`, rolls back the event's changes before propagating.
        """

        if (handler := EVENT_HANDLERS.get(type(event))) is None:
            raise UnknownEventType(type(event).__name__)

        replay_key = event_id(event)
        try:
            if self.store.load(ProcessedEventTable, replay_key) is not None:
                logger.debug(f"Skipping already processed event {replay_key}")
                return False

            if self.last_position is not None and event.position < self.last_position:
                raise EventOrderingError(previous=self.last_position, current=event.position)

            # The protocol is loaded again for every event, since a commit or rollback expires
            # the previously loaded instance
            context = MetricsContext(
                store=self.store,
                resolver=self.resolver,
                prices=self.prices,
                protocol_settings=self.protocol_settings,
                protocol=self.resolver.get_or_create_protocol(self.protocol_settings),
                block_number=event.block_number,
                timestamp=event.block_timestamp,
            )
            handler(context, event)

            self.store.create(
                ProcessedEventTable,
                replay_key,
                {"block_number": event.block_number, "log_index": event.log_index},
            )
            self.store.commit()
        except EntityStoreError:
            logger.error(f"Store failure while processing event {replay_key}, rolling back")
            self.store.rollback()
            raise
        except Exception:
            # Nothing written for a failed event may reach a later commit
            logger.error(f"Failed to process event {replay_key}, rolling back")
            self.store.rollback()
            raise

        self.last_position = event.position
        return True

    def process_events(self, events: Iterable[Event], *, no_progress: bool = True) -> int:
        """
        Apply a stream of events in order.

        Returns the number of events applied, excluding replays.
        """

        processed = 0
        for event in tqdm.tqdm(
            events,
            desc="Processing events",
            leave=False,
            disable=no_progress,
        ):
            if self.process(event):
                processed += 1
        return processed
