from decimal import Decimal

from lending_metrics.checksum_cache import get_checksum_address
from lending_metrics.context import MetricsContext
from lending_metrics.database.models import (
    BorrowTable,
    DepositTable,
    LiquidateTable,
    MarketTable,
    RepayTable,
    TransactionTable,
    WithdrawTable,
)
from lending_metrics.events import LendingEvent, event_id, normalized_transaction_hash
from lending_metrics.types import TransactionType

TRANSACTION_TABLES: dict[TransactionType, type[TransactionTable]] = {
    TransactionType.DEPOSIT: DepositTable,
    TransactionType.WITHDRAW: WithdrawTable,
    TransactionType.BORROW: BorrowTable,
    TransactionType.REPAY: RepayTable,
    TransactionType.LIQUIDATE: LiquidateTable,
}


def transaction_id(transaction_type: TransactionType, event: LendingEvent) -> str:
    return f"{transaction_type.value}-{event_id(event)}"


def record_transaction(
    ctx: MetricsContext,
    *,
    transaction_type: TransactionType,
    event: LendingEvent,
    market: MarketTable,
    account: str,
    amount: int,
    amount_usd: Decimal,
    liquidatee: str | None = None,
    profit_usd: Decimal | None = None,
) -> TransactionTable:
    """
    Write the ledger record for a transaction event, or return the existing record with the same
    id unchanged.

    `account` is the acting address: the depositor, withdrawer, borrower, repayer or liquidator.
    """

    record_id = transaction_id(transaction_type, event)
    kind = TRANSACTION_TABLES[transaction_type]
    if (existing := ctx.store.load(kind, record_id)) is not None:
        return existing

    account = get_checksum_address(account)
    match transaction_type:
        case TransactionType.DEPOSIT | TransactionType.REPAY | TransactionType.LIQUIDATE:
            from_, to = account, market.id
        case TransactionType.WITHDRAW | TransactionType.BORROW:
            from_, to = market.id, account

    match transaction_type:
        case TransactionType.BORROW | TransactionType.REPAY:
            asset = ctx.protocol_settings.debt_token
        case _:
            asset = market.input_token_id

    fields = {
        "hash": normalized_transaction_hash(event),
        "log_index": event.log_index,
        "protocol_id": ctx.protocol.id,
        "market_id": market.id,
        "to": to,
        "from_": from_,
        "asset": asset,
        "amount": abs(amount),
        "amount_usd": abs(amount_usd),
        "block_number": event.block_number,
        "timestamp": event.block_timestamp,
    }
    if transaction_type is TransactionType.LIQUIDATE:
        fields["liquidatee"] = (
            get_checksum_address(liquidatee) if liquidatee is not None else None
        )
        fields["profit_usd"] = profit_usd

    return ctx.store.create(kind, record_id, fields)
