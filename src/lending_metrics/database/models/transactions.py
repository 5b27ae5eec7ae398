from sqlalchemy.orm import Mapped

from .base import Address, Base, BigDecimal, BigInteger
from .types import (
    ForeignKeyMarketId,
    ForeignKeyProtocolId,
    PrimaryKeyStr,
    TransactionHash,
)


class TransactionTable(Base):
    """
    Append-only ledger line, one per qualifying event. The id is
    `<TYPE>-<transaction hash>-<log index>` so a replayed event maps onto the existing row.
    """

    __tablename__ = "transactions"
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_on": "kind",
        "polymorphic_identity": "base",
    }

    id: Mapped[PrimaryKeyStr]
    kind: Mapped[str]
    hash: Mapped[TransactionHash]
    log_index: Mapped[int]
    protocol_id: Mapped[ForeignKeyProtocolId]
    market_id: Mapped[ForeignKeyMarketId]
    to: Mapped[str]
    from_: Mapped[str]
    asset: Mapped[Address]
    amount: Mapped[BigInteger]
    amount_usd: Mapped[BigDecimal]
    block_number: Mapped[int]
    timestamp: Mapped[int]


class DepositTable(TransactionTable):
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "deposit",
    }


class WithdrawTable(TransactionTable):
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "withdraw",
    }


class BorrowTable(TransactionTable):
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "borrow",
    }


class RepayTable(TransactionTable):
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "repay",
    }


class LiquidateTable(TransactionTable):
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "liquidate",
    }

    liquidatee: Mapped[str | None]
    profit_usd: Mapped[BigDecimal | None]


class ProcessedEventTable(Base):
    """
    Replay marker keyed by `<transaction hash>-<log index>`, written in the same commit as the
    event's mutations.
    """

    __tablename__ = "processed_events"

    id: Mapped[PrimaryKeyStr]
    block_number: Mapped[int]
    log_index: Mapped[int]
