from sqlalchemy.orm import Mapped

from .base import Base
from .types import ForeignKeyAccountId, PrimaryKeyStr


class AccountTable(Base):
    """
    Marker for an address that has acted at least once. Never mutated after creation.
    """

    __tablename__ = "accounts"

    id: Mapped[PrimaryKeyStr]


class ActiveAccountTable(Base):
    """
    Marker for an address active within one daily or hourly bucket.

    The id is `<granularity>-<address>-<bucket index>`; its creation is the only event that
    increments the matching snapshot's active user counter.
    """

    __tablename__ = "active_accounts"

    id: Mapped[PrimaryKeyStr]
    account_id: Mapped[ForeignKeyAccountId]
    granularity: Mapped[str]
    bucket_start: Mapped[str]
    bucket_end: Mapped[str]
