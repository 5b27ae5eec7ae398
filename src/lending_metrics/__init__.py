from .checksum_cache import get_checksum_address
from .config import settings
from .version import __version__

# isort: split

from . import bucketing, constants, database, exceptions, metrics, types
from .context import MetricsContext, MetricsDelta
from .dispatcher import EventDispatcher
from .events import (
    BorrowEvent,
    DepositEvent,
    LiquidateEvent,
    MarketListedEvent,
    MarketParametersUpdatedEvent,
    PriceUpdateEvent,
    RepayEvent,
    RevenueEvent,
    WithdrawEvent,
    event_id,
)
from .logging import logger
from .prices import PriceProvider, StoredTokenPriceProvider
from .resolver import EntityResolver
from .store import EntityStore, SqlAlchemyEntityStore

__all__ = (
    "BorrowEvent",
    "DepositEvent",
    "EntityResolver",
    "EntityStore",
    "EventDispatcher",
    "LiquidateEvent",
    "MarketListedEvent",
    "MarketParametersUpdatedEvent",
    "MetricsContext",
    "MetricsDelta",
    "PriceProvider",
    "PriceUpdateEvent",
    "RepayEvent",
    "RevenueEvent",
    "SqlAlchemyEntityStore",
    "StoredTokenPriceProvider",
    "WithdrawEvent",
    "__version__",
    "bucketing",
    "constants",
    "database",
    "event_id",
    "exceptions",
    "get_checksum_address",
    "logger",
    "metrics",
    "settings",
    "types",
)
