import logging
from collections.abc import Callable, Generator
from decimal import Decimal

import pytest
from hexbytes import HexBytes
from sqlalchemy.orm import Session

from lending_metrics.checksum_cache import get_checksum_address
from lending_metrics.config import ProtocolSettings
from lending_metrics.context import MetricsContext
from lending_metrics.database import get_in_memory_engine
from lending_metrics.dispatcher import EventDispatcher
from lending_metrics.logging import logger
from lending_metrics.prices import StoredTokenPriceProvider
from lending_metrics.resolver import EntityResolver
from lending_metrics.store import SqlAlchemyEntityStore

ALICE = get_checksum_address("0x1111111111111111111111111111111111111111")
BOB = get_checksum_address("0x2222222222222222222222222222222222222222")
CAROL = get_checksum_address("0x3333333333333333333333333333333333333333")

WETH_ADDRESS = get_checksum_address("0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2")
WBTC_ADDRESS = get_checksum_address("0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599")

# Maker join adapters for ETH-A and WBTC-A
ETH_A_MARKET_ID = get_checksum_address("0x2F0b23f53734252Bda2277357e97e1517d6B042A")
WBTC_A_MARKET_ID = get_checksum_address("0xBF72Da2Bd84c5170618Fbe5914B0ECA9638d5eb5")

# 2023-11-14 00:00:00 UTC
DAY_START = 1_699_920_000


class FixedPriceProvider:
    """
    Price provider with a static price table.
    """

    def __init__(self, prices: dict[str, Decimal] | None = None, decimals: int = 18) -> None:
        self.prices = prices or {}
        self._decimals = decimals

    def current_price_usd(self, token_id: str) -> Decimal | None:
        return self.prices.get(token_id)

    def decimals(self, token_id: str) -> int:  # noqa: ARG002
        return self._decimals


def tx_hash(n: int) -> HexBytes:
    return HexBytes(n.to_bytes(32, "big"))


@pytest.fixture(scope="session", autouse=True)
def _set_lending_metrics_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


@pytest.fixture
def session() -> Generator[Session, None, None]:
    engine = get_in_memory_engine()
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def store(session: Session) -> SqlAlchemyEntityStore:
    return SqlAlchemyEntityStore(session)


@pytest.fixture
def resolver(store: SqlAlchemyEntityStore) -> EntityResolver:
    return EntityResolver(store)


@pytest.fixture
def protocol_settings() -> ProtocolSettings:
    return ProtocolSettings()


@pytest.fixture
def dispatcher(
    store: SqlAlchemyEntityStore,
    protocol_settings: ProtocolSettings,
) -> EventDispatcher:
    return EventDispatcher(store, protocol_settings=protocol_settings)


@pytest.fixture
def make_context(
    store: SqlAlchemyEntityStore,
    resolver: EntityResolver,
    protocol_settings: ProtocolSettings,
) -> Callable[..., MetricsContext]:
    """
    Build a metrics context for an event at the given timestamp and block.
    """

    def _make_context(timestamp: int = DAY_START, block_number: int = 1) -> MetricsContext:
        return MetricsContext(
            store=store,
            resolver=resolver,
            prices=StoredTokenPriceProvider(store),
            protocol_settings=protocol_settings,
            protocol=resolver.get_or_create_protocol(protocol_settings),
            block_number=block_number,
            timestamp=timestamp,
        )

    return _make_context
