from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from lending_metrics.database.models import MarketTable, TokenTable
from lending_metrics.exceptions import EntityStoreError
from lending_metrics.resolver import MarketDefaults, TokenDefaults, as_fields
from lending_metrics.store import SqlAlchemyEntityStore

from .conftest import ETH_A_MARKET_ID, WETH_ADDRESS


def test_load_missing_entity(store: SqlAlchemyEntityStore):
    assert store.load(TokenTable, WETH_ADDRESS) is None


def test_create_and_load(store: SqlAlchemyEntityStore, session: Session):
    token = store.create(
        TokenTable,
        WETH_ADDRESS,
        as_fields(TokenDefaults(name="Wrapped Ether", symbol="WETH")),
    )
    store.commit()

    assert store.load(TokenTable, WETH_ADDRESS) is token
    assert session.scalar(select(TokenTable.symbol)) == "WETH"


def test_save_persists_changes(store: SqlAlchemyEntityStore, session: Session):
    token = store.create(TokenTable, WETH_ADDRESS, as_fields(TokenDefaults()))
    token.last_price_usd = Decimal("2000.123456789012345678")
    store.save(token)
    store.commit()
    session.expire_all()

    # Decimals survive a round trip through the database without float conversion
    assert store.load(TokenTable, WETH_ADDRESS).last_price_usd == Decimal(
        "2000.123456789012345678"
    )


def test_rollback_discards_uncommitted_entities(store: SqlAlchemyEntityStore):
    store.create(TokenTable, WETH_ADDRESS, as_fields(TokenDefaults()))
    store.rollback()
    assert store.load(TokenTable, WETH_ADDRESS) is None


def test_create_with_missing_parent_raises_store_error(store: SqlAlchemyEntityStore):
    with pytest.raises(EntityStoreError) as exc_info:
        store.create(
            MarketTable,
            ETH_A_MARKET_ID,
            as_fields(MarketDefaults(protocol_id="missing protocol")),
        )
    assert exc_info.value.operation == "create"
    store.rollback()


def test_commit_failure_raises_store_error(store: SqlAlchemyEntityStore, session: Session):
    store.create(TokenTable, WETH_ADDRESS, as_fields(TokenDefaults()))
    store.commit()

    # A second pending row with the same primary key fails on flush
    session.add(TokenTable(id=WETH_ADDRESS, **as_fields(TokenDefaults())))
    with pytest.raises(EntityStoreError):
        store.commit()
    store.rollback()
