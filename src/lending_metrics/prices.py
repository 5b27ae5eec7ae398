from decimal import Decimal
from typing import Protocol

from lending_metrics.database.models import TokenTable
from lending_metrics.logging import logger
from lending_metrics.store import EntityStore

DEFAULT_DECIMALS = 18


class PriceProvider(Protocol):
    """
    Source of USD prices and decimal places for tokens.
    """

    def current_price_usd(self, token_id: str) -> Decimal | None: ...
    def decimals(self, token_id: str) -> int: ...


class StoredTokenPriceProvider:
    """
    Reads the last price written to the token entity by price update events.
    """

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    def current_price_usd(self, token_id: str) -> Decimal | None:
        if (token := self.store.load(TokenTable, token_id)) is None:
            return None
        return token.last_price_usd

    def decimals(self, token_id: str) -> int:
        if (token := self.store.load(TokenTable, token_id)) is None:
            logger.debug(f"Token {token_id} not found, assuming {DEFAULT_DECIMALS} decimals")
            return DEFAULT_DECIMALS
        return token.decimals


def to_decimal_units(amount: int, decimals: int) -> Decimal:
    """
    Convert a raw integer token amount to whole token units.
    """

    return Decimal(amount).scaleb(-decimals)
