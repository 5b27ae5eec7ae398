"""
Idempotent get-or-create for every persisted entity kind.

Each entity kind created with non-trivial initial values has a frozen defaults dataclass listing
every field, so the initial state of an entity is a single auditable declaration rather than a
convention spread across call sites. An existing entity is always returned unchanged.
"""

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from eth_typing import ChecksumAddress

from lending_metrics.bucketing import active_account_id, bucket_bounds
from lending_metrics.config import ProtocolSettings
from lending_metrics.constants import BIGDECIMAL_ZERO, ZERO_ADDRESS
from lending_metrics.database.models import (
    AccountTable,
    ActiveAccountTable,
    Base,
    CollateralTypeTable,
    MarketTable,
    ProtocolTable,
    TokenTable,
)
from lending_metrics.exceptions import MissingReference
from lending_metrics.logging import logger
from lending_metrics.store import EntityStore
from lending_metrics.types import Granularity


@dataclass(frozen=True, slots=True)
class ProtocolDefaults:
    name: str
    slug: str
    network: str
    cumulative_unique_users: int = 0
    total_pool_count: int = 0
    market_id_list: list[str] = field(default_factory=list)
    total_value_locked_usd: Decimal = BIGDECIMAL_ZERO
    total_deposit_balance_usd: Decimal = BIGDECIMAL_ZERO
    total_borrow_balance_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_deposit_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_borrow_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_liquidate_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_supply_side_revenue_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_protocol_side_revenue_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_total_revenue_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_protocol_side_stability_fee_revenue_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_protocol_side_liquidation_revenue_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_protocol_side_stabilization_module_revenue_usd: Decimal = BIGDECIMAL_ZERO


@dataclass(frozen=True, slots=True)
class MarketDefaults:
    protocol_id: str
    name: str = "unknown"
    input_token_id: str = ZERO_ADDRESS
    created_timestamp: int = 0
    created_block_number: int = 0
    is_active: bool = True
    can_use_as_collateral: bool = True
    can_borrow_from: bool = True
    maximum_ltv: Decimal = BIGDECIMAL_ZERO
    liquidation_threshold: Decimal = BIGDECIMAL_ZERO
    liquidation_penalty: Decimal = BIGDECIMAL_ZERO
    input_token_balance: int = 0
    input_token_price_usd: Decimal = BIGDECIMAL_ZERO
    total_value_locked_usd: Decimal = BIGDECIMAL_ZERO
    total_deposit_balance_usd: Decimal = BIGDECIMAL_ZERO
    total_borrow_balance_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_deposit_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_borrow_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_liquidate_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_supply_side_revenue_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_protocol_side_revenue_usd: Decimal = BIGDECIMAL_ZERO
    cumulative_total_revenue_usd: Decimal = BIGDECIMAL_ZERO


@dataclass(frozen=True, slots=True)
class TokenDefaults:
    name: str = "unknown"
    symbol: str = "unknown"
    decimals: int = 18
    last_price_usd: Decimal | None = None
    last_price_block_number: int | None = None


def as_fields(defaults: Any) -> dict[str, Any]:  # noqa: ANN401
    """
    Expand a defaults dataclass into entity constructor keyword arguments.
    """

    return {f.name: getattr(defaults, f.name) for f in dataclasses.fields(defaults)}


class EntityResolver:
    def __init__(self, store: EntityStore) -> None:
        self.store = store

    def resolve[E: Base](
        self,
        kind: type[E],
        entity_id: str,
        defaults: Mapping[str, Any] | None = None,
    ) -> tuple[E, bool]:
        """
        Get the entity with the given id, or create it from the defaults.

        Returns the entity and a flag which is True only if this call created it.
        """

        if (entity := self.store.load(kind, entity_id)) is not None:
            return entity, False
        return self.store.create(kind, entity_id, defaults or {}), True

    def get_or_create_protocol(self, protocol_settings: ProtocolSettings) -> ProtocolTable:
        protocol, _ = self.resolve(
            ProtocolTable,
            protocol_settings.id,
            as_fields(
                ProtocolDefaults(
                    name=protocol_settings.name,
                    slug=protocol_settings.slug,
                    network=protocol_settings.network,
                )
            ),
        )
        return protocol

    def get_or_create_token(
        self,
        token_id: str,
        defaults: TokenDefaults | None = None,
    ) -> TokenTable:
        token, _ = self.resolve(TokenTable, token_id, as_fields(defaults or TokenDefaults()))
        return token

    def get_or_create_market(
        self,
        protocol: ProtocolTable,
        market_id: str,
        defaults: MarketDefaults | None = None,
    ) -> tuple[MarketTable, bool]:
        """
        Get or create a market. A new market is appended to the protocol's market list and counted
        in its pool count exactly once.
        """

        if defaults is None:
            defaults = MarketDefaults(protocol_id=protocol.id)

        market, created = self.resolve(MarketTable, market_id, as_fields(defaults))
        if created:
            if market_id == ZERO_ADDRESS:
                logger.warning(f"Created a new market with the zero address as id {market_id}")
            protocol.market_id_list = [*protocol.market_id_list, market_id]
            protocol.total_pool_count += 1
            self.store.save(protocol)
        return market, created

    def get_or_create_account(
        self,
        protocol: ProtocolTable,
        address: ChecksumAddress,
    ) -> tuple[AccountTable, bool]:
        """
        Get or create the account marker for an address. A new account increments the protocol's
        unique user count exactly once.
        """

        account, created = self.resolve(AccountTable, address)
        if created:
            protocol.cumulative_unique_users += 1
            self.store.save(protocol)
        return account, created

    def get_or_create_active_account(
        self,
        granularity: Granularity,
        address: ChecksumAddress,
        timestamp: int,
    ) -> tuple[ActiveAccountTable, bool]:
        bucket_start, bucket_end = bucket_bounds(granularity, timestamp)
        return self.resolve(
            ActiveAccountTable,
            active_account_id(granularity, address, timestamp),
            {
                "account_id": address,
                "granularity": granularity.value,
                "bucket_start": bucket_start,
                "bucket_end": bucket_end,
            },
        )

    def get_or_create_collateral_type(
        self,
        collateral_type: str,
        market_id: str,
    ) -> CollateralTypeTable:
        mapping, _ = self.resolve(CollateralTypeTable, collateral_type, {"market_id": market_id})
        return mapping

    def get_market_for_collateral_type(self, collateral_type: str) -> MarketTable:
        """
        Look up the market mapped to a collateral type.

        Raises `MissingReference` if the type is unmapped or the mapped market does not exist.
        """

        if (mapping := self.store.load(CollateralTypeTable, collateral_type)) is None:
            raise MissingReference(kind="Collateral type", reference=collateral_type)

        if (market := self.store.load(MarketTable, mapping.market_id)) is None:
            raise MissingReference(kind="Market", reference=mapping.market_id)
        return market
