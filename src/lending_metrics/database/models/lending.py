from sqlalchemy.orm import Mapped

from .base import Address, Base, BigDecimal, BigInteger, StringList
from .types import ForeignKeyMarketId, ForeignKeyProtocolId, PrimaryKeyStr


class ProtocolTable(Base):
    """
    Protocol-wide aggregate root. Exactly one row exists per running process.

    `total_deposit_balance_usd` and `total_borrow_balance_usd` are re-derived from the markets in
    `market_id_list` on every update and are never accumulated independently.
    """

    __tablename__ = "protocols"

    id: Mapped[PrimaryKeyStr]
    name: Mapped[str]
    slug: Mapped[str]
    network: Mapped[str]

    cumulative_unique_users: Mapped[int]
    total_pool_count: Mapped[int]
    market_id_list: Mapped[StringList]

    total_value_locked_usd: Mapped[BigDecimal]
    total_deposit_balance_usd: Mapped[BigDecimal]
    total_borrow_balance_usd: Mapped[BigDecimal]
    cumulative_deposit_usd: Mapped[BigDecimal]
    cumulative_borrow_usd: Mapped[BigDecimal]
    cumulative_liquidate_usd: Mapped[BigDecimal]

    cumulative_supply_side_revenue_usd: Mapped[BigDecimal]
    cumulative_protocol_side_revenue_usd: Mapped[BigDecimal]
    cumulative_total_revenue_usd: Mapped[BigDecimal]
    cumulative_protocol_side_stability_fee_revenue_usd: Mapped[BigDecimal]
    cumulative_protocol_side_liquidation_revenue_usd: Mapped[BigDecimal]
    cumulative_protocol_side_stabilization_module_revenue_usd: Mapped[BigDecimal]


class TokenTable(Base):
    __tablename__ = "tokens"

    id: Mapped[PrimaryKeyStr]
    name: Mapped[str]
    symbol: Mapped[str]
    decimals: Mapped[int]
    last_price_usd: Mapped[BigDecimal | None]
    last_price_block_number: Mapped[int | None]


class MarketTable(Base):
    """
    A single collateral pool.

    `total_deposit_balance_usd` is marked to market from `input_token_balance` whenever the input
    token has a known price, and falls back to accumulating priced deltas otherwise.
    """

    __tablename__ = "markets"

    id: Mapped[PrimaryKeyStr]
    protocol_id: Mapped[ForeignKeyProtocolId]
    name: Mapped[str]
    input_token_id: Mapped[Address]
    created_timestamp: Mapped[int]
    created_block_number: Mapped[int]

    # Risk parameters
    is_active: Mapped[bool]
    can_use_as_collateral: Mapped[bool]
    can_borrow_from: Mapped[bool]
    maximum_ltv: Mapped[BigDecimal]
    liquidation_threshold: Mapped[BigDecimal]
    liquidation_penalty: Mapped[BigDecimal]

    input_token_balance: Mapped[BigInteger]
    input_token_price_usd: Mapped[BigDecimal]

    total_value_locked_usd: Mapped[BigDecimal]
    total_deposit_balance_usd: Mapped[BigDecimal]
    total_borrow_balance_usd: Mapped[BigDecimal]
    cumulative_deposit_usd: Mapped[BigDecimal]
    cumulative_borrow_usd: Mapped[BigDecimal]
    cumulative_liquidate_usd: Mapped[BigDecimal]

    cumulative_supply_side_revenue_usd: Mapped[BigDecimal]
    cumulative_protocol_side_revenue_usd: Mapped[BigDecimal]
    cumulative_total_revenue_usd: Mapped[BigDecimal]


class CollateralTypeTable(Base):
    """
    Maps a protocol collateral class identifier (e.g. a Maker ilk) to the market holding it.
    """

    __tablename__ = "collateral_types"

    id: Mapped[PrimaryKeyStr]
    market_id: Mapped[ForeignKeyMarketId]
