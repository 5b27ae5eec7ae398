"""
Revenue decomposition.

Total and supply-side revenue are accumulated from event inputs. Protocol-side revenue is always
derived as `total - supply_side` at every granularity and is never accumulated on its own, so the
identity holds exactly at every save point. Entities that track protocol-side sub-types also keep
an informational per-type counter which receives the event's positive protocol-side delta.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, assert_never

from lending_metrics.exceptions import InvalidEventInput
from lending_metrics.types import ProtocolSideRevenueType


class RevenueScope(Enum):
    """Column prefix of the revenue counters being updated."""

    CUMULATIVE = "cumulative"
    DAILY = "daily"
    HOURLY = "hourly"


def sub_type_attribute(scope: RevenueScope, revenue_type: ProtocolSideRevenueType) -> str:
    match revenue_type:
        case ProtocolSideRevenueType.STABILITY_FEE:
            sub_type = "stability_fee"
        case ProtocolSideRevenueType.LIQUIDATION:
            sub_type = "liquidation"
        case ProtocolSideRevenueType.STABILIZATION_MODULE:
            sub_type = "stabilization_module"
        case _:
            assert_never(revenue_type)
    return f"{scope.value}_protocol_side_{sub_type}_revenue_usd"


def check_revenue_inputs(
    new_total_revenue_usd: Decimal,
    new_supply_side_revenue_usd: Decimal,
) -> None:
    if new_total_revenue_usd < 0 or new_supply_side_revenue_usd < 0:
        msg = (
            f"Revenue inputs must be non-negative, got total={new_total_revenue_usd} "
            f"supply side={new_supply_side_revenue_usd}"
        )
        raise InvalidEventInput(msg)


def apply_revenue(
    entity: Any,  # noqa: ANN401
    *,
    scope: RevenueScope,
    new_total_revenue_usd: Decimal,
    new_supply_side_revenue_usd: Decimal,
    revenue_type: ProtocolSideRevenueType | None = None,
) -> Decimal:
    """
    Add one event's revenue to the entity's counters for the given scope and recompute the
    protocol-side counter.

    Pass `revenue_type` only for entities carrying the protocol-side sub-type columns.

    Returns the event's protocol-side delta.
    """

    check_revenue_inputs(new_total_revenue_usd, new_supply_side_revenue_usd)

    total_attribute = f"{scope.value}_total_revenue_usd"
    supply_side_attribute = f"{scope.value}_supply_side_revenue_usd"
    protocol_side_attribute = f"{scope.value}_protocol_side_revenue_usd"

    if new_total_revenue_usd > 0:
        setattr(
            entity,
            total_attribute,
            getattr(entity, total_attribute) + new_total_revenue_usd,
        )
    if new_supply_side_revenue_usd > 0:
        setattr(
            entity,
            supply_side_attribute,
            getattr(entity, supply_side_attribute) + new_supply_side_revenue_usd,
        )

    setattr(
        entity,
        protocol_side_attribute,
        getattr(entity, total_attribute) - getattr(entity, supply_side_attribute),
    )

    protocol_side_delta = new_total_revenue_usd - new_supply_side_revenue_usd
    if protocol_side_delta > 0 and revenue_type is not None:
        attribute = sub_type_attribute(scope, revenue_type)
        setattr(entity, attribute, getattr(entity, attribute) + protocol_side_delta)

    return protocol_side_delta
