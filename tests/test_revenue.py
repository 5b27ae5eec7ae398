from decimal import Decimal
from types import SimpleNamespace

import hypothesis
import hypothesis.strategies
import pytest

from lending_metrics.exceptions import InvalidEventInput
from lending_metrics.metrics.revenue import RevenueScope, apply_revenue, sub_type_attribute
from lending_metrics.types import ProtocolSideRevenueType

usd_values = hypothesis.strategies.decimals(
    min_value=0,
    max_value=10**12,
    places=6,
    allow_nan=False,
    allow_infinity=False,
)


def _cumulative_entity() -> SimpleNamespace:
    return SimpleNamespace(
        cumulative_total_revenue_usd=Decimal(0),
        cumulative_supply_side_revenue_usd=Decimal(0),
        cumulative_protocol_side_revenue_usd=Decimal(0),
        cumulative_protocol_side_stability_fee_revenue_usd=Decimal(0),
        cumulative_protocol_side_liquidation_revenue_usd=Decimal(0),
        cumulative_protocol_side_stabilization_module_revenue_usd=Decimal(0),
    )


@hypothesis.given(
    revenues=hypothesis.strategies.lists(
        hypothesis.strategies.tuples(
            usd_values,
            usd_values,
            hypothesis.strategies.sampled_from(ProtocolSideRevenueType),
        ),
        max_size=20,
    )
)
def test_protocol_side_identity_holds_after_every_update(
    revenues: list[tuple[Decimal, Decimal, ProtocolSideRevenueType]],
):
    entity = _cumulative_entity()
    for total, supply_side, revenue_type in revenues:
        apply_revenue(
            entity,
            scope=RevenueScope.CUMULATIVE,
            new_total_revenue_usd=total,
            new_supply_side_revenue_usd=supply_side,
            revenue_type=revenue_type,
        )
        assert entity.cumulative_protocol_side_revenue_usd == (
            entity.cumulative_total_revenue_usd - entity.cumulative_supply_side_revenue_usd
        )


def test_stability_fee_revenue():
    entity = _cumulative_entity()
    protocol_side_delta = apply_revenue(
        entity,
        scope=RevenueScope.CUMULATIVE,
        new_total_revenue_usd=Decimal(10),
        new_supply_side_revenue_usd=Decimal(0),
        revenue_type=ProtocolSideRevenueType.STABILITY_FEE,
    )

    assert protocol_side_delta == Decimal(10)
    assert entity.cumulative_total_revenue_usd == Decimal(10)
    assert entity.cumulative_protocol_side_revenue_usd == Decimal(10)
    assert entity.cumulative_protocol_side_stability_fee_revenue_usd == Decimal(10)
    assert entity.cumulative_protocol_side_liquidation_revenue_usd == Decimal(0)


def test_supply_side_revenue_is_not_credited_to_sub_type():
    entity = _cumulative_entity()
    apply_revenue(
        entity,
        scope=RevenueScope.CUMULATIVE,
        new_total_revenue_usd=Decimal(10),
        new_supply_side_revenue_usd=Decimal(10),
        revenue_type=ProtocolSideRevenueType.LIQUIDATION,
    )

    assert entity.cumulative_supply_side_revenue_usd == Decimal(10)
    assert entity.cumulative_protocol_side_revenue_usd == Decimal(0)
    assert entity.cumulative_protocol_side_liquidation_revenue_usd == Decimal(0)


def test_entity_without_sub_types():
    entity = SimpleNamespace(
        daily_total_revenue_usd=Decimal(0),
        daily_supply_side_revenue_usd=Decimal(0),
        daily_protocol_side_revenue_usd=Decimal(0),
    )
    apply_revenue(
        entity,
        scope=RevenueScope.DAILY,
        new_total_revenue_usd=Decimal(5),
        new_supply_side_revenue_usd=Decimal(2),
    )
    assert entity.daily_protocol_side_revenue_usd == Decimal(3)


@pytest.mark.parametrize(
    ("total", "supply_side"),
    [
        (Decimal(-1), Decimal(0)),
        (Decimal(0), Decimal(-1)),
    ],
)
def test_negative_revenue_rejected_without_changes(total: Decimal, supply_side: Decimal):
    entity = _cumulative_entity()
    with pytest.raises(InvalidEventInput):
        apply_revenue(
            entity,
            scope=RevenueScope.CUMULATIVE,
            new_total_revenue_usd=total,
            new_supply_side_revenue_usd=supply_side,
            revenue_type=ProtocolSideRevenueType.STABILITY_FEE,
        )
    assert entity == _cumulative_entity()


@pytest.mark.parametrize("revenue_type", list(ProtocolSideRevenueType))
@pytest.mark.parametrize("scope", [RevenueScope.CUMULATIVE, RevenueScope.DAILY])
def test_sub_type_attribute_names(scope: RevenueScope, revenue_type: ProtocolSideRevenueType):
    assert sub_type_attribute(scope, revenue_type) == (
        f"{scope.value}_protocol_side_{revenue_type.value}_revenue_usd"
    )
