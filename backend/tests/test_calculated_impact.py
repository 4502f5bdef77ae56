# tests/test_calculated_impact.py
from __future__ import annotations

import asyncio
import random
import uuid

import pytest

from carbon_api.core.errors import UpstreamServiceError
from carbon_api.schemas.impact import CO2_KG, EmissionCalculation, EmissionRecord
from carbon_api.services.calculated_impact import CalculatedImpactService, aggregate_impacts

from helpers import AUTH_TOKEN, add_impact, create_org


def _as_tree(calc: EmissionCalculation) -> dict:
    """Order-free view of a breakdown: {scope: (total, {category: total})}."""
    return {
        s.scope: (s.emission.value, {c.category: c.emission.value for c in s.category_breakdown})
        for s in calc.emissions_by_scope
    }


WORKED_EXAMPLE = [
    EmissionRecord(scope="Scope 1", category="c1", value=10),
    EmissionRecord(scope="Scope 1", category="c2", value=20),
    EmissionRecord(scope="Scope 2", category="c3", value=5),
]


def test_worked_example():
    calc = aggregate_impacts(WORKED_EXAMPLE)

    assert calc.total_emissions.value == 35
    assert calc.total_emissions.unit == CO2_KG
    assert _as_tree(calc) == {
        "Scope 1": (30, {"c1": 10, "c2": 20}),
        "Scope 2": (5, {"c3": 5}),
    }


def test_every_value_carries_the_unit():
    calc = aggregate_impacts(WORKED_EXAMPLE)
    for scope in calc.emissions_by_scope:
        assert scope.emission.unit == "co2 kg"
        for category in scope.category_breakdown:
            assert category.emission.unit == "co2 kg"


def test_empty_input():
    calc = aggregate_impacts([])
    assert calc.total_emissions.value == 0
    assert calc.total_emissions.unit == CO2_KG
    assert calc.emissions_by_scope == []


def test_order_independence():
    records = [
        EmissionRecord(scope=f"Scope {i % 3}", category=f"c{i % 5}", value=float(i))
        for i in range(40)
    ]
    expected = _as_tree(aggregate_impacts(records))
    rng = random.Random(7)
    for _ in range(5):
        shuffled = list(records)
        rng.shuffle(shuffled)
        assert _as_tree(aggregate_impacts(shuffled)) == expected


def test_totals_decompose():
    records = [
        EmissionRecord(scope=f"Scope {i % 3}", category=f"c{i % 4}", value=i * 1.5)
        for i in range(30)
    ]
    calc = aggregate_impacts(records)

    assert calc.total_emissions.value == pytest.approx(sum(s.emission.value for s in calc.emissions_by_scope))
    for scope in calc.emissions_by_scope:
        assert scope.emission.value == pytest.approx(sum(c.emission.value for c in scope.category_breakdown))
    assert calc.total_emissions.value == pytest.approx(sum(r.value for r in records))


def test_missing_scope_and_category_group_as_unknown():
    calc = aggregate_impacts(
        [
            EmissionRecord(scope=None, category="c1", value=1),
            EmissionRecord(scope=None, category=None, value=2),
            EmissionRecord(scope="Scope 3", category=None, value=4),
        ]
    )
    assert _as_tree(calc) == {
        "unknown": (3, {"c1": 1, "unknown": 2}),
        "Scope 3": (4, {"unknown": 4}),
    }
    assert calc.total_emissions.value == 7


def test_missing_value_counts_as_zero():
    calc = aggregate_impacts(
        [
            EmissionRecord(scope="Scope 1", category="c1", value=None),
            EmissionRecord(scope="Scope 1", category="c1", value=3),
        ]
    )
    assert _as_tree(calc) == {"Scope 1": (3, {"c1": 3})}


def test_response_uses_camel_case_keys():
    body = aggregate_impacts(WORKED_EXAMPLE).model_dump(by_alias=True)
    assert set(body) == {"totalEmissions", "emissionsByScope"}
    assert set(body["emissionsByScope"][0]) == {"scope", "emission", "categoryBreakdown"}


# ---------------------------------------------------------
# Completion
# ---------------------------------------------------------
@pytest.mark.asyncio
async def test_all_terminal_is_complete(db, normative_server):
    ids = [normative_server.add_data_source("succeeded"), normative_server.add_data_source("failed")]
    service = CalculatedImpactService(db, normative_server)
    assert await service.is_calculation_complete_for_data_sources(AUTH_TOKEN, ids) is True


@pytest.mark.asyncio
async def test_any_processing_is_incomplete(db, normative_server):
    ids = [normative_server.add_data_source("succeeded"), normative_server.add_data_source("processing")]
    service = CalculatedImpactService(db, normative_server)
    assert await service.is_calculation_complete_for_data_sources(AUTH_TOKEN, ids) is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "statuses,expected",
    [
        (["succeeded", "failed", "succeeded"], True),
        (["succeeded", "pending"], False),
    ],
)
async def test_completion_by_statuses(db, normative_server, statuses, expected):
    ids = [normative_server.add_data_source(status) for status in statuses]
    service = CalculatedImpactService(db, normative_server)
    assert await service.is_calculation_complete_for_data_sources(AUTH_TOKEN, ids) is expected


@pytest.mark.asyncio
async def test_unknown_status_is_incomplete(db, normative_server):
    ids = [normative_server.add_data_source("queued")]
    service = CalculatedImpactService(db, normative_server)
    assert await service.is_calculation_complete_for_data_sources(AUTH_TOKEN, ids) is False


@pytest.mark.asyncio
async def test_no_data_sources_is_complete(db, normative_server):
    service = CalculatedImpactService(db, normative_server)
    assert await service.is_calculation_complete_for_data_sources(AUTH_TOKEN, []) is True


@pytest.mark.asyncio
async def test_status_lookup_failure_propagates(db, normative_server):
    ids = [normative_server.add_data_source("succeeded")]
    normative_server.fail_status_lookup = True
    service = CalculatedImpactService(db, normative_server)
    with pytest.raises(UpstreamServiceError):
        await service.is_calculation_complete_for_data_sources(AUTH_TOKEN, ids)


class StalledLookups:
    """Status lookups where "broken" fails and every other id waits until cancelled."""

    def __init__(self):
        self.cancelled: list[str] = []

    async def get_data_source(self, auth_token, data_source_id):
        if data_source_id == "broken":
            await asyncio.sleep(0)
            raise UpstreamServiceError("lookup failed")
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled.append(data_source_id)
            raise


@pytest.mark.asyncio
async def test_failed_lookup_cancels_the_others(db):
    client = StalledLookups()
    service = CalculatedImpactService(db, client)

    with pytest.raises(UpstreamServiceError):
        await service.is_calculation_complete_for_data_sources(AUTH_TOKEN, ["slow-1", "broken", "slow-2"])

    assert sorted(client.cancelled) == ["slow-1", "slow-2"]


# ---------------------------------------------------------
# DB-backed aggregation
# ---------------------------------------------------------
@pytest.mark.asyncio
async def test_impact_for_data_sources_filters_by_org_and_source(db, normative_server):
    org = await create_org(db)
    other = await create_org(db)
    await add_impact(db, org.id, "ds-a", "Scope 1", "c1", 10)
    await add_impact(db, org.id, "ds-a", "Scope 1", "c2", 20)
    await add_impact(db, org.id, "ds-b", "Scope 2", "c3", 5)
    await add_impact(db, org.id, "ds-ignored", "Scope 2", "c3", 1000)
    await add_impact(db, other.id, "ds-a", "Scope 1", "c1", 1000)

    service = CalculatedImpactService(db, normative_server)
    calc = await service.get_impact_for_data_sources(org.id, ["ds-a", "ds-b"])

    assert calc.total_emissions.value == 35
    assert _as_tree(calc) == {
        "Scope 1": (30, {"c1": 10, "c2": 20}),
        "Scope 2": (5, {"c3": 5}),
    }


@pytest.mark.asyncio
async def test_impact_for_no_data_sources(db, normative_server):
    service = CalculatedImpactService(db, normative_server)
    calc = await service.get_impact_for_data_sources(uuid.uuid4(), [])
    assert calc.total_emissions.value == 0
    assert calc.emissions_by_scope == []
