import pytest

from mortgage_sim.config import Settings
from mortgage_sim.data_models import Scenario
from mortgage_sim.errors import InvalidPeriod, NotFound
from mortgage_sim.payloads import scenario_from_payload
from mortgage_sim.service import clamp_months, get_plan, simulate


@pytest.mark.parametrize(
    "value, expected",
    [(None, 360), ("", 360), ("0", 360), ("abc", 360), ("12", 12), (24, 24), ("-5", 1), ("9999", 600)],
)
def test_clamp_months(value, expected):
    assert clamp_months(value) == expected


def test_clamp_months_respects_settings():
    assert clamp_months("500", Settings(max_months=120)) == 120


def test_get_plan(store):
    plan = get_plan(store, "m-1", "2024-01", 12)
    assert len(plan.rows) == 12
    payload = plan.to_payload()
    assert payload["mortgage"]["id"] == "m-1"
    assert payload["from"] == "2024-01"
    assert payload["monthsRequested"] == 12
    assert payload["schedule"][0]["interest"] == 8493.15


def test_get_plan_validates_before_loading(store):
    with pytest.raises(InvalidPeriod):
        get_plan(store, "nope", "2024-13", 12)
    with pytest.raises(NotFound):
        get_plan(store, "nope", "2024-01", 12)


def test_simulate(store):
    scenario = scenario_from_payload({"extra": {"monthlyExtra": 5000}}, "2024-01")
    payload = simulate(store, "m-1", "2024-01", 360, scenario).to_payload()
    assert payload["diff"]["monthsSaved"] > 0
    assert payload["diff"]["interestSaved"] > 0
    assert payload["scenario"]["extra"]["fromPeriodKey"] == "2024-01"
    assert len(payload["schedule"]) == 360
    assert payload["baselineSummary"]["payoffPeriodKey"] == "2048-12"


def test_empty_scenario_matches_plan(store):
    sim = simulate(store, "m-1", "2024-01", 24, Scenario())
    plan = get_plan(store, "m-1", "2024-01", 24)
    assert sim.comparison.scenario_rows == plan.rows
    assert sim.comparison.diff.months_saved == 0
