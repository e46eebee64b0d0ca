from decimal import Decimal

import pytest

from mortgage_sim.data_models import ExtraOverlay, InterestOverride, Scenario
from mortgage_sim.engine import generate
from mortgage_sim.errors import IncomparableHorizons
from mortgage_sim.scenario import compare, diff_runs

MONTHLY_EXTRA = Scenario(extra=ExtraOverlay(monthly_extra=Decimal("5000"), from_period="2024-01"))


def test_extra_payments_save_months_and_interest(mortgage):
    result = compare(mortgage, "2024-01", 360, MONTHLY_EXTRA)
    assert result.diff.months_saved > 0
    assert result.diff.interest_saved > 0
    assert result.diff.baseline_payoff_period == "2048-12"
    assert result.diff.scenario_payoff_period < "2048-12"
    assert len(result.baseline_rows) == len(result.scenario_rows) == 360


def test_baseline_is_not_affected_by_scenario(mortgage_with_history):
    result = compare(mortgage_with_history, "2024-01", 120, MONTHLY_EXTRA)
    assert result.baseline_rows == generate(mortgage_with_history, "2024-01", 120)


def test_higher_rate_costs_interest(mortgage):
    scenario = Scenario(interest=InterestOverride(Decimal("7"), "2024-01"))
    result = compare(mortgage, "2024-01", 360, scenario)
    assert result.diff.interest_saved < 0


def test_no_scenario_means_no_difference(mortgage):
    result = compare(mortgage, "2024-01", 24)
    assert result.scenario_rows == result.baseline_rows
    assert result.diff.months_saved == 0
    assert result.diff.interest_saved == 0
    assert result.diff.total_paid_delta == 0


def test_mismatched_windows(mortgage):
    with pytest.raises(IncomparableHorizons):
        compare(mortgage, "2024-01", 24, MONTHLY_EXTRA, scenario_months=12)
    with pytest.raises(IncomparableHorizons):
        compare(mortgage, "2024-01", 24, MONTHLY_EXTRA, scenario_start="2024-02")


def test_diff_runs_checks_windows(mortgage):
    a = generate(mortgage, "2024-01", 12)
    with pytest.raises(IncomparableHorizons):
        diff_runs(a, generate(mortgage, "2024-01", 11))
    with pytest.raises(IncomparableHorizons):
        diff_runs(a, generate(mortgage, "2024-02", 12))
    assert diff_runs(a, a).months_saved == 0
