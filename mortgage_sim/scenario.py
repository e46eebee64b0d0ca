"""Baseline versus scenario comparison.

:func:`compare` runs the schedule generator twice over the same window, once
without and once with the scenario, and reports what the scenario changes:
months saved, interest saved and the difference in cash paid.
"""

from __future__ import annotations

from typing import Optional, Sequence

from loguru import logger

from .config import Settings
from .data_models import Comparison, Mortgage, Scenario, ScenarioDiff, ScheduleRow, Summary
from .engine import ScheduleGenerator
from .errors import IncomparableHorizons
from .summary import summarize


def diff_summaries(baseline: Summary, scenario: Summary) -> ScenarioDiff:
    """Baseline minus scenario for each metric (positive favours the scenario)."""
    return ScenarioDiff(
        months_saved=baseline.payoff_month_index - scenario.payoff_month_index,
        interest_saved=baseline.total_interest - scenario.total_interest,
        total_paid_delta=baseline.total_paid - scenario.total_paid,
        fees_saved=baseline.total_fees - scenario.total_fees,
        baseline_payoff_period=baseline.payoff_period,
        scenario_payoff_period=scenario.payoff_period,
    )


def diff_runs(
    baseline_rows: Sequence[ScheduleRow], scenario_rows: Sequence[ScheduleRow]
) -> ScenarioDiff:
    """Diff two row sequences that cover the same window.

    Raises ``IncomparableHorizons`` if the sequences differ in length or
    start at different periods.
    """
    if len(baseline_rows) != len(scenario_rows):
        raise IncomparableHorizons(
            f"Baseline has {len(baseline_rows)} months but scenario has {len(scenario_rows)}"
        )
    if baseline_rows and baseline_rows[0].period_key != scenario_rows[0].period_key:
        raise IncomparableHorizons(
            f"Baseline starts at {baseline_rows[0].period_key} "
            f"but scenario starts at {scenario_rows[0].period_key}"
        )
    return diff_summaries(summarize(baseline_rows), summarize(scenario_rows))


def compare(
    mortgage: Mortgage,
    start_period: str,
    months_count: int,
    scenario: Optional[Scenario] = None,
    *,
    scenario_start: Optional[str] = None,
    scenario_months: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> Comparison:
    """Run the baseline and the scenario over one window and diff them.

    ``scenario_start`` and ``scenario_months`` describe the window the caller
    intends for the scenario run; when given they must equal the baseline
    window, otherwise ``IncomparableHorizons`` is raised before any
    computation.
    """
    if scenario_start is not None and scenario_start != start_period:
        raise IncomparableHorizons(
            f"Scenario starts at {scenario_start} but baseline starts at {start_period}"
        )
    if scenario_months is not None and scenario_months != months_count:
        raise IncomparableHorizons(
            f"Scenario covers {scenario_months} months but baseline covers {months_count}"
        )

    generator = ScheduleGenerator(mortgage, settings)
    baseline_rows = generator.generate(start_period, months_count)
    if scenario is None:
        scenario_rows = list(baseline_rows)
    else:
        scenario_rows = generator.generate(start_period, months_count, scenario)

    baseline_summary = summarize(baseline_rows)
    scenario_summary = summarize(scenario_rows)
    diff = diff_summaries(baseline_summary, scenario_summary)
    logger.debug(
        "Mortgage {}: scenario saves {} months and {} interest",
        mortgage.id,
        diff.months_saved,
        diff.interest_saved,
    )
    return Comparison(
        baseline_rows=baseline_rows,
        scenario_rows=scenario_rows,
        baseline_summary=baseline_summary,
        scenario_summary=scenario_summary,
        diff=diff,
    )
