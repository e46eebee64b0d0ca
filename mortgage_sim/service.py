"""The two operations offered to callers: ``get_plan`` and ``simulate``.

Both read the mortgage once from the store, validate the request before any
computation, and hand the resulting immutable records to the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from loguru import logger

from .config import DEFAULT_SETTINGS, Settings
from .data_models import Comparison, Mortgage, Scenario, ScheduleRow, Summary
from .engine import generate
from .payloads import (
    comparison_to_payload,
    mortgage_header,
    row_to_payload,
    scenario_to_payload,
    summary_to_payload,
)
from .scenario import compare
from .summary import summarize
from .utils import parse_period_key

DEFAULT_MONTHS = 360


class MortgageSource(Protocol):
    def load(self, mortgage_id: str) -> Mortgage: ...


@dataclass
class Plan:
    mortgage: Mortgage
    from_period: str
    months: int
    rows: List[ScheduleRow]
    summary: Summary

    def to_payload(self) -> Dict[str, Any]:
        return {
            "mortgage": mortgage_header(self.mortgage),
            "from": self.from_period,
            "monthsRequested": self.months,
            "schedule": [row_to_payload(r) for r in self.rows],
            "summary": summary_to_payload(self.summary),
        }


@dataclass
class Simulation:
    mortgage: Mortgage
    from_period: str
    months: int
    scenario: Scenario
    comparison: Comparison

    def to_payload(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "mortgage": mortgage_header(self.mortgage),
            "from": self.from_period,
            "monthsRequested": self.months,
            "scenario": scenario_to_payload(self.scenario),
        }
        data.update(comparison_to_payload(self.comparison))
        return data


def clamp_months(value: Any, settings: Settings = DEFAULT_SETTINGS) -> int:
    """Parse a requested horizon and clamp it to ``1..settings.max_months``.

    Missing, zero or non-numeric input falls back to 360 months.
    """
    try:
        months = int(str(value).strip())
    except ValueError:
        months = 0
    return min(settings.max_months, max(1, months or DEFAULT_MONTHS))


def get_plan(
    store: MortgageSource,
    mortgage_id: str,
    from_period: str,
    months: int,
    settings: Optional[Settings] = None,
) -> Plan:
    """Baseline schedule and summary for ``months`` months from ``from_period``."""
    parse_period_key(from_period)
    mortgage = store.load(mortgage_id)
    logger.info("Plan for mortgage {} from {} over {} months", mortgage_id, from_period, months)
    rows = generate(mortgage, from_period, months, settings=settings)
    return Plan(mortgage=mortgage, from_period=from_period, months=months, rows=rows, summary=summarize(rows))


def simulate(
    store: MortgageSource,
    mortgage_id: str,
    from_period: str,
    months: int,
    scenario: Scenario,
    settings: Optional[Settings] = None,
) -> Simulation:
    """Scenario schedule and summary plus the diff against the baseline."""
    parse_period_key(from_period)
    mortgage = store.load(mortgage_id)
    logger.info("Simulation for mortgage {} from {} over {} months", mortgage_id, from_period, months)
    comparison = compare(mortgage, from_period, months, scenario, settings=settings)
    return Simulation(
        mortgage=mortgage,
        from_period=from_period,
        months=months,
        scenario=scenario,
        comparison=comparison,
    )
