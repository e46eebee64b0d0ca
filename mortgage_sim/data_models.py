"""Data models for the mortgage simulator.

This module defines dataclasses representing the entities used by the
engine: the stored mortgage with its terms history and payment records, the
ephemeral what-if scenario, and the computed schedule rows, summaries and
diffs. Stored records and scenarios are frozen so a simulation can never
modify them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

MAIN = "MAIN"
EXTRA = "EXTRA"
PAYMENT_KINDS = (MAIN, EXTRA)


@dataclass(frozen=True)
class TermsSnapshot:
    """Rate and fee configuration effective from a given period onward.

    Attributes
    ----------
    effective_from: str
        Period key (``YYYY-MM``) from which these terms apply.
    annual_rate_pct: Decimal
        Nominal annual interest rate in percent (``5`` means 5 %).
    fee: Decimal
        Monthly fee charged on top of interest.
    day_basis: int
        Day-count denominator, typically 360 or 365.
    payment_amount: Decimal, optional
        The monthly installment quoted by the lender. When absent the engine
        derives an annuity installment from the remaining balance and term.
    """

    effective_from: str
    annual_rate_pct: Decimal
    fee: Decimal = Decimal("0")
    day_basis: int = 365
    payment_amount: Optional[Decimal] = None
    note: str = ""


@dataclass(frozen=True)
class Payment:
    """A recorded payment.

    ``kind`` is ``"MAIN"`` for the regular installment or ``"EXTRA"`` for an
    additional principal payment.
    """

    kind: str
    period_key: str
    amount: Decimal
    applied_date: date
    note: str = ""


@dataclass(frozen=True)
class Mortgage:
    """A mortgage as read from storage, with its full history.

    The terms and payments are loaded together so one simulation works on a
    single point-in-time view of the records.
    """

    id: str
    title: str
    principal: Decimal
    origination_period: str
    term_months: int
    terms: Tuple[TermsSnapshot, ...] = ()
    payments: Tuple[Payment, ...] = ()
    holder: str = ""
    kind: str = ""


@dataclass(frozen=True)
class InterestOverride:
    annual_rate_pct: Decimal
    from_period: str


@dataclass(frozen=True)
class LumpSum:
    period_key: str
    amount: Decimal


@dataclass(frozen=True)
class ExtraOverlay:
    """Scenario extra payments: a recurring monthly amount plus lump sums."""

    monthly_extra: Decimal = Decimal("0")
    from_period: str = ""
    lump_sums: Tuple[LumpSum, ...] = ()


@dataclass(frozen=True)
class Scenario:
    """An ephemeral what-if overlay; never persisted."""

    interest: Optional[InterestOverride] = None
    extra: Optional[ExtraOverlay] = None


@dataclass(frozen=True)
class ScheduleRow:
    """One month of a schedule.

    ``payment_total`` is the regular installment (interest, fee and regular
    principal); ``extra_principal`` is paid on top of it.
    """

    period_key: str
    days: int
    day_basis: int
    nominal_rate_pct: Decimal
    balance_start: Decimal
    interest: Decimal
    fee: Decimal
    principal: Decimal
    extra_principal: Decimal
    payment_total: Decimal
    balance_end: Decimal


@dataclass(frozen=True)
class Summary:
    """Aggregate totals for a row sequence."""

    payoff_month_index: int
    total_interest: Decimal
    total_paid: Decimal
    final_remaining: Decimal
    total_fees: Decimal = Decimal("0")
    total_principal: Decimal = Decimal("0")
    total_extra: Decimal = Decimal("0")
    payoff_period: Optional[str] = None

    @property
    def months_to_payoff(self) -> Optional[int]:
        return self.payoff_month_index + 1 if self.payoff_period else None


@dataclass(frozen=True)
class ScenarioDiff:
    """Baseline minus scenario; positive values favour the scenario."""

    months_saved: int
    interest_saved: Decimal
    total_paid_delta: Decimal
    fees_saved: Decimal = Decimal("0")
    baseline_payoff_period: Optional[str] = None
    scenario_payoff_period: Optional[str] = None


@dataclass
class Comparison:
    baseline_rows: List[ScheduleRow]
    scenario_rows: List[ScheduleRow]
    baseline_summary: Summary
    scenario_summary: Summary
    diff: ScenarioDiff = field(repr=False)
