"""Core calculation engine for the mortgage simulator.

This module walks a mortgage month by month and builds its amortization
schedule. Each month it resolves the terms in force (with an optional
scenario rate override), accrues interest on the actual number of days in the
month, takes the regular installment and any extra principal off the
balance, and emits one :class:`ScheduleRow`. Once the balance reaches zero the
remaining months of the horizon are emitted as zero rows.

The balance at the start of the requested horizon is obtained by replaying
the recorded history from origination, so a plan that starts years after
origination still begins from the correct outstanding principal.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Tuple

from loguru import logger

from .config import DEFAULT_SETTINGS, ClampOrder, Settings
from .data_models import ExtraOverlay, InterestOverride, Mortgage, Scenario, ScheduleRow
from .day_count import day_count
from .errors import InvalidHorizon, InvalidPeriodKey, InvalidScenario
from .payments import PaymentBook, scenario_extra_for, validate_extra
from .terms import ResolvedTerms, TermsHistory
from .utils import ZERO, iter_periods, months_between, parse_period_key, round_money


def _calculate_annuity_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if term <= 0:
        raise ValueError("Term must be positive")
    if rate_per_month == 0:
        return principal / Decimal(term)
    factor = (1 + rate_per_month) ** term
    return principal * (rate_per_month * factor) / (factor - 1)


def _clamp_to_balance(
    balance: Decimal, principal: Decimal, extra: Decimal, order: ClampOrder
) -> Tuple[Decimal, Decimal]:
    """Trim ``principal`` and ``extra`` so together they equal ``balance`` at most."""
    total = principal + extra
    if total <= balance:
        return principal, extra
    if order is ClampOrder.EXTRA_FIRST:
        extra = min(extra, balance)
        return balance - extra, extra
    if order is ClampOrder.PROPORTIONAL:
        extra = min(round_money(extra * balance / total), balance)
        return balance - extra, extra
    principal = min(principal, balance)
    return principal, balance - principal


class _LoanState:
    """Mutable state carried from one month to the next within one run."""

    def __init__(self, balance: Decimal, day_basis: int) -> None:
        self.balance = balance
        self.day_basis = day_basis
        self.installment = ZERO
        self.terms_signature: Optional[tuple] = None


class ScheduleGenerator:
    """Generates schedule rows for one mortgage.

    The terms history and payment records are indexed once in the
    constructor; :meth:`generate` can then be called for any window and
    scenario without touching storage again.
    """

    def __init__(self, mortgage: Mortgage, settings: Optional[Settings] = None) -> None:
        self.mortgage = mortgage
        self.settings = settings or DEFAULT_SETTINGS
        parse_period_key(mortgage.origination_period)
        if mortgage.term_months <= 0:
            raise InvalidHorizon(f"Mortgage term must be positive; got {mortgage.term_months}")
        self._terms = TermsHistory(mortgage.terms)
        self._book = PaymentBook(mortgage.payments)

    def _validate(self, start_period: str, months_count: int, scenario: Optional[Scenario]) -> int:
        parse_period_key(start_period)
        if isinstance(months_count, bool) or not isinstance(months_count, int) or months_count < 1:
            raise InvalidHorizon(f"Number of months must be a positive integer; got {months_count!r}")
        elapsed = months_between(self.mortgage.origination_period, start_period)
        if elapsed < 0:
            raise InvalidHorizon(
                f"Horizon starts at {start_period}, before origination "
                f"{self.mortgage.origination_period}"
            )
        if scenario is not None:
            if scenario.interest is not None:
                if scenario.interest.from_period:
                    parse_period_key(scenario.interest.from_period, InvalidPeriodKey)
                if scenario.interest.annual_rate_pct < 0:
                    raise InvalidScenario(
                        f"Override rate must not be negative; got {scenario.interest.annual_rate_pct}"
                    )
            if scenario.extra is not None:
                validate_extra(scenario.extra)
        return elapsed

    def generate(
        self, start_period: str, months_count: int, scenario: Optional[Scenario] = None
    ) -> List[ScheduleRow]:
        """Return ``months_count`` rows starting at ``start_period``.

        Raises
        ------
        InvalidPeriod, InvalidPeriodKey, InvalidHorizon, InvalidScenario
            On malformed input or negative scenario amounts, before any row
            is computed.
        NoTermsForPeriod
            If a month has no terms snapshot in force. The whole run is
            abandoned; no partial schedule is returned.
        """
        elapsed = self._validate(start_period, months_count, scenario)
        logger.debug(
            "Generating {} months from {} for mortgage {} (scenario: {})",
            months_count,
            start_period,
            self.mortgage.id,
            scenario is not None,
        )
        state = _LoanState(self.mortgage.principal, self.settings.day_basis)

        # Replay recorded history up to the month before the horizon.
        for index, period in enumerate(iter_periods(self.mortgage.origination_period, elapsed)):
            self._step(period, index, state, None, None)

        interest = scenario.interest if scenario is not None else None
        extra = scenario.extra if scenario is not None else None
        rows: List[ScheduleRow] = []
        for offset, period in enumerate(iter_periods(start_period, months_count)):
            was_open = state.balance > 0
            rows.append(self._step(period, elapsed + offset, state, interest, extra))
            if was_open and state.balance <= 0:
                logger.debug("Mortgage {} paid off in {}", self.mortgage.id, period)
        return rows

    def _scheduled_installment(
        self, balance: Decimal, terms: ResolvedTerms, remaining: int
    ) -> Decimal:
        if terms.payment_amount is not None:
            return round_money(terms.payment_amount)
        rate_per_month = terms.annual_rate_pct / Decimal(1200)
        annuity = _calculate_annuity_payment(balance, rate_per_month, remaining)
        return round_money(annuity + terms.fee)

    def _step(
        self,
        period: str,
        index: int,
        state: _LoanState,
        interest_override: Optional[InterestOverride],
        extra_overlay: Optional[ExtraOverlay],
    ) -> ScheduleRow:
        balance_start = state.balance
        if balance_start <= 0:
            return self._zero_row(period, state)

        terms = self._terms.resolve(period, interest_override)
        dc = day_count(period, terms.day_basis)
        state.day_basis = dc.day_basis
        rate = terms.annual_rate_pct
        fee = round_money(terms.fee)
        interest = round_money(
            balance_start * (rate / Decimal(100)) * Decimal(dc.days) / Decimal(dc.day_basis)
        )

        remaining = self.mortgage.term_months - index
        signature = (terms.effective_from, rate, terms.fee, terms.payment_amount)
        if remaining <= 1:
            # Last contractual month or later: the whole balance falls due.
            state.installment = balance_start + interest + fee
        elif signature != state.terms_signature:
            state.installment = self._scheduled_installment(balance_start, terms, remaining)
        state.terms_signature = signature

        main = self._book.main_for(period)
        if main is not None:
            payment_total = round_money(main.amount)
        else:
            payment_total = state.installment

        principal = max(ZERO, payment_total - interest - fee)
        if extra_overlay is not None:
            extra = round_money(scenario_extra_for(period, extra_overlay))
        else:
            extra = round_money(self._book.extra_for(period))

        clamped_principal, clamped_extra = _clamp_to_balance(
            balance_start, principal, extra, self.settings.clamp_order
        )
        if (clamped_principal, clamped_extra) != (principal, extra):
            payment_total = interest + fee + clamped_principal
        balance_end = balance_start - clamped_principal - clamped_extra
        state.balance = balance_end

        return ScheduleRow(
            period_key=period,
            days=dc.days,
            day_basis=dc.day_basis,
            nominal_rate_pct=rate,
            balance_start=balance_start,
            interest=interest,
            fee=fee,
            principal=clamped_principal,
            extra_principal=clamped_extra,
            payment_total=payment_total,
            balance_end=balance_end,
        )

    @staticmethod
    def _zero_row(period: str, state: _LoanState) -> ScheduleRow:
        dc = day_count(period, state.day_basis)
        return ScheduleRow(
            period_key=period,
            days=dc.days,
            day_basis=dc.day_basis,
            nominal_rate_pct=ZERO,
            balance_start=ZERO,
            interest=ZERO,
            fee=ZERO,
            principal=ZERO,
            extra_principal=ZERO,
            payment_total=ZERO,
            balance_end=ZERO,
        )


def generate(
    mortgage: Mortgage,
    start_period: str,
    months_count: int,
    scenario: Optional[Scenario] = None,
    settings: Optional[Settings] = None,
) -> List[ScheduleRow]:
    """Compute the schedule for ``mortgage`` over ``months_count`` months.

    Parameters
    ----------
    mortgage: Mortgage
        The mortgage with its terms history and recorded payments.
    start_period: str
        First period of the horizon (``YYYY-MM``); must not precede the
        mortgage's origination.
    months_count: int
        Number of rows to return. The full length is always returned, with
        zero rows after payoff.
    scenario: Scenario, optional
        What-if overlay. Its rate override and extra payments only affect
        periods inside the horizon; without it recorded ``EXTRA`` payments
        are used.

    Returns
    -------
    rows: List[ScheduleRow]
        One row per month, contiguous and in calendar order.
    """
    return ScheduleGenerator(mortgage, settings).generate(start_period, months_count, scenario)
