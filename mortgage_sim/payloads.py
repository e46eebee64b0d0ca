"""Conversion between caller-facing JSON payloads and the data models.

Callers (the web API, the CLI and JSON files) speak camelCase dictionaries
with plain numbers; the engine works on frozen dataclasses with ``Decimal``
amounts. Scenario payloads are validated in full before a scenario object is
returned, so a bad lump-sum month rejects the whole request.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import uuid4

from .data_models import (
    PAYMENT_KINDS,
    Comparison,
    ExtraOverlay,
    InterestOverride,
    LumpSum,
    Mortgage,
    Payment,
    Scenario,
    ScenarioDiff,
    ScheduleRow,
    Summary,
    TermsSnapshot,
)
from .errors import InvalidPeriodKey, InvalidScenario
from .utils import decimal_from_str, normalize_period_key


def _scenario_amount(value: Any, field_name: str) -> Decimal:
    try:
        amount = decimal_from_str(value)
    except ValueError as exc:
        raise InvalidScenario(f"{field_name} must be a number; got {value!r}") from exc
    if amount < 0:
        raise InvalidScenario(f"{field_name} must not be negative; got {value!r}")
    return amount


def _scenario_period(value: Any, default: str) -> str:
    if value in (None, ""):
        return default
    return normalize_period_key(value, InvalidPeriodKey)


def scenario_from_payload(payload: Optional[Mapping[str, Any]], default_from: str) -> Scenario:
    """Build a :class:`Scenario` from the request shape.

    ``fromPeriodKey`` values that are omitted default to ``default_from``,
    the first month of the requested window.

    Raises
    ------
    InvalidScenario
        For a malformed payload (wrong types, negative amounts, unknown mode).
    InvalidPeriodKey
        For any period key that is not a valid calendar month.
    """
    if payload is None:
        return Scenario()
    if not isinstance(payload, Mapping):
        raise InvalidScenario("Scenario must be an object")

    interest = None
    raw_interest = payload.get("interest")
    if raw_interest is not None:
        if not isinstance(raw_interest, Mapping):
            raise InvalidScenario("scenario.interest must be an object")
        mode = raw_interest.get("mode", "override")
        if mode != "override":
            raise InvalidScenario(f"Unsupported interest mode: {mode!r}")
        if raw_interest.get("annualRatePct") is None:
            raise InvalidScenario("scenario.interest.annualRatePct is required")
        interest = InterestOverride(
            annual_rate_pct=_scenario_amount(raw_interest["annualRatePct"], "annualRatePct"),
            from_period=_scenario_period(raw_interest.get("fromPeriodKey"), default_from),
        )

    extra = None
    raw_extra = payload.get("extra")
    if raw_extra is not None:
        if not isinstance(raw_extra, Mapping):
            raise InvalidScenario("scenario.extra must be an object")
        raw_lumps = raw_extra.get("lumpSums") or []
        if not isinstance(raw_lumps, Sequence) or isinstance(raw_lumps, str):
            raise InvalidScenario("scenario.extra.lumpSums must be a list")
        lump_sums: List[LumpSum] = []
        for item in raw_lumps:
            if not isinstance(item, Mapping):
                raise InvalidScenario("Each lump sum must be an object")
            lump_sums.append(
                LumpSum(
                    period_key=normalize_period_key(item.get("periodKey"), InvalidPeriodKey),
                    amount=_scenario_amount(item.get("amount", 0), "amount"),
                )
            )
        extra = ExtraOverlay(
            monthly_extra=_scenario_amount(raw_extra.get("monthlyExtra", 0) or 0, "monthlyExtra"),
            from_period=_scenario_period(raw_extra.get("fromPeriodKey"), default_from),
            lump_sums=tuple(lump_sums),
        )

    return Scenario(interest=interest, extra=extra)


def scenario_to_payload(scenario: Scenario) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if scenario.interest is not None:
        data["interest"] = {
            "mode": "override",
            "annualRatePct": float(scenario.interest.annual_rate_pct),
            "fromPeriodKey": scenario.interest.from_period,
        }
    if scenario.extra is not None:
        data["extra"] = {
            "monthlyExtra": float(scenario.extra.monthly_extra),
            "fromPeriodKey": scenario.extra.from_period,
            "lumpSums": [
                {"periodKey": ls.period_key, "amount": float(ls.amount)}
                for ls in scenario.extra.lump_sums
            ],
        }
    return data


def _required(data: Mapping[str, Any], key: str, where: str) -> Any:
    value = data.get(key)
    if value is None:
        raise ValueError(f"{where}.{key} is required")
    return value


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ValueError(f"Invalid date (expected YYYY-MM-DD): {value!r}") from exc


def terms_from_payload(data: Mapping[str, Any], default_day_basis: int = 365) -> TermsSnapshot:
    effective = normalize_period_key(_required(data, "effectiveFromPeriod", "terms"))
    payment_amount = data.get("paymentAmount")
    day_basis = int(data.get("dayBasis") or default_day_basis)
    if day_basis <= 0:
        raise ValueError(f"terms.dayBasis must be positive; got {day_basis}")
    rate = decimal_from_str(_required(data, "annualRatePct", "terms"))
    fee = decimal_from_str(data.get("fee") or 0)
    if rate < 0 or fee < 0:
        raise ValueError("terms.annualRatePct and terms.fee must not be negative")
    return TermsSnapshot(
        effective_from=effective,
        annual_rate_pct=rate,
        fee=fee,
        day_basis=day_basis,
        payment_amount=decimal_from_str(payment_amount) if payment_amount is not None else None,
        note=str(data.get("note") or ""),
    )


def payment_from_payload(data: Mapping[str, Any]) -> Payment:
    kind = str(_required(data, "kind", "payment")).upper()
    if kind not in PAYMENT_KINDS:
        raise ValueError(f"payment.kind must be MAIN or EXTRA; got {kind!r}")
    period = normalize_period_key(_required(data, "periodKey", "payment"))
    amount = decimal_from_str(_required(data, "amount", "payment"))
    if amount < 0:
        raise ValueError("payment.amount must not be negative")
    return Payment(
        kind=kind,
        period_key=period,
        amount=amount,
        applied_date=_parse_date(_required(data, "appliedDate", "payment")),
        note=str(data.get("note") or ""),
    )


def mortgage_from_payload(data: Mapping[str, Any], default_day_basis: int = 365) -> Mortgage:
    """Build a :class:`Mortgage` (with history) from an import document."""
    origination = normalize_period_key(_required(data, "originationPeriod", "mortgage"))
    principal = decimal_from_str(_required(data, "principal", "mortgage"))
    if principal < 0:
        raise ValueError("mortgage.principal must not be negative")
    term_months = int(_required(data, "termMonths", "mortgage"))
    if term_months <= 0:
        raise ValueError("mortgage.termMonths must be positive")
    title = str(_required(data, "title", "mortgage")).strip()
    if not title:
        raise ValueError("mortgage.title must not be empty")
    return Mortgage(
        id=str(data.get("id") or uuid4().hex),
        title=title,
        principal=principal,
        origination_period=origination,
        term_months=term_months,
        terms=tuple(terms_from_payload(t, default_day_basis) for t in data.get("terms") or ()),
        payments=tuple(payment_from_payload(p) for p in data.get("payments") or ()),
        holder=str(data.get("holder") or ""),
        kind=str(data.get("kind") or ""),
    )


def mortgage_header(mortgage: Mortgage) -> Dict[str, Any]:
    return {
        "id": mortgage.id,
        "title": mortgage.title,
        "holder": mortgage.holder,
        "kind": mortgage.kind,
    }


def row_to_payload(row: ScheduleRow) -> Dict[str, Any]:
    return {
        "periodKey": row.period_key,
        "days": row.days,
        "dayBasis": row.day_basis,
        "nominalRatePct": float(row.nominal_rate_pct),
        "paymentTotal": float(row.payment_total),
        "fee": float(row.fee),
        "interest": float(row.interest),
        "principal": float(row.principal),
        "extraPrincipal": float(row.extra_principal),
        "balanceStart": float(row.balance_start),
        "balanceEnd": float(row.balance_end),
    }


def summary_to_payload(summary: Summary) -> Dict[str, Any]:
    return {
        "payoffMonthIndex": summary.payoff_month_index,
        "payoffPeriodKey": summary.payoff_period,
        "monthsToPayoff": summary.months_to_payoff,
        "totalInterest": float(summary.total_interest),
        "totalFees": float(summary.total_fees),
        "totalPrincipal": float(summary.total_principal),
        "totalExtra": float(summary.total_extra),
        "totalPaid": float(summary.total_paid),
        "finalRemaining": float(summary.final_remaining),
    }


def diff_to_payload(diff: ScenarioDiff) -> Dict[str, Any]:
    return {
        "monthsSaved": diff.months_saved,
        "interestSaved": float(diff.interest_saved),
        "feesSaved": float(diff.fees_saved),
        "totalPaidDelta": float(diff.total_paid_delta),
        "payoffPlan": diff.baseline_payoff_period,
        "payoffSim": diff.scenario_payoff_period,
    }


def comparison_to_payload(comparison: Comparison) -> Dict[str, Any]:
    return {
        "schedule": [row_to_payload(r) for r in comparison.scenario_rows],
        "summary": summary_to_payload(comparison.scenario_summary),
        "baselineSummary": summary_to_payload(comparison.baseline_summary),
        "diff": diff_to_payload(comparison.diff),
    }
