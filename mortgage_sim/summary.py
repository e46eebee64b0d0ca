"""Aggregate totals over a sequence of schedule rows."""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from .data_models import ScheduleRow, Summary
from .utils import ZERO


def summarize(rows: Sequence[ScheduleRow]) -> Summary:
    """Reduce ``rows`` to a :class:`Summary`.

    ``payoff_month_index`` is the zero-based index of the first row whose
    ending balance is zero, or ``len(rows)`` when the loan is not paid off
    within the rows. Totals cover every row; zero rows after payoff add
    nothing. ``total_paid`` is the cash paid: installments plus extra
    principal.
    """
    payoff_index = len(rows)
    payoff_period = None
    for i, row in enumerate(rows):
        if row.balance_end <= 0:
            payoff_index = i
            payoff_period = row.period_key
            break

    total_interest: Decimal = sum((r.interest for r in rows), ZERO)
    total_fees: Decimal = sum((r.fee for r in rows), ZERO)
    total_principal: Decimal = sum((r.principal for r in rows), ZERO)
    total_extra: Decimal = sum((r.extra_principal for r in rows), ZERO)
    total_paid: Decimal = sum((r.payment_total + r.extra_principal for r in rows), ZERO)

    return Summary(
        payoff_month_index=payoff_index,
        total_interest=total_interest,
        total_paid=total_paid,
        final_remaining=rows[-1].balance_end if rows else ZERO,
        total_fees=total_fees,
        total_principal=total_principal,
        total_extra=total_extra,
        payoff_period=payoff_period,
    )
