"""Resolution of the payments applied in each period.

In a baseline run the extra principal comes from recorded ``EXTRA``
payments. A scenario's extra overlay replaces that source entirely, so a
what-if result does not depend on how much history happens to be recorded.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from .data_models import EXTRA, MAIN, ExtraOverlay, Payment
from .errors import InvalidPeriodKey, InvalidScenario
from .utils import ZERO, parse_period_key


def validate_extra(extra: ExtraOverlay) -> None:
    """Check every period key and amount of an extra overlay before it is applied.

    Raises ``InvalidPeriodKey`` on the first bad key and ``InvalidScenario`` on
    a negative amount, rejecting the whole overlay.
    """
    if extra.monthly_extra < 0:
        raise InvalidScenario(f"Monthly extra must not be negative; got {extra.monthly_extra}")
    if extra.from_period:
        parse_period_key(extra.from_period, InvalidPeriodKey)
    for lump in extra.lump_sums:
        parse_period_key(lump.period_key, InvalidPeriodKey)
        if lump.amount < 0:
            raise InvalidScenario(
                f"Lump sum for {lump.period_key} must not be negative; got {lump.amount}"
            )


def _group_by_period(payments: Iterable[Payment]) -> Dict[str, List[Payment]]:
    """Group payments by period key for quick lookup."""
    mapping: Dict[str, List[Payment]] = {}
    for p in payments:
        mapping.setdefault(p.period_key, []).append(p)
    return mapping


class PaymentBook:
    """Recorded payments indexed by period."""

    def __init__(self, payments: Iterable[Payment]) -> None:
        self._by_period = _group_by_period(payments)

    def extra_for(self, period_key: str) -> Decimal:
        return sum(
            (p.amount for p in self._by_period.get(period_key, ()) if p.kind == EXTRA),
            ZERO,
        )

    def main_for(self, period_key: str) -> Optional[Payment]:
        """Latest recorded ``MAIN`` payment of the period, if any."""
        mains = [p for p in self._by_period.get(period_key, ()) if p.kind == MAIN]
        if not mains:
            return None
        return max(mains, key=lambda p: p.applied_date)


def scenario_extra_for(period_key: str, extra: ExtraOverlay) -> Decimal:
    amount = ZERO
    if extra.monthly_extra and (not extra.from_period or period_key >= extra.from_period):
        amount += extra.monthly_extra
    for lump in extra.lump_sums:
        if lump.period_key == period_key:
            amount += lump.amount
    return amount


def resolve_extra(
    period_key: str,
    baseline_payments: Iterable[Payment],
    scenario_extra: Optional[ExtraOverlay] = None,
) -> Decimal:
    """Return the extra principal paid in ``period_key``.

    Without a scenario this is the sum of recorded ``EXTRA`` payments for the
    period. With one it is the scenario's monthly extra (once ``from_period``
    is reached) plus any lump sums for the period; recorded extras are
    ignored.
    """
    parse_period_key(period_key)
    if scenario_extra is None:
        return PaymentBook(baseline_payments).extra_for(period_key)
    validate_extra(scenario_extra)
    return scenario_extra_for(period_key, scenario_extra)
