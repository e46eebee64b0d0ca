"""Point-in-time resolution of a mortgage's terms history.

A mortgage's rate and fee change over time through appended
:class:`TermsSnapshot` records. The terms in force at period ``P`` are those
of the latest snapshot whose ``effective_from`` is not after ``P``; a
scenario can then override the rate from a given period onward.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from loguru import logger

from .data_models import InterestOverride, TermsSnapshot
from .errors import NoTermsForPeriod
from .utils import parse_period_key


@dataclass(frozen=True)
class ResolvedTerms:
    annual_rate_pct: Decimal
    fee: Decimal
    day_basis: int
    payment_amount: Optional[Decimal]
    effective_from: str


class TermsHistory:
    """Snapshots ordered by effective period, searchable with ``bisect``.

    The sort is stable, so when two snapshots share an effective period the
    one that came later in the input wins. That situation breaks the storage
    invariant and is logged as a warning.
    """

    def __init__(self, snapshots: Iterable[TermsSnapshot]) -> None:
        ordered: List[TermsSnapshot] = sorted(snapshots, key=lambda s: s.effective_from)
        for snap in ordered:
            parse_period_key(snap.effective_from)
        self._snapshots = ordered
        self._keys = [s.effective_from for s in ordered]
        for prev, cur in zip(self._keys, self._keys[1:]):
            if prev == cur:
                logger.warning(
                    "Duplicate terms snapshots effective from {}; using the last one recorded",
                    cur,
                )

    def snapshot_at(self, period_key: str) -> TermsSnapshot:
        idx = bisect_right(self._keys, period_key)
        if idx == 0:
            raise NoTermsForPeriod(period_key)
        return self._snapshots[idx - 1]

    def resolve(
        self, period_key: str, interest: Optional[InterestOverride] = None
    ) -> ResolvedTerms:
        snap = self.snapshot_at(period_key)
        rate = snap.annual_rate_pct
        if interest is not None and period_key >= interest.from_period:
            rate = interest.annual_rate_pct
        return ResolvedTerms(
            annual_rate_pct=rate,
            fee=snap.fee,
            day_basis=snap.day_basis,
            payment_amount=snap.payment_amount,
            effective_from=snap.effective_from,
        )


def resolve_terms(
    snapshots: Iterable[TermsSnapshot],
    period_key: str,
    interest: Optional[InterestOverride] = None,
) -> ResolvedTerms:
    """Resolve the rate, fee and day basis in force at ``period_key``.

    Only the rate is affected by ``interest``; fee and day basis always come
    from the stored snapshot.

    Raises
    ------
    InvalidPeriod
        If ``period_key`` or a snapshot's effective period is malformed.
    NoTermsForPeriod
        If no snapshot is effective at or before ``period_key``.
    """
    parse_period_key(period_key)
    return TermsHistory(snapshots).resolve(period_key, interest)
