"""Error kinds raised by the mortgage simulator.

Every failure aborts the whole operation; callers translate these into
user-facing messages (HTTP status codes, CLI errors). Each exception keeps
the offending value on an attribute so callers do not need to parse text.
"""

from __future__ import annotations


class MortgageSimError(Exception):
    """Base class for all simulator errors."""


class InvalidPeriod(MortgageSimError, ValueError):
    """A period key does not parse to a calendar year-month."""

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"Invalid period key (expected YYYY-MM): {key!r}")


class InvalidPeriodKey(InvalidPeriod):
    """A period key inside a scenario is invalid; the scenario is rejected."""


class InvalidHorizon(MortgageSimError, ValueError):
    """The requested window cannot be generated (e.g. zero months)."""


class InvalidScenario(MortgageSimError, ValueError):
    """A scenario payload is malformed."""


class InvalidRequest(MortgageSimError, ValueError):
    """A request body is not the expected JSON object."""


class NoTermsForPeriod(MortgageSimError, LookupError):
    """No terms snapshot is effective at the requested period."""

    def __init__(self, period_key: str) -> None:
        self.period_key = period_key
        super().__init__(f"No terms snapshot effective at or before {period_key}")


class IncomparableHorizons(MortgageSimError):
    """Baseline and scenario windows differ, so their rows cannot be diffed."""


class NotFound(MortgageSimError, LookupError):
    """The requested mortgage does not exist."""

    def __init__(self, mortgage_id: object) -> None:
        self.mortgage_id = mortgage_id
        super().__init__(f"Mortgage not found: {mortgage_id}")


class DuplicateTerms(MortgageSimError):
    """A terms snapshot already exists for this effective period."""

    def __init__(self, mortgage_id: object, effective_from: str) -> None:
        self.mortgage_id = mortgage_id
        self.effective_from = effective_from
        super().__init__(
            f"Mortgage {mortgage_id} already has terms effective from {effective_from}"
        )


class DuplicateMortgage(MortgageSimError):
    """A mortgage with this id is already stored."""

    def __init__(self, mortgage_id: object) -> None:
        self.mortgage_id = mortgage_id
        super().__init__(f"Mortgage {mortgage_id} already exists")

