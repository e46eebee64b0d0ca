"""Runtime configuration read from environment variables.

The web app and the CLI call :func:`load_settings` once at startup; the
engine receives the resulting :class:`Settings` as a plain argument so it
never reads the environment itself.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional


class ClampOrder(str, Enum):
    """How a final payment that overshoots the balance is trimmed.

    ``REGULAR_FIRST`` lets the regular principal take what it needs and trims
    the extra principal; ``EXTRA_FIRST`` does the reverse; ``PROPORTIONAL``
    scales both by the same factor.
    """

    REGULAR_FIRST = "regular_first"
    EXTRA_FIRST = "extra_first"
    PROPORTIONAL = "proportional"


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///mortgage_sim.sqlite3"
    day_basis: int = 365
    clamp_order: ClampOrder = ClampOrder.REGULAR_FIRST
    max_months: int = 600
    environment: str = "development"
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


DEFAULT_SETTINGS = Settings()


def _positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer; got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive; got {value}")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from ``MORTGAGE_SIM_*`` environment variables."""
    env = os.environ if environ is None else environ
    clamp_raw = env.get("MORTGAGE_SIM_CLAMP_ORDER", ClampOrder.REGULAR_FIRST.value)
    try:
        clamp_order = ClampOrder(clamp_raw.strip().lower())
    except ValueError as exc:
        choices = ", ".join(c.value for c in ClampOrder)
        raise ValueError(
            f"MORTGAGE_SIM_CLAMP_ORDER must be one of {choices}; got {clamp_raw!r}"
        ) from exc
    return Settings(
        database_url=env.get("MORTGAGE_SIM_DATABASE_URL", DEFAULT_SETTINGS.database_url),
        day_basis=_positive_int(
            "MORTGAGE_SIM_DAY_BASIS", env.get("MORTGAGE_SIM_DAY_BASIS", "365")
        ),
        clamp_order=clamp_order,
        max_months=_positive_int(
            "MORTGAGE_SIM_MAX_MONTHS", env.get("MORTGAGE_SIM_MAX_MONTHS", "600")
        ),
        environment=env.get("MORTGAGE_SIM_ENV", "development"),
        log_level=env.get("MORTGAGE_SIM_LOG_LEVEL", "WARNING").upper(),
        log_file=env.get("MORTGAGE_SIM_LOG_FILE") or None,
    )
