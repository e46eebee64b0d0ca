"""Shared test fixtures for the mortgage simulator."""

from datetime import date
from decimal import Decimal

import pytest
from loguru import logger

from mortgage_sim.data_models import EXTRA, MAIN, Mortgage, Payment, TermsSnapshot
from mortgage_sim.store import MortgageStore


@pytest.fixture(autouse=True)
def log_messages():
    """Route loguru into a list for the duration of a test."""
    messages = []
    logger.remove()
    logger.add(lambda m: messages.append(m.record), level="DEBUG")
    yield messages
    # Entry points under test may have replaced the sinks.
    logger.remove()


def make_mortgage(**overrides) -> Mortgage:
    fields = dict(
        id="m-1",
        title="Flat on Main Street",
        principal=Decimal("2000000"),
        origination_period="2024-01",
        term_months=300,
        terms=(TermsSnapshot(effective_from="2024-01", annual_rate_pct=Decimal("5")),),
        holder="Alex",
        kind="annuity",
    )
    fields.update(overrides)
    return Mortgage(**fields)


def make_small_loan(**overrides) -> Mortgage:
    """1 200 at zero interest over 12 months: a flat 100 installment."""
    fields = dict(
        id="small",
        title="Small loan",
        principal=Decimal("1200"),
        origination_period="2024-01",
        term_months=12,
        terms=(TermsSnapshot(effective_from="2024-01", annual_rate_pct=Decimal("0")),),
    )
    fields.update(overrides)
    return Mortgage(**fields)


@pytest.fixture
def mortgage():
    return make_mortgage()


@pytest.fixture
def small_loan():
    return make_small_loan()


@pytest.fixture
def mortgage_with_history():
    return make_mortgage(
        terms=(
            TermsSnapshot(effective_from="2024-01", annual_rate_pct=Decimal("5")),
            TermsSnapshot(effective_from="2025-01", annual_rate_pct=Decimal("6"), fee=Decimal("150")),
        ),
        payments=(
            Payment(EXTRA, "2024-03", Decimal("10000"), date(2024, 3, 15)),
            Payment(MAIN, "2024-04", Decimal("20000"), date(2024, 4, 20)),
        ),
    )


@pytest.fixture
def store(mortgage):
    store = MortgageStore("sqlite://")
    store.add_mortgage(mortgage)
    return store


@pytest.fixture
def mortgage_document():
    return {
        "id": "doc-1",
        "title": "Imported mortgage",
        "principal": 2000000,
        "originationPeriod": "2024-01",
        "termMonths": 300,
        "holder": "Sam",
        "terms": [{"effectiveFromPeriod": "2024-01", "annualRatePct": 5}],
        "payments": [
            {"kind": "EXTRA", "periodKey": "2024-03", "amount": 10000, "appliedDate": "2024-03-15"}
        ],
    }
