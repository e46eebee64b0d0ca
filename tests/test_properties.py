"""Property-based checks of the schedule generator."""

from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from conftest import make_mortgage
from mortgage_sim.data_models import ExtraOverlay, Scenario, TermsSnapshot
from mortgage_sim.engine import generate
from mortgage_sim.scenario import compare
from mortgage_sim.summary import summarize

loans = st.builds(
    lambda principal, rate, term: make_mortgage(
        principal=Decimal(principal),
        term_months=term,
        terms=(TermsSnapshot(effective_from="2024-01", annual_rate_pct=rate),),
    ),
    principal=st.integers(min_value=1_000, max_value=5_000_000),
    rate=st.decimals(min_value=0, max_value=15, places=2),
    term=st.integers(min_value=1, max_value=360),
)


@settings(max_examples=40, deadline=None)
@given(loan=loans, months=st.integers(min_value=1, max_value=400), extra=st.integers(0, 20_000))
def test_rows_are_consistent(loan, months, extra):
    scenario = Scenario(extra=ExtraOverlay(monthly_extra=Decimal(extra)))
    rows = generate(loan, "2024-01", months, scenario)
    assert len(rows) == months
    for prev, cur in zip(rows, rows[1:]):
        assert cur.balance_start == prev.balance_end
    for row in rows:
        assert row.balance_end >= 0
        assert row.principal >= 0
        assert row.extra_principal >= 0
        assert row.balance_end == row.balance_start - row.principal - row.extra_principal
    payoff = summarize(rows).payoff_month_index
    for row in rows[payoff + 1 :]:
        assert row.payment_total == row.interest == row.balance_start == 0


@settings(max_examples=40, deadline=None)
@given(loan=loans, months=st.integers(min_value=1, max_value=400))
def test_loan_is_paid_off_by_end_of_term(loan, months):
    rows = generate(loan, "2024-01", months)
    if months >= loan.term_months:
        assert rows[loan.term_months - 1].balance_end == 0


@settings(max_examples=40, deadline=None)
@given(loan=loans, extra=st.integers(min_value=0, max_value=20_000))
def test_extra_payments_never_cost_more(loan, extra):
    scenario = Scenario(extra=ExtraOverlay(monthly_extra=Decimal(extra)))
    result = compare(loan, "2024-01", 360, scenario)
    assert result.diff.months_saved >= 0
    assert result.diff.interest_saved >= 0
