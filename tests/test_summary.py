from decimal import Decimal

from mortgage_sim.engine import generate
from mortgage_sim.summary import summarize


def test_paid_off_within_rows(small_loan):
    summary = summarize(generate(small_loan, "2024-01", 14))
    assert summary.payoff_month_index == 11
    assert summary.payoff_period == "2024-12"
    assert summary.months_to_payoff == 12
    assert summary.total_interest == 0
    assert summary.total_principal == Decimal("1200")
    assert summary.total_paid == Decimal("1200")
    assert summary.final_remaining == 0


def test_not_paid_off_within_rows(small_loan):
    summary = summarize(generate(small_loan, "2024-01", 6))
    assert summary.payoff_month_index == 6
    assert summary.payoff_period is None
    assert summary.months_to_payoff is None
    assert summary.final_remaining == Decimal("600")


def test_totals_include_fees_and_extra(mortgage_with_history):
    rows = generate(mortgage_with_history, "2024-01", 24)
    summary = summarize(rows)
    assert summary.total_fees == Decimal("150") * 12
    assert summary.total_extra == Decimal("10000")
    assert summary.total_paid == sum(r.payment_total + r.extra_principal for r in rows)
    assert summary.total_interest == sum(r.interest for r in rows)


def test_empty_rows():
    summary = summarize([])
    assert summary.payoff_month_index == 0
    assert summary.total_paid == 0
    assert summary.final_remaining == 0
