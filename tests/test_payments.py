from datetime import date
from decimal import Decimal

import pytest

from mortgage_sim.data_models import EXTRA, MAIN, ExtraOverlay, LumpSum, Payment
from mortgage_sim.errors import InvalidPeriodKey, InvalidScenario
from mortgage_sim.payments import PaymentBook, resolve_extra, validate_extra

PAYMENTS = (
    Payment(EXTRA, "2024-03", Decimal("1000"), date(2024, 3, 2)),
    Payment(EXTRA, "2024-03", Decimal("500"), date(2024, 3, 20)),
    Payment(MAIN, "2024-03", Decimal("11000"), date(2024, 3, 1)),
    Payment(MAIN, "2024-03", Decimal("12000"), date(2024, 3, 28)),
    Payment(EXTRA, "2024-04", Decimal("250"), date(2024, 4, 2)),
)


def test_baseline_sums_recorded_extras():
    assert resolve_extra("2024-03", PAYMENTS) == Decimal("1500")
    assert resolve_extra("2024-04", PAYMENTS) == Decimal("250")
    assert resolve_extra("2024-05", PAYMENTS) == Decimal("0")


def test_scenario_replaces_recorded_extras():
    overlay = ExtraOverlay(
        monthly_extra=Decimal("5000"),
        from_period="2024-04",
        lump_sums=(LumpSum("2024-04", Decimal("20000")),),
    )
    assert resolve_extra("2024-03", PAYMENTS, overlay) == Decimal("0")
    assert resolve_extra("2024-04", PAYMENTS, overlay) == Decimal("25000")
    assert resolve_extra("2024-05", PAYMENTS, overlay) == Decimal("5000")


def test_monthly_extra_without_from_applies_everywhere():
    overlay = ExtraOverlay(monthly_extra=Decimal("100"))
    assert resolve_extra("2024-01", (), overlay) == Decimal("100")


def test_invalid_lump_sum_rejects_overlay():
    overlay = ExtraOverlay(lump_sums=(LumpSum("2024-04", Decimal("1")), LumpSum("2024-13", Decimal("1"))))
    with pytest.raises(InvalidPeriodKey):
        resolve_extra("2024-04", (), overlay)


def test_negative_amounts_reject_overlay():
    with pytest.raises(InvalidScenario):
        validate_extra(ExtraOverlay(monthly_extra=Decimal("-1")))
    with pytest.raises(InvalidScenario):
        validate_extra(ExtraOverlay(lump_sums=(LumpSum("2024-04", Decimal("-100")),)))


def test_payment_book_main_for():
    book = PaymentBook(PAYMENTS)
    assert book.main_for("2024-03").applied_date == date(2024, 3, 28)
    assert book.main_for("2024-04") is None
