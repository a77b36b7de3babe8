from datetime import date
from decimal import Decimal

import pytest

from payroll_app.core.exceptions import InvalidAmountError
from payroll_app.payrolls.calculator import (
    PayrollCalculator,
    PayrollStatus,
    compute_tax,
    pay_period_label,
    round2,
    to_amount,
)


def fixed_calculator():
    return PayrollCalculator(today=lambda: date(2023, 10, 15), id_factory=lambda: "rec-1")


@pytest.mark.parametrize("income, expected", [
    ("0", "0.00"),
    ("490", "0.00"),
    ("490.01", "0.00"),
    ("490.10", "0.01"),
    ("600", "5.50"),
    ("730", "18.50"),
    ("3730", "543.50"),
    ("50000", "13604.75"),
    ("50001", "13605.10"),
])
def test_compute_tax_band_boundaries(income, expected):
    assert compute_tax(Decimal(income)) == Decimal(expected)


def test_compute_tax_accepts_numbers_and_strings():
    assert compute_tax(600) == Decimal("5.50")
    assert compute_tax(600.0) == Decimal("5.50")
    assert compute_tax("600") == Decimal("5.50")


def test_compute_tax_is_monotonic():
    previous = Decimal("0")
    income = Decimal("0")
    while income <= Decimal("60000"):
        tax = compute_tax(income)
        assert tax >= previous
        previous = tax
        income += Decimal("97.31")


def test_compute_tax_marginal_rate_never_exceeds_top_band():
    assert compute_tax(Decimal("100001")) - compute_tax(Decimal("100000")) == Decimal("0.35")


@pytest.mark.parametrize("bad", [-1, "-0.01", "abc", None, True, float("nan"), float("inf"), [5000]])
def test_compute_tax_rejects_invalid_amounts(bad):
    with pytest.raises(InvalidAmountError) as exc_info:
        compute_tax(bad)
    assert exc_info.value.status_code == 422
    assert exc_info.value.error_code == "INVALID_AMOUNT"


def test_to_amount_normalises_negative_zero():
    amount = to_amount("-0", "basic_salary")
    assert amount == Decimal("0")
    assert not amount.is_signed()


def test_to_amount_keeps_float_repr():
    assert to_amount(5000.1, "basic_salary") == Decimal("5000.1")


def test_round2_is_half_up():
    assert round2(Decimal("0.005")) == Decimal("0.01")
    assert round2(Decimal("2.675")) == Decimal("2.68")
    assert round2(Decimal("1.004")) == Decimal("1.00")


def test_derive_standard_salary():
    record = fixed_calculator().derive("EMP-042", "Kofi Boateng", "General Staff", "Staff", "5000", "0")

    assert record.id == "rec-1"
    assert record.gross_salary == Decimal("5000")
    assert record.ssnit_employee == Decimal("275.00")
    assert record.ssnit_employer == Decimal("650.00")
    assert record.taxable_income == Decimal("4725.00")
    assert record.paye == Decimal("792.25")
    assert record.net_salary == Decimal("3932.75")
    assert record.deductions == Decimal("0")
    assert record.status == PayrollStatus.PROCESSING
    assert record.pay_period == "October 2023"


def test_derive_with_allowances_only_charges_ssnit_on_basic():
    record = fixed_calculator().derive("EMP-1", "Esi", "Ops", "Driver", "2000", "500")

    assert record.gross_salary == Decimal("2500")
    assert record.ssnit_employee == Decimal("110.00")
    assert record.ssnit_employer == Decimal("260.00")
    assert record.taxable_income == Decimal("2390.00")
    assert record.paye == compute_tax(Decimal("2390.00"))
    assert record.net_salary == record.gross_salary - record.ssnit_employee - record.paye


def test_derive_zero_inputs():
    record = fixed_calculator().derive("EMP-0", "Nobody", "", "", 0, 0)

    assert record.gross_salary == Decimal("0")
    assert record.paye == Decimal("0.00")
    assert record.net_salary == Decimal("0.00")


def test_derive_is_deterministic():
    calculator = fixed_calculator()
    first = calculator.derive("EMP-042", "Kofi", "Ops", "Staff", "12345.67", "89.10")
    second = calculator.derive("EMP-042", "Kofi", "Ops", "Staff", "12345.67", "89.10")
    assert first == second


def test_total_deductions_and_net_pay_reconcile():
    record = fixed_calculator().derive("EMP-7", "Yaw", "Finance", "Analyst", "8250.55", "1200")
    assert record.gross_salary - record.total_deductions == record.net_salary


def test_derive_rejects_negative_salary():
    with pytest.raises(InvalidAmountError) as exc_info:
        fixed_calculator().derive("EMP-1", "Esi", "Ops", "Driver", "-100", "0")
    assert exc_info.value.field == "basic_salary"


def test_with_status_returns_new_record():
    record = fixed_calculator().derive("EMP-1", "Esi", "Ops", "Driver", "1000", "0")
    paid = record.with_status(PayrollStatus.PAID)

    assert paid.status == PayrollStatus.PAID
    assert record.status == PayrollStatus.PROCESSING
    assert paid.net_salary == record.net_salary


def test_as_dict_uses_status_value():
    record = fixed_calculator().derive("EMP-1", "Esi", "Ops", "Driver", "1000", "0")
    assert record.as_dict()["status"] == "PROCESSING"


def test_pay_period_label():
    assert pay_period_label(date(2024, 1, 31)) == "January 2024"
