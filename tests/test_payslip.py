from datetime import date
from decimal import Decimal

from payroll_app.payrolls.calculator import PayrollCalculator, PayrollStatus
from payroll_app.payrolls.payslip import format_currency, render_payslip


def line_for(slip, label):
    return next(line for line in slip.splitlines() if label in line)


def test_format_currency():
    assert format_currency(Decimal("1234.5")) == "GH₵ 1,234.50"
    assert format_currency(Decimal("0")) == "GH₵ 0.00"
    assert format_currency(Decimal("13604.745")) == "GH₵ 13,604.75"


def test_render_payslip_lists_earnings_and_deductions():
    calculator = PayrollCalculator(today=lambda: date(2023, 10, 1), id_factory=lambda: "rec-1")
    record = calculator.derive("EMP-042", "Kofi Boateng", "General Staff", "Staff", "5000", "0")

    slip = render_payslip(record.with_status(PayrollStatus.PAID))

    assert "PAYSLIP - Kofi Boateng" in slip
    assert line_for(slip, "Pay Period:").endswith("October 2023")
    assert line_for(slip, "Status:").endswith("PAID")
    assert line_for(slip, "Basic Salary:").endswith("GH₵ 5,000.00")
    assert line_for(slip, "SSNIT (5.5%)").endswith("GH₵ 275.00")
    assert line_for(slip, "PAYE (GRA)").endswith("GH₵ 792.25")
    assert line_for(slip, "TOTAL DEDUCTIONS").endswith("GH₵ 1,067.25")
    assert line_for(slip, "NET PAY").endswith("GH₵ 3,932.75")
    assert line_for(slip, "SSNIT (13%)").endswith("GH₵ 650.00")
    assert "Other Deductions" not in slip
