"""Payslip presentation helpers."""

from decimal import Decimal

from payroll_app.payrolls.calculator import PayrollRecord, round2

CURRENCY_SYMBOL = "GH₵"


def format_currency(amount: Decimal) -> str:
    """Format an amount as 'GH₵ 1,234.56'."""
    return f"{CURRENCY_SYMBOL} {round2(Decimal(amount)):,.2f}"


def render_payslip(record: PayrollRecord) -> str:
    """Render a plain-text payslip for one payroll record."""
    fmt = format_currency
    rule = "=" * 56
    thin = "-" * 56

    lines = [
        rule,
        f"PAYSLIP - {record.employee_name}",
        f"Employee ID: {record.employee_id}",
        f"Department:  {record.department}",
        f"Position:    {record.position}",
        f"Pay Period:  {record.pay_period}",
        f"Status:      {record.status.value}",
        rule,
        "",
        "EARNINGS:",
        f"  Basic Salary:           {fmt(record.basic_salary)}",
        f"  Allowances:             {fmt(record.allowances)}",
        f"  {thin}",
        f"  TOTAL GROSS PAY:        {fmt(record.gross_salary)}",
        "",
        "DEDUCTIONS:",
        f"  SSNIT (5.5%):           {fmt(record.ssnit_employee)}",
        f"  PAYE (GRA):             {fmt(record.paye)}",
    ]

    if record.deductions:
        lines.append(f"  Other Deductions:       {fmt(record.deductions)}")

    lines += [
        f"  {thin}",
        f"  TOTAL DEDUCTIONS:       {fmt(record.total_deductions)}",
        "",
        rule,
        f"NET PAY:                  {fmt(record.net_salary)}",
        rule,
        "",
        "EMPLOYER CONTRIBUTIONS:",
        f"  SSNIT (13%):            {fmt(record.ssnit_employer)}",
        "",
        f"Taxable Income:           {fmt(record.taxable_income)}",
        "",
    ]

    return "\n".join(lines)
