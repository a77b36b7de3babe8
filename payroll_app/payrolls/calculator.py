"""
Ghana payroll calculation engine.

GRA PAYE banded income tax plus SSNIT contributions and net-pay derivation.
All amounts are ``Decimal`` values rounded to the cent with ROUND_HALF_UP at
every step; the intermediate rounding is part of the reproducible payslip.
"""

import uuid
from dataclasses import dataclass, asdict, replace
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Callable, Dict, Optional, Tuple, Union

from payroll_app.core.exceptions import InvalidAmountError

Amount = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0")

# GRA monthly PAYE bands: (band width, rate). None marks the unbounded top band.
GRA_PAYE_BANDS: Tuple[Tuple[Optional[Decimal], Decimal], ...] = (
    (Decimal("490"), Decimal("0")),
    (Decimal("110"), Decimal("0.05")),
    (Decimal("130"), Decimal("0.10")),
    (Decimal("3000"), Decimal("0.175")),
    (Decimal("16395"), Decimal("0.25")),
    (Decimal("29875"), Decimal("0.30")),
    (None, Decimal("0.35")),
)

SSNIT_EMPLOYEE_RATE = Decimal("0.055")  # Tier 1, deducted from pay
SSNIT_EMPLOYER_RATE = Decimal("0.13")   # Employer share, not deducted


class PayrollStatus(str, Enum):
    PAID = "PAID"
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"


def round2(amount: Decimal) -> Decimal:
    """Round to 2 decimal places, half away from zero."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_amount(value: Amount, field: str) -> Decimal:
    """Coerce a caller-supplied amount to Decimal, rejecting negative and non-finite values."""
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(field, value)

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            # str() keeps floats at their shortest repr (5000.1, not 5000.099999...)
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmountError(field, value)
    else:
        raise InvalidAmountError(field, value)

    if not amount.is_finite() or amount < 0:
        raise InvalidAmountError(field, value)

    # Normalise -0 to 0
    return amount + ZERO


def compute_tax(chargeable_income: Amount) -> Decimal:
    """
    Compute monthly PAYE on chargeable income using the GRA marginal bands.

    Each band consumes up to its width from the remaining income; the first
    band that can hold what is left finishes the computation.
    """
    remaining = to_amount(chargeable_income, "chargeable_income")
    tax = ZERO

    for width, rate in GRA_PAYE_BANDS:
        if width is None or remaining <= width:
            tax += remaining * rate
            break
        tax += width * rate
        remaining -= width

    return round2(tax)


@dataclass(frozen=True)
class PayrollRecord:
    """One employee's computed pay for one period. Replaced, never mutated."""
    id: str
    employee_id: str
    employee_name: str
    department: str
    position: str
    basic_salary: Decimal
    allowances: Decimal
    gross_salary: Decimal
    ssnit_employee: Decimal
    ssnit_employer: Decimal
    taxable_income: Decimal
    paye: Decimal
    deductions: Decimal
    net_salary: Decimal
    status: PayrollStatus
    pay_period: str

    @property
    def total_deductions(self) -> Decimal:
        return self.ssnit_employee + self.paye + self.deductions

    def with_status(self, status: PayrollStatus) -> "PayrollRecord":
        return replace(self, status=PayrollStatus(status))

    def as_dict(self) -> Dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


def pay_period_label(day: date) -> str:
    """Month and year label, e.g. 'October 2023'."""
    return f"{day:%B} {day.year}"


class PayrollCalculator:
    """Derives complete payroll records from basic salary and allowances."""

    def __init__(
        self,
        today: Callable[[], date] = date.today,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4())
    ):
        self._today = today
        self._id_factory = id_factory

    def derive(
        self,
        employee_id: str,
        name: str,
        department: str,
        position: str,
        basic_salary: Amount,
        allowances: Amount,
        status: PayrollStatus = PayrollStatus.PROCESSING
    ) -> PayrollRecord:
        basic = to_amount(basic_salary, "basic_salary")
        extra = to_amount(allowances, "allowances")

        gross = basic + extra
        ssnit_employee = round2(basic * SSNIT_EMPLOYEE_RATE)
        ssnit_employer = round2(basic * SSNIT_EMPLOYER_RATE)
        taxable_income = round2(gross - ssnit_employee)
        paye = compute_tax(taxable_income)
        # Ad-hoc deductions are not part of net pay until the policy is confirmed
        net_salary = round2(gross - ssnit_employee - paye)

        return PayrollRecord(
            id=self._id_factory(),
            employee_id=employee_id,
            employee_name=name,
            department=department,
            position=position,
            basic_salary=basic,
            allowances=extra,
            gross_salary=gross,
            ssnit_employee=ssnit_employee,
            ssnit_employer=ssnit_employer,
            taxable_income=taxable_income,
            paye=paye,
            deductions=ZERO,
            net_salary=net_salary,
            status=PayrollStatus(status),
            pay_period=pay_period_label(self._today()),
        )


payroll_calculator = PayrollCalculator()
