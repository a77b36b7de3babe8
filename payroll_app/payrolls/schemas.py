from pydantic import BaseModel, Field, PlainSerializer
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime
from decimal import Decimal
from typing_extensions import Annotated
from payroll_app.payrolls.calculator import PayrollStatus

# Money travels as a JSON number, matching the stored payroll records
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class PayrollCalculationRequest(CamelModel):
    employee_id: str
    employee_name: str
    department: str = "General Staff"
    position: str = "Staff"
    basic_salary: Decimal
    allowances: Decimal = Decimal("0")


class PayrollRecordCreate(CamelModel):
    id: Optional[str] = None
    employee_id: str
    employee_name: str
    department: str = ""
    position: str = ""
    basic_salary: Money = Field(ge=0)
    allowances: Money = Field(default=Decimal("0"), ge=0)
    gross_salary: Money = Field(ge=0)
    ssnit_employee: Money = Field(ge=0)
    ssnit_employer: Money = Field(ge=0)
    taxable_income: Money = Field(ge=0)
    paye: Money = Field(ge=0)
    deductions: Money = Field(default=Decimal("0"), ge=0)
    net_salary: Money = Field(ge=0)
    status: PayrollStatus = PayrollStatus.PROCESSING
    pay_period: str


class PayrollRecordResponse(CamelModel):
    id: str
    employee_id: str
    employee_name: str
    department: Optional[str] = None
    position: Optional[str] = None
    basic_salary: Money
    allowances: Money
    gross_salary: Money
    ssnit_employee: Money
    ssnit_employer: Money
    taxable_income: Money
    paye: Money
    deductions: Money
    net_salary: Money
    status: PayrollStatus
    pay_period: str
    created_at: Optional[datetime] = None


class PayrollStatusUpdate(CamelModel):
    status: PayrollStatus


class PayrollStats(CamelModel):
    total_employees: int
    average_salary: Money
    total_outstanding: Money
    total_requests: int
