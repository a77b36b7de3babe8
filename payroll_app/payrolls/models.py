from sqlalchemy import Column, String, DateTime, Numeric
from sqlalchemy.sql import func
from payroll_app.core.database import Base, generate_uuid
from payroll_app.payrolls.calculator import PayrollRecord, PayrollStatus, ZERO


class PayrollRecordModel(Base):
    __tablename__ = "payroll_records"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    employee_id = Column(String(50), nullable=False, index=True)
    employee_name = Column(String(255), nullable=False)
    department = Column(String(100))
    position = Column(String(100))
    basic_salary = Column(Numeric(12, 2), nullable=False)
    allowances = Column(Numeric(12, 2), default=0)
    gross_salary = Column(Numeric(12, 2), nullable=False)
    ssnit_employee = Column(Numeric(12, 2), nullable=False)
    ssnit_employer = Column(Numeric(12, 2), nullable=False)
    taxable_income = Column(Numeric(12, 2), nullable=False)
    paye = Column(Numeric(12, 2), nullable=False)
    deductions = Column(Numeric(12, 2), default=0)
    net_salary = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), default=PayrollStatus.PROCESSING.value)  # PAID, PENDING, PROCESSING
    pay_period = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    @classmethod
    def from_record(cls, record: PayrollRecord) -> "PayrollRecordModel":
        return cls(**record.as_dict())

    def to_record(self) -> PayrollRecord:
        return PayrollRecord(
            id=self.id,
            employee_id=self.employee_id,
            employee_name=self.employee_name,
            department=self.department or "",
            position=self.position or "",
            basic_salary=self.basic_salary,
            allowances=self.allowances or ZERO,
            gross_salary=self.gross_salary,
            ssnit_employee=self.ssnit_employee,
            ssnit_employer=self.ssnit_employer,
            taxable_income=self.taxable_income,
            paye=self.paye,
            deductions=self.deductions or ZERO,
            net_salary=self.net_salary,
            status=PayrollStatus(self.status),
            pay_period=self.pay_period,
        )
