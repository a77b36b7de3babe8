from typing import List, Optional
from decimal import Decimal, ROUND_FLOOR
import csv
import io
from sqlalchemy.orm import Session
from payroll_app.core.service_base import BaseService
from payroll_app.core.exceptions import InvalidAmountError, ValidationError
from payroll_app.core.logging_config import log_payroll_operation
from payroll_app.payrolls.models import PayrollRecordModel
from payroll_app.payrolls.schemas import PayrollRecordCreate
from payroll_app.payrolls.calculator import (
    PayrollCalculator,
    PayrollRecord,
    PayrollStatus,
    payroll_calculator,
    ZERO
)

# Figures a stored record must agree on with a fresh derivation
DERIVED_FIELDS = (
    "gross_salary", "ssnit_employee", "ssnit_employer",
    "taxable_income", "paye", "net_salary"
)

CSV_COLUMNS = [
    "id", "employee_id", "employee_name", "department", "position",
    "basic_salary", "allowances", "gross_salary", "ssnit_employee",
    "ssnit_employer", "taxable_income", "paye", "deductions", "net_salary",
    "status", "pay_period"
]


class PayrollService(BaseService):
    def __init__(self, db: Session, calculator: PayrollCalculator = None):
        super().__init__(db)
        self.calculator = calculator or payroll_calculator

    def calculate(
        self,
        employee_id: str,
        employee_name: str,
        department: str,
        position: str,
        basic_salary: Decimal,
        allowances: Decimal
    ) -> PayrollRecord:
        """Derive a payroll record without persisting it."""
        record = self.calculator.derive(
            employee_id, employee_name, department, position, basic_salary, allowances
        )
        log_payroll_operation(
            "calculate",
            employee_id,
            details={"gross": record.gross_salary, "paye": record.paye, "net": record.net_salary}
        )
        return record

    def list_records(self, employee_id: Optional[str] = None) -> List[PayrollRecordModel]:
        """All payroll records, newest first."""
        query = self.db.query(PayrollRecordModel)
        if employee_id:
            query = query.filter(PayrollRecordModel.employee_id == employee_id)
        return query.order_by(PayrollRecordModel.created_at.desc()).all()

    def get_record(self, record_id: str) -> PayrollRecordModel:
        return self.get_or_404(PayrollRecordModel, record_id, "Payroll record")

    def save_records(self, records: List[PayrollRecord]) -> List[PayrollRecordModel]:
        """Persist computed records in one transaction."""
        models = [PayrollRecordModel.from_record(record) for record in records]
        self.db.add_all(models)
        self.safe_commit("Error saving payroll records")
        self.log_service_action(
            "save_payroll_records",
            "PayrollRecord",
            extra_data={"count": len(models)}
        )
        return models

    def check_reconciles(self, payload: PayrollRecordCreate):
        """Reject client figures that differ from what basic and allowances derive."""
        expected = self.calculator.derive(
            payload.employee_id,
            payload.employee_name,
            payload.department,
            payload.position,
            payload.basic_salary,
            payload.allowances
        )
        for field in DERIVED_FIELDS:
            supplied = getattr(payload, field)
            wanted = getattr(expected, field)
            if supplied != wanted:
                raise InvalidAmountError(
                    field,
                    supplied,
                    detail=f"{field} {supplied} does not reconcile with basic salary and allowances (expected {wanted})"
                )

    def create_records(self, payloads: List[PayrollRecordCreate]) -> List[PayrollRecordModel]:
        """Insert client-supplied records (batch or single)."""
        if not payloads:
            raise ValidationError(detail="Invalid data format", field="records")

        models = []
        for payload in payloads:
            self.check_reconciles(payload)
            data = payload.model_dump()
            if not data.get("id"):
                data.pop("id")
            data["status"] = PayrollStatus(data["status"]).value
            models.append(PayrollRecordModel(**data))

        self.db.add_all(models)
        self.safe_commit("Error creating payroll records")
        self.log_service_action(
            "create_payroll_records",
            "PayrollRecord",
            extra_data={"count": len(models)}
        )
        return models

    def delete_record(self, record_id: str):
        record = self.get_record(record_id)
        self.db.delete(record)
        self.safe_commit("Error deleting payroll record")
        self.log_service_action("delete_payroll_record", "PayrollRecord", record_id)

    def update_status(self, record_id: str, status: PayrollStatus) -> PayrollRecordModel:
        record = self.get_record(record_id)
        record.status = PayrollStatus(status).value
        self.safe_commit("Error updating payroll status")
        self.db.refresh(record)
        self.log_service_action(
            "update_payroll_status",
            "PayrollRecord",
            record_id,
            extra_data={"status": record.status}
        )
        return record

    def get_stats(self) -> dict:
        """Dashboard KPIs over all stored payroll records."""
        records = self.list_records()

        total_employees = len({r.employee_id for r in records})
        total_gross = sum((r.gross_salary for r in records), ZERO)
        if records:
            average_salary = (total_gross / len(records)).to_integral_value(rounding=ROUND_FLOOR)
        else:
            average_salary = ZERO
        total_outstanding = sum(
            (r.net_salary for r in records if r.status != PayrollStatus.PAID.value),
            ZERO
        )
        # Records still awaiting payment need admin attention
        total_requests = sum(1 for r in records if r.status != PayrollStatus.PAID.value)

        return {
            "total_employees": total_employees,
            "average_salary": average_salary,
            "total_outstanding": total_outstanding,
            "total_requests": total_requests,
        }

    def export_csv(self, employee_id: Optional[str] = None) -> str:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(CSV_COLUMNS)

        for record in self.list_records(employee_id):
            writer.writerow([getattr(record, column) for column in CSV_COLUMNS])

        return output.getvalue()
