from fastapi import APIRouter, Depends, status, Response, UploadFile, File, Form
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from typing import List, Optional
from payroll_app.core.database import get_db
from payroll_app.core.dependencies import get_current_user, get_current_admin_user
from payroll_app.core.exceptions import InsufficientPermissionsError
from payroll_app.core.route_decorators import log_route_access
from payroll_app.auth.models import User, UserRole
from payroll_app.users.service import UserService
from payroll_app.payrolls.schemas import (
    PayrollCalculationRequest,
    PayrollRecordCreate,
    PayrollRecordResponse,
    PayrollStatusUpdate,
    PayrollStats
)
from payroll_app.payrolls.service import PayrollService
from payroll_app.payrolls.documents import PayrollDocumentProcessor, TargetEmployee
from payroll_app.payrolls.payslip import render_payslip

router = APIRouter(prefix="/payroll", tags=["payroll"])


def get_document_processor() -> PayrollDocumentProcessor:
    return PayrollDocumentProcessor()


def _ensure_can_view(record, user: User):
    if user.role != UserRole.ADMIN.value and record.employee_id != user.employee_id:
        raise InsufficientPermissionsError("You can only view your own payroll records")


@router.get("/", response_model=List[PayrollRecordResponse])
async def list_payroll_records(
    employee_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List payroll records, newest first. Employees only see their own."""
    if current_user.role != UserRole.ADMIN.value:
        employee_id = current_user.employee_id
    return PayrollService(db).list_records(employee_id)


@router.post("/", response_model=List[PayrollRecordResponse], status_code=status.HTTP_201_CREATED)
@log_route_access
async def create_payroll_records(
    records: List[PayrollRecordCreate],
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Store a batch of payroll records and return the updated list."""
    payroll_service = PayrollService(db)
    payroll_service.create_records(records)
    return payroll_service.list_records()


@router.post("/calculate", response_model=PayrollRecordResponse)
async def calculate_payroll(
    request: PayrollCalculationRequest,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Calculate a payroll record without storing it."""
    return PayrollService(db).calculate(
        request.employee_id,
        request.employee_name,
        request.department,
        request.position,
        request.basic_salary,
        request.allowances
    )


@router.post("/manual", response_model=PayrollRecordResponse, status_code=status.HTTP_201_CREATED)
@log_route_access
async def create_manual_payroll(
    request: PayrollCalculationRequest,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Calculate a payroll record from manually entered salary figures and store it."""
    payroll_service = PayrollService(db)
    record = payroll_service.calculate(
        request.employee_id,
        request.employee_name,
        request.department,
        request.position,
        request.basic_salary,
        request.allowances
    )
    saved = payroll_service.save_records([record])
    return saved[0]


@router.post("/upload", response_model=List[PayrollRecordResponse], status_code=status.HTTP_201_CREATED)
@log_route_access
async def upload_payroll_document(
    file: UploadFile = File(...),
    user_id: str = Form(...),
    current_user: User = Depends(get_current_admin_user),
    processor: PayrollDocumentProcessor = Depends(get_document_processor),
    db: Session = Depends(get_db)
):
    """Process an uploaded payroll PDF for one employee and store the resulting records."""
    target_user = UserService(db).get_user(user_id)
    target = TargetEmployee(
        name=target_user.name,
        employee_id=target_user.employee_id,
        position=target_user.position
    )

    content = await file.read()
    records = await run_in_threadpool(
        processor.process, file.filename, file.content_type, content, target
    )

    return PayrollService(db).save_records(records)


@router.get("/stats", response_model=PayrollStats)
async def get_payroll_stats(
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Dashboard KPIs across all payroll records."""
    return PayrollService(db).get_stats()


@router.get("/export/csv")
async def export_payroll_csv(
    employee_id: Optional[str] = None,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Export payroll records to a CSV file."""
    csv_content = PayrollService(db).export_csv(employee_id)
    filename = f"payroll_{employee_id}.csv" if employee_id else "payroll_records.csv"

    return Response(
        content=csv_content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/{record_id}", response_model=PayrollRecordResponse)
async def get_payroll_record(
    record_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a payroll record by ID."""
    record = PayrollService(db).get_record(record_id)
    _ensure_can_view(record, current_user)
    return record


@router.get("/{record_id}/payslip")
async def get_payslip(
    record_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Render a payroll record as a plain-text payslip."""
    record = PayrollService(db).get_record(record_id)
    _ensure_can_view(record, current_user)

    return Response(
        content=render_payslip(record.to_record()),
        media_type="text/plain; charset=utf-8"
    )


@router.patch("/{record_id}/status", response_model=PayrollRecordResponse)
@log_route_access
async def update_payroll_status(
    record_id: str,
    update: PayrollStatusUpdate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Move a payroll record to a new workflow status."""
    return PayrollService(db).update_status(record_id, update.status)


@router.delete("/{record_id}", response_model=List[PayrollRecordResponse])
@log_route_access
async def delete_payroll_record(
    record_id: str,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Delete a payroll record and return the remaining records."""
    payroll_service = PayrollService(db)
    payroll_service.delete_record(record_id)
    return payroll_service.list_records()
