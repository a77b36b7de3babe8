"""
Payroll document processing.

An uploaded payroll PDF is turned into salary inputs (by an external document
understanding service when one is configured, otherwise the standard salary
structure) and fed through the payroll calculator.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

import requests

from payroll_app.core.config import settings
from payroll_app.core.exceptions import (
    ExtractionFailedError,
    FileTooLargeError,
    InvalidAmountError,
    InvalidFileError
)
from payroll_app.core.logging_config import PayrollOperationLogger
from payroll_app.payrolls.calculator import (
    PayrollCalculator,
    PayrollRecord,
    PayrollStatus,
    payroll_calculator,
    to_amount
)

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"


@dataclass(frozen=True)
class ExtractedPayrollData:
    basic_salary: Decimal
    allowances: Decimal
    employee_id: Optional[str] = None
    employee_name: Optional[str] = None
    position: Optional[str] = None


@dataclass(frozen=True)
class TargetEmployee:
    """The employee a payroll document is being processed for."""
    name: str
    employee_id: Optional[str] = None
    position: Optional[str] = None


class DefaultSalaryExtractor:
    """Used when no extraction service is configured: standard salary structure."""

    def __init__(self, basic_salary: Decimal = None, allowances: Decimal = None):
        self.basic_salary = settings.default_basic_salary if basic_salary is None else basic_salary
        self.allowances = settings.default_allowances if allowances is None else allowances

    def extract(self, file_name: str, content: bytes) -> ExtractedPayrollData:
        return ExtractedPayrollData(basic_salary=self.basic_salary, allowances=self.allowances)


class HTTPDocumentExtractor:
    """Posts the PDF to a document understanding service and reads back salary fields."""

    def __init__(self, url: str, api_key: Optional[str] = None, timeout: int = 30, session=None):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def extract(self, file_name: str, content: bytes) -> ExtractedPayrollData:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            response = self.session.post(
                self.url,
                files={"file": (file_name, content, "application/pdf")},
                headers=headers,
                timeout=self.timeout
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.error(f"Extraction service request failed for {file_name}: {str(e)}")
            raise ExtractionFailedError(
                detail="Document extraction service unavailable",
                file_name=file_name,
                error_data={"original_error": str(e)}
            )
        except ValueError as e:
            raise ExtractionFailedError(
                detail="Document extraction service returned invalid JSON",
                file_name=file_name,
                error_data={"original_error": str(e)}
            )

        return self._parse(file_name, payload)

    def _parse(self, file_name: str, payload) -> ExtractedPayrollData:
        if not isinstance(payload, dict) or "basicSalary" not in payload:
            raise ExtractionFailedError(
                detail="Extraction result is missing basicSalary",
                file_name=file_name
            )

        try:
            basic = to_amount(payload["basicSalary"], "basicSalary")
            allowances = to_amount(payload.get("allowances") or 0, "allowances")
        except InvalidAmountError as e:
            raise ExtractionFailedError(
                detail=f"Extraction result has an invalid {e.field}",
                file_name=file_name,
                error_data={"field": e.field, "value": str(e.value)}
            )

        return ExtractedPayrollData(
            basic_salary=basic,
            allowances=allowances,
            employee_id=payload.get("employeeId") or None,
            employee_name=payload.get("employeeName") or None,
            position=payload.get("position") or None,
        )


def build_extractor():
    if settings.extraction_service_url:
        return HTTPDocumentExtractor(
            settings.extraction_service_url,
            api_key=settings.extraction_api_key,
            timeout=settings.extraction_timeout
        )
    return DefaultSalaryExtractor()


class PayrollDocumentProcessor:
    """Validates an uploaded payroll PDF and derives the resulting payroll records."""

    def __init__(self, extractor=None, calculator: PayrollCalculator = None):
        self.extractor = extractor or build_extractor()
        self.calculator = calculator or payroll_calculator

    def validate(self, file_name: str, content_type: Optional[str], content: bytes):
        if content_type not in settings.payroll_upload_formats:
            raise InvalidFileError(
                detail="Invalid file type. Only PDF documents are authorized.",
                file_type=content_type,
                error_data={"allowed_types": settings.payroll_upload_formats}
            )

        if not content:
            raise InvalidFileError(detail="Uploaded document is empty", file_type=content_type)

        if len(content) > settings.payroll_upload_max_size:
            raise FileTooLargeError(
                max_size=settings.payroll_upload_max_size,
                actual_size=len(content)
            )

        if not content.startswith(PDF_MAGIC):
            raise InvalidFileError(
                detail="Uploaded document is not a valid PDF",
                file_type=content_type,
                error_data={"file_name": file_name}
            )

    def process(
        self,
        file_name: str,
        content_type: Optional[str],
        content: bytes,
        target: TargetEmployee
    ) -> List[PayrollRecord]:
        self.validate(file_name, content_type, content)

        with PayrollOperationLogger("process_document", target.employee_id, logger) as op:
            op.add_detail("file", file_name)
            extracted = self.extractor.extract(file_name, content)

            record = self.calculator.derive(
                target.employee_id or extracted.employee_id or settings.default_employee_id,
                target.name or extracted.employee_name or "",
                settings.default_department,
                target.position or extracted.position or settings.default_position,
                extracted.basic_salary,
                extracted.allowances
            )
            op.add_detail("net_salary", record.net_salary)

        # Processing the document completes the pay run for this record
        return [record.with_status(PayrollStatus.PAID)]
