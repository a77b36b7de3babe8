"""
Shared plumbing for database-backed services.
"""

import logging
from typing import Any, Dict, Iterable
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from payroll_app.core.exceptions import (
    DatabaseError,
    ResourceNotFoundError,
    ResourceAlreadyExistsError,
    ValidationError
)

logger = logging.getLogger(__name__)


class BaseService:
    """Commit handling, lookups and audit logging common to all services."""

    def __init__(self, db: Session):
        self.db = db

    def safe_commit(self, error_message: str = "Database operation failed"):
        """Commit, rolling back and translating SQLAlchemy errors into API errors."""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"{error_message}: integrity error: {e.orig}")
            raise ResourceAlreadyExistsError("Resource", error_data={"original_error": str(e.orig)})
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{error_message}: {str(e)}")
            raise DatabaseError(error_message, {"original_error": str(e)})

    def _first(self, query, error_message: str):
        try:
            return query.first()
        except SQLAlchemyError as e:
            logger.error(f"{error_message}: {str(e)}")
            raise DatabaseError(error_message, {"original_error": str(e)})

    def get_or_404(self, model_class, resource_id: str, resource_type: str = None):
        resource_type = resource_type or model_class.__name__
        resource = self._first(
            self.db.query(model_class).filter(model_class.id == resource_id),
            f"Error retrieving {resource_type}"
        )
        if resource is None:
            raise ResourceNotFoundError(resource_type, resource_id)
        return resource

    def check_unique_constraint(self, model_class, field_name: str, field_value: Any, resource_type: str = None):
        """Raise 409 if another row already holds this value."""
        existing = self._first(
            self.db.query(model_class).filter(getattr(model_class, field_name) == field_value),
            f"Error checking uniqueness for {field_name}"
        )
        if existing is not None:
            raise ResourceAlreadyExistsError(
                resource_type or model_class.__name__,
                field=field_name,
                value=str(field_value)
            )

    def validate_required_fields(self, data: Dict[str, Any], required_fields: Iterable[str]):
        blank = [
            field for field in required_fields
            if data.get(field) is None or (isinstance(data[field], str) and not data[field].strip())
        ]
        if blank:
            raise ValidationError(
                detail=f"Missing required fields: {', '.join(blank)}",
                error_data={"missing_fields": blank}
            )

    def log_service_action(
        self,
        action: str,
        resource_type: str = None,
        resource_id: str = None,
        extra_data: Dict[str, Any] = None
    ):
        """Audit log line for a state change."""
        audit = {"action": action, "service": type(self).__name__}
        if resource_type:
            audit["resource_type"] = resource_type
        if resource_id:
            audit["resource_id"] = resource_id
        audit.update(extra_data or {})

        logger.info(f"Service action: {action}", extra={"audit": audit})
