"""
Logging setup for the Twin Hill Payroll Service.

Console output is colour coded; the optional log file rotates at 10MB with
five backups. Payroll computations are logged in one standard line format
through ``log_payroll_operation`` or the ``PayrollOperationLogger`` context
manager.
"""

import logging
import logging.handlers
import os
import time
from typing import Any, Dict, Optional

PAYROLL_LOGGER = "payroll_app.payrolls.service"

APP_LOGGERS = (
    "payroll_app.payrolls.service",
    "payroll_app.payrolls.documents",
    "payroll_app.auth.service",
    "payroll_app.notifications.email",
)


class ColorLogFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        # Copy so file handlers keep the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{self.COLORS.get(record.levelname, '')}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True,
    enable_file_rotation: bool = True
) -> logging.Logger:
    """Configure the root logger. Safe to call more than once."""
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    if enable_console:
        console = logging.StreamHandler()
        console.setFormatter(ColorLogFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        root.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        if enable_file_rotation:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=10 * 1024 * 1024, backupCount=5
            )
        else:
            file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        root.addHandler(file_handler)

    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(level)

    return root


def log_payroll_operation(
    operation: str,
    employee_id: Optional[str] = None,
    duration: Optional[float] = None,
    success: bool = True,
    details: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None
):
    """One line per payroll operation, e.g.
    ``PAYROLL - CALCULATE [OK] | Employee: EMP-042 | net: 3932.75``."""
    logger = logger or logging.getLogger(PAYROLL_LOGGER)

    parts = [f"PAYROLL - {operation.upper().replace('_', ' ')} [{'OK' if success else 'FAILED'}]"]
    if employee_id:
        parts.append(f"Employee: {employee_id}")
    if duration is not None:
        parts.append(f"Duration: {duration:.3f}s")
    parts.extend(f"{key}: {value}" for key, value in (details or {}).items())

    logger.log(logging.INFO if success else logging.ERROR, " | ".join(parts))


class PayrollOperationLogger:
    """Times a payroll operation and logs it on exit; exceptions propagate."""

    def __init__(self, operation: str, employee_id: Optional[str] = None, logger: Optional[logging.Logger] = None):
        self.operation = operation
        self.employee_id = employee_id
        self.logger = logger or logging.getLogger(PAYROLL_LOGGER)
        self.details: Dict[str, Any] = {}
        self._started = None

    def __enter__(self):
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.details["error"] = str(exc_val)
        log_payroll_operation(
            self.operation,
            self.employee_id,
            time.perf_counter() - self._started,
            exc_type is None,
            self.details,
            self.logger
        )
        return False

    def add_detail(self, key: str, value):
        self.details[key] = value
