"""
Route decorators for audit logging of payroll operations
"""

import functools
import logging
from typing import Callable, Any

logger = logging.getLogger(__name__)


def log_route_access(func: Callable) -> Callable:
    """Log who called a state-changing route, for auditing.

    The wrapped handler must receive ``current_user`` as a keyword argument,
    which is how FastAPI passes dependencies.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> Any:
        log_data = {
            "function": func.__name__,
            "module": func.__module__
        }

        current_user = kwargs.get("current_user")
        if current_user is not None:
            log_data.update({
                "user_id": str(current_user.id),
                "user_email": current_user.email,
                "user_role": current_user.role
            })

        record_id = kwargs.get("record_id")
        if record_id:
            log_data["record_id"] = record_id

        logger.info(f"Route access: {func.__name__}", extra={"audit": log_data})

        return await func(*args, **kwargs)

    return wrapper
