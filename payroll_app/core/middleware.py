"""
Middleware for the Twin Hill Payroll Service
"""

import time
import uuid
import logging
from threading import Lock
from typing import Callable, Dict, Tuple
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from fastapi import status
from fastapi.responses import JSONResponse

from payroll_app.core.config import settings

logger = logging.getLogger(__name__)


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """Tag every request with an ID and time it."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else None,
            }
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {request.method} {request.url.path} - {type(exc).__name__}",
                extra={
                    "request_id": request_id,
                    "exception": str(exc),
                    "process_time": process_time,
                }
            )
            raise

        process_time = time.time() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(round(process_time, 4))

        logger.info(
            f"Request completed: {request.method} {request.url.path} - {response.status_code}",
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "process_time": process_time,
            }
        )
        return response


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Helmet-style response headers; HSTS only outside debug."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        if not settings.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


class RateLimitingMiddleware(BaseHTTPMiddleware):
    """Fixed-window per-IP rate limiting for API routes."""

    def __init__(self, app, max_requests: int = 300, window_seconds: int = 900,
                 path_prefix: str = "/api/", clock: Callable[[], float] = time.monotonic):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.path_prefix = path_prefix
        self.clock = clock
        # ip -> (window start, request count)
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._next_sweep = 0.0
        self._lock = Lock()

    def _hit(self, client_ip: str) -> Tuple[bool, int]:
        """Count one request; returns (allowed, seconds until the window resets)."""
        now = self.clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)

            window_start, count = self._windows.get(client_ip, (now, 0))
            if now - window_start >= self.window_seconds:
                window_start, count = now, 0

            retry_after = max(1, int(self.window_seconds - (now - window_start)))
            if count >= self.max_requests:
                self._windows[client_ip] = (window_start, count)
                return False, retry_after

            self._windows[client_ip] = (window_start, count + 1)
            return True, retry_after

    def _sweep(self, now: float):
        """Forget clients whose window has ended. Runs at most once per window; caller holds the lock."""
        stale = [ip for ip, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for ip in stale:
            del self._windows[ip]
        self._next_sweep = now + self.window_seconds

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        allowed, retry_after = self._hit(client_ip)

        if not allowed:
            logger.warning(
                f"Rate limit exceeded for IP: {client_ip}",
                extra={"client_ip": client_ip, "path": request.url.path, "method": request.method}
            )
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "error": True,
                    "status_code": 429,
                    "detail": "Too many requests from this IP, please try again later.",
                    "error_code": "RATE_LIMIT_EXCEEDED"
                },
                headers={"Retry-After": str(retry_after)}
            )

        return await call_next(request)


class RequestSizeMiddleware(BaseHTTPMiddleware):
    """Reject request bodies larger than the configured limit."""

    def __init__(self, app, max_request_size: int = 12 * 1024 * 1024):
        super().__init__(app)
        self.max_request_size = max_request_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")

        if content_length and content_length.isdigit():
            size = int(content_length)
            if size > self.max_request_size:
                logger.warning(
                    f"Request body too large: {size} bytes (max: {self.max_request_size})",
                    extra={"path": request.url.path, "method": request.method}
                )
                return JSONResponse(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    content={
                        "error": True,
                        "status_code": 413,
                        "detail": f"Request body too large. Maximum size: {self.max_request_size} bytes",
                        "error_code": "REQUEST_TOO_LARGE",
                        "error_data": {
                            "max_size": self.max_request_size,
                            "actual_size": size
                        }
                    }
                )

        return await call_next(request)


def add_middleware(app):
    """Add all middleware to the FastAPI app."""

    # Last added runs first
    app.add_middleware(RequestSizeMiddleware, max_request_size=settings.max_request_size)

    if not settings.debug or settings.enable_rate_limiting:
        app.add_middleware(
            RateLimitingMiddleware,
            max_requests=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds
        )

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestTrackingMiddleware)

    logger.info("Middleware registered successfully")
