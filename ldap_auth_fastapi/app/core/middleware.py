"""
FastAPI middleware logging API requests and responses.
"""
import json
import time
import uuid
from typing import Any, Callable, Dict, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings
from app.core.logger import app_logger, clear_request_context, set_request_context


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request/response pair with a request_id.
    Credentials are redacted from headers and JSON bodies.
    """

    SENSITIVE_HEADERS = {
        "authorization",
        "cookie",
        "x-api-key",
        "x-auth-token",
    }

    SENSITIVE_BODY_FIELDS = {
        "password",
        "access_token",
        "token",
    }

    EXCLUDED_PATHS = {
        "/",
        "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
    }

    MAX_BODY_LOG_BYTES = 10_000

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        set_request_context(
            request_id=request_id,
            method=request.method,
            path=str(request.url.path),
        )

        start_time = time.perf_counter()
        path = request.url.path
        is_excluded = path in self.EXCLUDED_PATHS

        if not is_excluded:
            await self._log_request(request, request_id)

        response: Optional[Response] = None
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        except Exception as exc:
            app_logger.exception(
                "Request failed with exception",
                extra={"exception_type": type(exc).__name__},
            )
            raise
        finally:
            process_time = (time.perf_counter() - start_time) * 1000
            if not is_excluded and response is not None:
                self._log_response(response, process_time)
            clear_request_context()

    async def _log_request(self, request: Request, request_id: str) -> None:
        client_ip = request.client.host if request.client else "unknown"
        body = None
        if request.method in ("POST", "PUT", "PATCH"):
            body = await self._extract_body(request)

        log_func = app_logger.debug if settings.ENVIRONMENT in ("dev", "uat") else app_logger.info
        log_func(
            "API Request",
            extra={
                "query_params": dict(request.query_params) or None,
                "headers": self._sanitize_headers(dict(request.headers)),
                "client_ip": client_ip,
                "body": body,
            },
        )

    def _log_response(self, response: Response, process_time_ms: float) -> None:
        status_code = response.status_code
        if status_code >= 500:
            log_func = app_logger.error
        elif status_code >= 400:
            log_func = app_logger.warning
        else:
            log_func = app_logger.debug if settings.ENVIRONMENT in ("dev", "uat") else app_logger.info

        log_func(
            "API Response",
            extra={
                "status_code": status_code,
                "process_time_ms": round(process_time_ms, 2),
            },
        )

    async def _extract_body(self, request: Request) -> Optional[Any]:
        body_bytes = await request.body()
        if not body_bytes:
            return None

        # Replay the consumed body for the downstream handler
        async def receive() -> Dict[str, Any]:
            return {"type": "http.request", "body": body_bytes, "more_body": False}

        request._receive = receive  # type: ignore[attr-defined]

        if len(body_bytes) > self.MAX_BODY_LOG_BYTES:
            return f"<body too large: {len(body_bytes)} bytes>"

        return self._redact_body(body_bytes.decode("utf-8", errors="replace"))

    def _redact_body(self, body_text: str) -> Any:
        try:
            payload = json.loads(body_text)
        except ValueError:
            return "<non-json body>"

        if isinstance(payload, dict):
            return {
                key: "<redacted>" if key.lower() in self.SENSITIVE_BODY_FIELDS else value
                for key, value in payload.items()
            }
        return payload

    def _sanitize_headers(self, headers: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: "<redacted>" if key.lower() in self.SENSITIVE_HEADERS else value
            for key, value in headers.items()
        }
