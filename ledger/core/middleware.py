import json
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ledger.config import settings
from ledger.core.logging import api_logger


def get_client_ip(request: Request) -> str:
    """Client IP, preferring proxy headers (X-Forwarded-For, then X-Real-IP)."""
    client_ip = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if not client_ip:
        client_ip = request.headers.get("X-Real-IP", "")
    if not client_ip and request.client:
        client_ip = request.client.host
    return client_ip or "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all API requests with path, query parameters, client,
    status code and response time. Request bodies are never logged.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process the request and log details.

        Args:
            request: The incoming request
            call_next: The next middleware or route handler

        Returns:
            Response: The response from the route handler
        """
        if request.url.path in settings.LOG_EXCLUDED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()

        method = request.method
        path = request.url.path
        query_params = dict(request.query_params) if request.query_params else {}
        client_ip = get_client_ip(request)
        user_agent = request.headers.get("User-Agent", "Unknown")
        # Ledger requests carry the owner as a query parameter, not a session
        user_id = query_params.get("user_id")

        try:
            response = await call_next(request)
        except Exception as e:
            api_logger.error(
                f"{method} {path} - Status: 500 - IP: {client_ip} - "
                f"UserID: {user_id or '-'} - Query: {json.dumps(query_params)} - "
                f"Error: {str(e)}"
            )
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)

        api_logger.info(
            f"{method} {path} - Status: {response.status_code} - "
            f"IP: {client_ip} - UserID: {user_id or '-'} - "
            f"UserAgent: {user_agent} - Query: {json.dumps(query_params)} - "
            f"Duration: {duration_ms}ms"
        )

        return response
