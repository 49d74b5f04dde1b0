# app/core/middleware.py
"""HTTP middleware: correlation ids and access logging"""
import uuid
import time
import logging
from starlette.requests import Request

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
QUIET_PATH_PREFIXES = ("/health",)


async def correlation_id_middleware(request: Request, call_next):
    """Reuse the caller's correlation id or mint one, and echo it back"""
    correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
    request.state.correlation_id = correlation_id

    response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """One log line per request with status and duration; denials at WARNING"""
    if request.url.path.startswith(QUIET_PATH_PREFIXES):
        return await call_next(request)

    start_time = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start_time) * 1000, 2)

    correlation_id = getattr(request.state, "correlation_id", "unknown")
    user = getattr(request.state, "user", None)
    message = (
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({duration_ms}ms, user={user.id if user else 'anonymous'}, cid={correlation_id})"
    )

    if response.status_code in (401, 403, 429):
        logger.warning(message)
    else:
        logger.info(message)

    return response
