# ===== app/api/middleware/rate_limit_middleware.py =====
from fastapi import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
import logging
import math
import time

from app.api.dependencies import verify_access_token

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-client sliding window rate limiting for /api/ routes.

    Clients are keyed by the user of a valid access token, else by address.
    State is per process.
    """

    def __init__(self, app, max_requests: int = 120, window_seconds: float = 60.0, path_prefix: str = "/api/"):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.path_prefix = path_prefix
        self.request_times = {}
        self.last_sweep = 0.0

    @staticmethod
    def client_key(request: Request) -> str:
        authorization = request.headers.get("Authorization", "")
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token:
            try:
                subject = verify_access_token(token).get("sub")
            except HTTPException:
                subject = None
            if subject:
                return f"user:{subject}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    def sweep(self, current_time: float) -> None:
        """Forget clients whose last request left the window."""
        stale = [
            key for key, times in self.request_times.items()
            if not times or current_time - times[-1] >= self.window_seconds
        ]
        for key in stale:
            del self.request_times[key]
        self.last_sweep = current_time

    async def dispatch(self, request: Request, call_next):
        if self.max_requests <= 0 or not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        key = self.client_key(request)
        current_time = time.time()

        if current_time - self.last_sweep >= self.window_seconds:
            self.sweep(current_time)

        # Drop timestamps that left the window
        window = [
            t for t in self.request_times.get(key, [])
            if current_time - t < self.window_seconds
        ]

        if len(window) >= self.max_requests:
            self.request_times[key] = window
            retry_after = max(1, math.ceil(self.window_seconds - (current_time - window[0])))
            logger.warning(f"Rate limit exceeded for {key.split(':', 1)[0]} client on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Rate limit exceeded. Too many requests.",
                    "retry_after": retry_after
                },
                headers={"Retry-After": str(retry_after)}
            )

        window.append(current_time)
        self.request_times[key] = window

        return await call_next(request)
