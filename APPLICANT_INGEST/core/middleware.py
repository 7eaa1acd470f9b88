import logging
import time
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Tuple

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.config import (
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
    TRUST_PROXY_HEADERS,
    UPLOAD_RATE_LIMIT_MAX_REQUESTS,
)

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("access")

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; "
    "style-src 'self' 'unsafe-inline'; "
    "script-src 'self' 'unsafe-inline'; "
    "img-src 'self' data: https:"
)

SECURITY_HEADERS = {
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "X-Content-Type-Options":  "nosniff",
    "X-Frame-Options":         "SAMEORIGIN",
    "Referrer-Policy":         "no-referrer",
    "X-DNS-Prefetch-Control":  "off",
}


class RateLimitConfig:

    def __init__(self, path_prefix: str, max_requests: int, window_seconds: int, message: str):
        self.path_prefix = path_prefix
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message


RATE_LIMITS = [
    RateLimitConfig(
        "/api/upload",
        max_requests=UPLOAD_RATE_LIMIT_MAX_REQUESTS,
        window_seconds=RATE_LIMIT_WINDOW_SECONDS,
        message="Too many upload attempts, please try again later.",
    ),
    RateLimitConfig(
        "/api/",
        max_requests=RATE_LIMIT_MAX_REQUESTS,
        window_seconds=RATE_LIMIT_WINDOW_SECONDS,
        message="Too many requests from this IP, please try again later.",
    ),
]


def get_client_ip(request: Request, trust_proxy: bool = TRUST_PROXY_HEADERS) -> str:
    if trust_proxy:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory per-IP sliding window limiter.

    Every config whose prefix matches the path is checked, so an upload counts
    against both the upload limit and the general API limit. State lives in
    the process; multiple workers each keep their own counts. Keys whose
    window has emptied are dropped on a periodic sweep.
    """

    def __init__(
        self,
        app: ASGIApp,
        configs: Optional[List[RateLimitConfig]] = None,
        clock: Callable[[], float] = time.monotonic,
        trust_proxy: bool = TRUST_PROXY_HEADERS,
    ):
        super().__init__(app)
        self.configs = configs if configs is not None else RATE_LIMITS
        self.clock = clock
        self.trust_proxy = trust_proxy
        self._requests: Dict[Tuple[str, str], Deque[float]] = {}
        self._windows = {c.path_prefix: c.window_seconds for c in self.configs}
        self._sweep_interval = max(self._windows.values(), default=0)
        self._last_sweep = clock()

    def _prune(self, key: Tuple[str, str], now: float) -> int:
        timestamps = self._requests.get(key)
        if timestamps is None:
            return 0
        while timestamps and timestamps[0] <= now - self._windows[key[0]]:
            timestamps.popleft()
        if not timestamps:
            del self._requests[key]
            return 0
        return len(timestamps)

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self._sweep_interval:
            return
        for key in list(self._requests):
            self._prune(key, now)
        self._last_sweep = now

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        matching = [c for c in self.configs if request.url.path.startswith(c.path_prefix)]
        if not matching:
            return await call_next(request)

        client_ip = get_client_ip(request, self.trust_proxy)
        now = self.clock()
        self._sweep(now)

        for config in matching:
            if self._prune((config.path_prefix, client_ip), now) >= config.max_requests:
                logger.warning(f"Rate limit exceeded for {client_ip} on {config.path_prefix}")
                return JSONResponse(
                    status_code=429,
                    content={"success": False, "message": config.message},
                    headers={
                        "Retry-After":           str(config.window_seconds),
                        "X-RateLimit-Limit":     str(config.max_requests),
                        "X-RateLimit-Remaining": "0",
                    },
                )

        for config in matching:
            self._requests.setdefault((config.path_prefix, client_ip), deque()).append(now)

        response = await call_next(request)

        primary = matching[0]
        remaining = primary.max_requests - len(self._requests.get((primary.path_prefix, client_ip), ()))
        response.headers["X-RateLimit-Limit"] = str(primary.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(0, remaining))
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        access_logger.info(
            f'{get_client_ip(request)} "{request.method} {request.url.path}" '
            f"{response.status_code} {duration_ms:.1f}ms"
        )
        return response
