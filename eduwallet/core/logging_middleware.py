import logging
import time
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from eduwallet.core.exception_handlers import active_wallet_user

logger = logging.getLogger("eduwallet")


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class LoggingMiddleware(BaseHTTPMiddleware):
    """One line per request: method, path, wallet user, status, duration"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.time()
        label = f"{request.method} {request.url.path}"

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"[Unhandled Error] {label} user={active_wallet_user(request) or '-'}")
            raise

        # identity is read after the handler so sign-in/out requests log the new user
        duration_ms = (time.time() - start) * 1000
        logger.log(
            _level_for(response.status_code),
            f"[Response] {label} user={active_wallet_user(request) or '-'} "
            f"-> {response.status_code} in {duration_ms:.1f}ms",
        )
        return response
