import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .exceptions import InternalServerError

logger = logging.getLogger("eduwallet")


def active_wallet_user(request: Request) -> Optional[str]:
    """Current session identity, None when signed out or no container is attached"""
    container = getattr(request.app, "container", None)
    if container is None:
        return None
    return container.services.identity_provider().current_user_id


def _request_context(request: Request) -> Dict[str, Any]:
    return {
        "method": request.method,
        "path": request.url.path,
        "user": active_wallet_user(request) or "-",
    }


def _error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "success": False,
        "error": {"code": code, "message": message, "details": details or {}},
    }


async def handle_base_api_exception(request, exc):
    ctx = _request_context(request)
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        f"[{exc.error_code}] {ctx['method']} {ctx['path']} user={ctx['user']} -> {exc.status_code}: {exc.message}",
    )
    return JSONResponse(status_code=exc.status_code, content=exc.detail)  # type: ignore[arg-type]


async def handle_http_exception(request, exc):
    """Framework-raised errors (unknown route, wrong method)"""
    ctx = _request_context(request)
    logger.warning(
        f"[HTTP_ERROR] {ctx['method']} {ctx['path']} user={ctx['user']} -> {exc.status_code}: {exc.detail}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("HTTP_ERROR", str(exc.detail)),
    )


async def handle_validation_error(request, exc):
    ctx = _request_context(request)
    errors = jsonable_encoder(exc.errors())
    fields = ", ".join(".".join(str(p) for p in e.get("loc", ())) for e in errors)
    logger.warning(
        f"[VALIDATION_001] {ctx['method']} {ctx['path']} user={ctx['user']} -> 422: {fields}"
    )
    return JSONResponse(
        status_code=422,
        content=_error_body("VALIDATION_001", "Validation failed", {"errors": errors}),
    )


async def handle_unexpected_error(request, exc):
    ctx = _request_context(request)
    tb_str = ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(
        f"[INTERNAL_001] {ctx['method']} {ctx['path']} user={ctx['user']} "
        f"{type(exc).__name__}: {exc}\n{tb_str}"
    )

    internal = InternalServerError()
    return JSONResponse(status_code=internal.status_code, content=internal.detail)  # type: ignore[arg-type]
