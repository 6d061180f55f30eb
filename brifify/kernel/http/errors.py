from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from brifify.kernel.errors import BrififyError

logger = structlog.get_logger()


def _get_request_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def register_exception_handlers(app: FastAPI) -> None:
    """Register Brifify-wide exception handlers on a FastAPI app.

    We keep FastAPI-compatible `detail` while adding stable `code` + `request_id`.
    Malformed request bodies map to 400 like every other invalid input.
    """

    @app.exception_handler(BrififyError)
    async def _brifify_error_handler(request: Request, exc: BrififyError) -> Response:
        request_id = _get_request_id(request)
        if exc.status_code >= 500:
            logger.error(
                "Request failed",
                code=exc.code,
                error=exc.message,
                meta=exc.meta,
                request_id=request_id,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_public_dict(request_id=request_id))

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException) -> Response:
        request_id = _get_request_id(request)

        payload: dict[str, Any] = {
            "detail": exc.detail,
            "code": f"http.{exc.status_code}",
        }
        if request_id:
            payload["request_id"] = request_id

        headers = dict(exc.headers or {})
        return JSONResponse(status_code=int(exc.status_code), content=payload, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
        request_id = _get_request_id(request)
        payload: dict[str, Any] = {
            "detail": jsonable_encoder(exc.errors()),
            "code": "request.invalid_input",
        }
        if request_id:
            payload["request_id"] = request_id
        return JSONResponse(status_code=400, content=payload)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception) -> Response:
        request_id = _get_request_id(request)
        logger.exception("Unhandled exception", request_id=request_id, error=str(exc))

        payload: dict[str, Any] = {
            "detail": "Internal Server Error",
            "code": "internal.unhandled",
        }
        if request_id:
            payload["request_id"] = request_id
        return JSONResponse(status_code=500, content=payload)
