import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_config import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


class GatewayError(Exception):
    """Any failure of a gateway request. Always rendered as 500 + {"message": ...}."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingParameter(GatewayError):
    pass


class MalformedBody(GatewayError):
    pass


class MissingField(GatewayError):
    pass


class UnknownAction(GatewayError):
    pass


class DatabaseError(GatewayError):
    pass


class EncodingError(GatewayError):
    """A result that cannot be rendered as JSON."""


def error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"message": message})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
        return error_response(exc.message)

    # Framework errors (no route, wrong method, bad params) collapse to 500 as well
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.detail)
        return error_response(str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("%s %s invalid: %s", request.method, request.url.path, exc.errors())
        return error_response(str(exc))

    # Last resort only: this runs outside CORSMiddleware, so request-path failures
    # should already have been turned into GatewayError
    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("%s %s crashed", request.method, request.url.path)
        return error_response(str(exc))
