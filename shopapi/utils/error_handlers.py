# shopapi/utils/error_handlers.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shopapi.errors import ErrorKind, ShopError
from shopapi.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

# Error kind -> (HTTP status, response code, user-facing message)
ERROR_RESPONSES = {
    ErrorKind.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "NOT_FOUND", "Resource not found"),
    ErrorKind.INSUFFICIENT_STOCK: (
        status.HTTP_400_BAD_REQUEST, "INSUFFICIENT_STOCK", "One or more products are out of stock",
    ),
    ErrorKind.UNAUTHORIZED: (
        status.HTTP_403_FORBIDDEN, "UNAUTHORIZED", "You don't have permission to perform this action",
    ),
    ErrorKind.ORDER_NOT_PENDING: (
        status.HTTP_400_BAD_REQUEST, "INVALID_ORDER_STATUS", "Order cannot be modified in its current status",
    ),
    ErrorKind.TERMINAL_STATE: (
        status.HTTP_400_BAD_REQUEST, "TERMINAL_STATE", "Order is cancelled or delivered and cannot change status",
    ),
    ErrorKind.VALIDATION: (status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", "Invalid input provided"),
    ErrorKind.EMAIL_TAKEN: (status.HTTP_409_CONFLICT, "EMAIL_TAKEN", "Email is already registered"),
    ErrorKind.INVALID_CREDENTIALS: (
        status.HTTP_401_UNAUTHORIZED, "INVALID_CREDENTIALS", "Invalid email or password",
    ),
    ErrorKind.CONFLICT: (
        status.HTTP_409_CONFLICT, "CONFLICT", "The request conflicts with the current state of the resource",
    ),
    ErrorKind.INTERNAL: (
        status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "An unexpected error occurred",
    ),
}


def _operation(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "name", None) or request.url.path


def _log_error(request: Request, status_code: int, code: str, error: str):
    level = logging.ERROR if status_code >= 500 else logging.INFO
    logger.log(
        level,
        "%s operation=%s error_code=%s status_code=%d method=%s path=%s user_id=%s error=%s",
        "Internal server error" if status_code >= 500 else "Client error",
        _operation(request),
        code,
        status_code,
        request.method,
        request.url.path,
        getattr(request.state, "user_id", None),
        error,
    )


def _error_response(status_code: int, body: ErrorResponse, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(exclude_none=True)),
        headers=headers,
    )


async def shop_error_handler(request: Request, exc: ShopError):
    status_code, code, message = ERROR_RESPONSES[exc.kind]
    _log_error(request, status_code, code, exc.message)
    details = exc.details if status_code < 500 else None
    return _error_response(status_code, ErrorResponse(code=code, message=message, details=details))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = {
        ".".join(str(part) for part in err["loc"] if part != "body"): err["msg"]
        for err in exc.errors()
    }
    _log_error(request, status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", str(details))
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(code="INVALID_INPUT", message="Invalid input provided", details=details),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        body = ErrorResponse(**exc.detail)
    else:
        body = ErrorResponse(code="HTTP_ERROR", message=str(exc.detail))
    _log_error(request, exc.status_code, body.code, body.message)
    return _error_response(exc.status_code, body, headers=getattr(exc, "headers", None))


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(ShopError, shop_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
