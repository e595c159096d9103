import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ShopError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ShopError):
    status_code = 400


class AuthError(ShopError):
    status_code = 401


class NotFoundError(ShopError):
    status_code = 404


class ConflictError(ShopError):
    status_code = 400


class ServerError(ShopError):
    status_code = 500


PATH_NOT_FOUND = {
    "product_id": "Product not found",
    "order_id": "Order not found",
}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query")]
    if first.get("type") == "json_invalid":
        return "Request body must be valid JSON"
    if location:
        return f"Invalid value for '{'.'.join(location)}': {first.get('msg')}"
    return f"Invalid request: {first.get('msg')}"


async def shop_error_handler(request: Request, exc: ShopError):
    return error_response(exc.status_code, exc.message)


def _not_found_message(request: Request, param: str) -> str:
    if request.url.path.startswith("/api/cart"):
        return "Item not in cart"
    return PATH_NOT_FOUND.get(param, "Not found")


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # an id that cannot be parsed never matches a record
    for error in exc.errors():
        loc = error.get("loc", ())
        if loc and loc[0] == "path":
            return error_response(404, _not_found_message(request, str(loc[-1])))
    return error_response(400, _describe_validation_error(exc))


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = ServerError("Server error")
    return error_response(error.status_code, error.message)


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(ShopError, shop_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
