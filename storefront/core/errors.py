"""Domain errors raised by the catalog and auth layers.

Each error carries the HTTP status it maps to; ``register_error_handlers``
renders all of them in the ``{"success": false, "message": ...}`` envelope.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    status_code = 500
    message = 'Server error'

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(StorefrontError):
    status_code = 422
    message = 'Invalid request'


class InvalidCredentials(StorefrontError):
    status_code = 401
    message = 'Invalid credentials'


class InvalidToken(StorefrontError):
    status_code = 401
    message = 'Invalid or expired token'


class AccountBanned(StorefrontError):
    status_code = 403
    message = 'Your account has been banned'


class Forbidden(StorefrontError):
    status_code = 403
    message = 'You do not have permission to perform this action'


class DuplicateEmail(StorefrontError):
    status_code = 409
    message = 'User already exists'


class NotFound(StorefrontError):
    status_code = 404
    message = 'Not found'


def _envelope(status_code: int, message: str, **extra) -> JSONResponse:
    body = {'success': False, 'message': message}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error(request: Request, exc: StorefrontError):
        return _envelope(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return _envelope(422, 'Invalid request', errors=exc.errors())

    @app.exception_handler(SQLAlchemyError)
    async def database_error(request: Request, exc: SQLAlchemyError):
        logger.exception('Database error on %s %s', request.method, request.url.path)
        return _envelope(500, 'Server error')
