"""
Domain errors for the POS and settlement operations.

Every error carries a machine-readable ``kind`` and a human-readable
message. Routes translate them to HTTP responses with
``to_http_exception``; repositories wrap driver failures in
``PersistenceError`` via ``guard_persistence``.
"""

import functools
import logging

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class POSError(Exception):
    """Base class for all domain errors."""
    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(POSError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class DebtNotFoundError(NotFoundError):
    def __init__(self, debt_id: str):
        super().__init__(f"Debt {debt_id} not found")


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} not found")


class MemberNotFoundError(NotFoundError):
    def __init__(self, member_id: str):
        super().__init__(f"Member {member_id} not found")


class TransactionNotFoundError(NotFoundError):
    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction {transaction_id} not found")


class InvalidInputError(POSError):
    kind = "invalid_input"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidAmountError(InvalidInputError):
    pass


class MissingMemberError(InvalidInputError):
    def __init__(self, message: str = "A member is required for credit sales"):
        super().__init__(message)


class InsufficientPaymentError(InvalidInputError):
    pass


class InsufficientStockError(InvalidInputError):
    pass


class OverPaymentError(POSError):
    kind = "over_payment"
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(POSError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class PersistenceError(POSError):
    kind = "persistence_failure"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def to_http_exception(exc: POSError) -> HTTPException:
    """Convert a domain error to an HTTPException with a stable body."""
    return HTTPException(
        status_code=exc.status_code,
        detail={"kind": exc.kind, "message": exc.message}
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and parameters as invalid_input."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return JSONResponse(
        status_code=InvalidInputError.status_code,
        content={"detail": {"kind": InvalidInputError.kind, "message": "; ".join(problems)}}
    )


def guard_persistence(func):
    """Re-raise driver errors from an async repository method as PersistenceError."""
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PyMongoError as exc:
            logger.error("Persistence failure in %s: %s", func.__qualname__, exc)
            raise PersistenceError(f"Database operation failed: {exc}") from exc
    return wrapper
