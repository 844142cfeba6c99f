"""Translation of domain errors into standardized API error responses.

``drf-standardized-errors`` renders every error as::

    {"type": "client_error", "errors": [{"code": ..., "detail": ..., "attr": null}]}

``DomainExceptionHandler`` teaches it about the domain taxonomy so views
can let service exceptions propagate instead of catching each one.
"""

from __future__ import annotations

import structlog
from django.db import DatabaseError
from drf_standardized_errors.handler import ExceptionHandler
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError

from shared.domain.exceptions import (
    DependencyFailure,
    DomainError,
    InvalidInput,
    InvalidState,
    NotFound,
    PaymentRequired,
)

logger = structlog.get_logger(__name__)

# Order matters: the first matching base wins.
DOMAIN_STATUS_CODES: tuple[tuple[type[DomainError], int], ...] = (
    (NotFound, status.HTTP_404_NOT_FOUND),
    (PaymentRequired, status.HTTP_402_PAYMENT_REQUIRED),
    (InvalidState, status.HTTP_409_CONFLICT),
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (DependencyFailure, status.HTTP_503_SERVICE_UNAVAILABLE),
)


class DomainAPIException(APIException):
    """An ``APIException`` carrying a domain error's code and message."""

    def __init__(self, detail: str, code: str, status_code: int) -> None:
        super().__init__(detail=detail, code=code)
        self.status_code = status_code


def status_code_for(exc: DomainError) -> int:
    for base, status_code in DOMAIN_STATUS_CODES:
        if isinstance(exc, base):
            return status_code
    return status.HTTP_400_BAD_REQUEST


class DomainExceptionHandler(ExceptionHandler):
    def convert_known_exceptions(self, exc: Exception) -> Exception:
        if isinstance(exc, DomainError):
            return DomainAPIException(str(exc), exc.code, status_code_for(exc))
        if isinstance(exc, PydanticValidationError):
            return ValidationError(_pydantic_errors(exc))
        if isinstance(exc, DatabaseError):
            logger.error("database.unavailable", error=str(exc))
            return DomainAPIException(
                "The data store is unavailable.",
                "database_unavailable",
                status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return super().convert_known_exceptions(exc)


def _pydantic_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        attr = ".".join(str(part) for part in error["loc"]) or "non_field_errors"
        errors.setdefault(attr, []).append(error["msg"])
    return errors
