"""Domain error taxonomy shared by every bounded context.

Services raise subclasses of these; the API layer maps each base class
to an HTTP status (see ``modules.core.exceptions``) and exposes
``code`` as the machine-readable error code.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for business-rule violations."""

    code = "domain_error"
    default_message = "Business rule violated."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NotFound(DomainError):
    """The referenced entity has no row."""

    code = "not_found"
    default_message = "Resource not found."


class InvalidState(DomainError):
    """The operation is not permitted in the entity's current state."""

    code = "invalid_state"
    default_message = "Operation not allowed in the current state."


class InvalidInput(DomainError):
    """The request carries a value outside the allowed domain."""

    code = "invalid_input"
    default_message = "Invalid input."


class DependencyFailure(DomainError):
    """An external collaborator (store, messaging provider) failed."""

    code = "dependency_failure"
    default_message = "A downstream dependency failed."


class PaymentRequired(DomainError):
    """The transition needs a settled payment first."""

    code = "payment_required"
    default_message = "Payment must be collected first."
