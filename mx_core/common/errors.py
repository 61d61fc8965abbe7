# mx_core/common/errors.py
from __future__ import annotations


class DomainError(Exception):
    """
    Base class for business-rule failures raised by pure domain code.

    Services and lifecycle functions raise these; the DRF exception handler
    (mx_core.common.api.exceptions) maps them onto the error envelope.
    """
    default_message = "Request failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidArgument(DomainError):
    """Malformed input (bad digit count, empty rejection reason, ...)."""
    default_message = "Invalid argument."


class InvalidState(DomainError):
    """Transition not valid from the current status."""
    default_message = "Operation not allowed in the current state."


class Forbidden(DomainError):
    """Actor lacks the role or clinic permission."""
    default_message = "You do not have permission to perform this action."


class AuditWriteError(RuntimeError):
    """
    Status change could not be paired with its audit entry.
    Raised inside the transaction so the status change is rolled back.
    """
