"""
Application Error Hierarchy

Every failure the services raise derives from Scan2DineError so the web
layer can map them onto flash messages or JSON errors in one place.

    Scan2DineError
    ├── BackendError            data store read/write failed
    │   ├── RecordNotFoundError update targeted a missing document
    │   └── ConflictError       expected_version did not match
    ├── EncodingError           QR payload could not be produced
    ├── AuthError               sign-in / sign-up rejected
    └── DraftValidationError    form input failed validation

Author: Khalil_Bannouri
Version: 1.0.0
"""

from typing import Optional

from pydantic import ValidationError


class Scan2DineError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message


class BackendError(Scan2DineError):
    """A call to the data store failed."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        provider: str = "unknown",
    ):
        super().__init__(message, code=code)
        self.provider = provider


class RecordNotFoundError(BackendError):
    """The document addressed by an update does not exist."""


class ConflictError(BackendError):
    """Optimistic concurrency check failed."""

    def __init__(
        self,
        message: str,
        *,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
        provider: str = "unknown",
    ):
        super().__init__(message, code="version_conflict", provider=provider)
        self.expected = expected
        self.actual = actual


class EncodingError(Scan2DineError):
    """The QR encoder rejected the payload or the options."""


class AuthError(Scan2DineError):
    """Credentials were rejected or the auth provider is unreachable."""


class DraftValidationError(Scan2DineError):
    """
    Form input did not validate.

    Attributes:
        field_errors: Mapping of field name -> first error message
    """

    def __init__(self, field_errors: dict[str, str]):
        summary = "; ".join(f"{k}: {v}" for k, v in field_errors.items())
        super().__init__(summary or "Invalid input", code="invalid_input")
        self.field_errors = field_errors

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "DraftValidationError":
        """Collapse a pydantic ValidationError into one message per field."""
        field_errors: dict[str, str] = {}
        for error in exc.errors():
            loc = error.get("loc") or ("__root__",)
            field = str(loc[0])
            message = error.get("msg", "Invalid value")
            # pydantic prefixes custom ValueErrors with "Value error, "
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            field_errors.setdefault(field, message)
        return cls(field_errors)
