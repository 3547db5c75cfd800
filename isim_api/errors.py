"""
============================================================================
FILE: errors.py
LOCATION: isim_api/errors.py
============================================================================

PURPOSE:
    Typed exceptions for every failure the request pipeline can report.

ROLE IN PROJECT:
    Domain code (validators, catalogue gateway, classifier, limiter guard)
    raises these; the exception handler in main.py renders each one as
    {"error": ..., "details": ...} with the status code it carries.
    Nothing below the HTTP layer builds responses itself.

KEY COMPONENTS:
    - NameServiceError: Base class (status_code, error label, details)
    - ValidationError and its subkinds: 400 responses
    - RateLimitExceeded, DuplicateKeyError, PayloadTooLarge, Unauthorized
    - ConfigurationError, UpstreamError, UpstreamParseError: 500 responses

DEPENDENCIES:
    - External: None
    - Internal: None

USAGE:
    from isim_api.errors import DuplicateKeyError
    raise DuplicateKeyError("Ayşe")
============================================================================
"""

from typing import Any, Dict, Optional


class NameServiceError(Exception):
    """Base class for errors reported to API callers."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, details: str, error: Optional[str] = None):
        super().__init__(details)
        self.details = details
        if error is not None:
            self.error = error

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "details": self.details}


# ============================================================================
# 400 - VALIDATION
# ============================================================================


class ValidationError(NameServiceError):
    """Input failed shape, length or charset checks."""

    status_code = 400
    error = "Invalid request"

    def __init__(self, details: str, field: str = "name", error: Optional[str] = None):
        super().__init__(details, error=error)
        self.field = field


class EmptyInputError(ValidationError):
    error = "Empty input"


class TooLongError(ValidationError):
    error = "Input too long"

    def __init__(self, details: str, field: str = "name", max_length: int = 0):
        super().__init__(details, field=field)
        self.max_length = max_length


class SuspiciousRepetitionError(ValidationError):
    error = "Invalid name"


class InvalidCharactersError(ValidationError):
    error = "Invalid characters"


class MissingFieldsError(ValidationError):
    error = "Missing fields"


class InvalidBodyError(ValidationError):
    error = "Validation error"


# ============================================================================
# OTHER CLIENT ERRORS
# ============================================================================


class Unauthorized(NameServiceError):
    status_code = 401
    error = "Unauthorized"


class MethodNotAllowed(NameServiceError):
    status_code = 405
    error = "Method not allowed"


class DuplicateKeyError(NameServiceError):
    """A name with the same natural key already exists."""

    status_code = 409
    error = "Duplicate name"

    def __init__(self, name: str, details: Optional[str] = None):
        super().__init__(details or f"A name with this value already exists: {name}")
        self.name = name


class PayloadTooLarge(NameServiceError):
    status_code = 413
    error = "Request too large"


class RateLimitExceeded(NameServiceError):
    """Client exhausted its window; reset_in tells it how long to back off."""

    status_code = 429
    error = "Çok fazla istek"

    def __init__(
        self,
        details: str,
        reset_in: int = 60,
        limit: int = 0,
        error: Optional[str] = None,
    ):
        super().__init__(details, error=error)
        self.reset_in = reset_in
        self.limit = limit


# ============================================================================
# 500 - SERVER / UPSTREAM
# ============================================================================


class ConfigurationError(NameServiceError):
    error = "Service configuration error"


class UpstreamError(NameServiceError):
    """The model endpoint could not be reached or rejected the call."""

    error = "AI service error"


class UpstreamParseError(NameServiceError):
    """The model replied with something that is not the requested JSON."""

    error = "Failed to parse AI response"

    def __init__(self, raw_response: str, details: str = "The AI returned an unexpected format"):
        super().__init__(details)
        self.raw_response = raw_response

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["rawResponse"] = self.raw_response
        return body
