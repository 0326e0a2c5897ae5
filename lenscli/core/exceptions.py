"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.

Taxonomy:
    ValidationError     - missing/conflicting flags, raised before any network call
    PayloadError        - malformed file or inline JSON
    RemoteError         - non-2xx response or transport failure
    PartialFanoutError  - some (not all) cluster-scoped calls failed
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


# =============================================================================
# Validation
# =============================================================================


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class MissingFlagsError(ValidationError):
    """Raised when one or more required flags are unset. Lists all of them."""

    def __init__(self, names: list[str]) -> None:
        self.names = list(names)
        quoted = ", ".join(f'"{name}"' for name in self.names)
        super().__init__(
            f"required flag(s) {quoted} not set",
            details={"missing": self.names},
        )


class NameMismatchError(ValidationError):
    """Raised when an explicit name conflicts with the name embedded in a payload."""

    def __init__(self, given: str, embedded: str) -> None:
        self.given = given
        self.embedded = embedded
        super().__init__(
            f"name '{given}' does not match the name '{embedded}' found in the payload",
            details={"given": given, "embedded": embedded},
        )


# =============================================================================
# Payload
# =============================================================================


class PayloadError(ApplicationError):
    """Raised when a payload cannot be decoded."""

    def __init__(self, message: str = "Invalid payload") -> None:
        super().__init__(message, code="VAL_PAYLOAD_ERROR")


class MalformedFileError(PayloadError):
    """Raised when a payload file cannot be read or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"unable to load '{path}': {reason}")


class InvalidInlineConfigError(PayloadError):
    """Raised when an inline flag is neither a readable file nor valid JSON."""

    def __init__(self, raw: str, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"unable to parse the configs: [{reason}]")


# =============================================================================
# Remote
# =============================================================================

STATUS_NOT_FOUND = 404
STATUS_FORBIDDEN = 403
STATUS_UNAUTHORIZED = 401
STATUS_BAD_REQUEST = 400
STATUS_INTERNAL = 500


def status_class(status_code: int | None) -> str:
    """Bucket an HTTP status code into a human-readable class."""
    if status_code is None:
        return "unreachable"
    if status_code == STATUS_NOT_FOUND:
        return "not found"
    if status_code == STATUS_FORBIDDEN:
        return "forbidden"
    if status_code == STATUS_UNAUTHORIZED:
        return "unauthorized"
    if 400 <= status_code < 500:
        return "bad request"
    if status_code >= STATUS_INTERNAL:
        return "internal"
    return "unexpected"


class RemoteError(ApplicationError):
    """Raised when a remote call fails."""

    code_prefix = "REMOTE"

    def __init__(
        self,
        message: str = "Remote call failed",
        status_code: int | None = None,
        hint: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.status_class = status_class(status_code)
        self.hint = hint
        code = f"{self.code_prefix}_{self.status_class.upper().replace(' ', '_')}"
        super().__init__(message, code=code)

    def __str__(self) -> str:
        return self.hint or self.message


class NotFoundError(RemoteError):
    """Raised when a remote resource cannot be found."""


class ForbiddenError(RemoteError):
    """Raised when access to a remote resource is denied."""


class UnauthorizedError(RemoteError):
    """Raised when the control plane rejects the credentials."""


class BadRequestError(RemoteError):
    """Raised when the control plane rejects the request."""


class InternalServerError(RemoteError):
    """Raised when the control plane fails internally."""


class BadResponseError(RemoteError):
    """Raised when a 2xx response body does not match the expected shape."""

    def __init__(self, message: str = "Unexpected response body", status_code: int | None = None) -> None:
        super().__init__(message, status_code)
        self.status_class = "bad response"
        self.code = "REMOTE_BAD_RESPONSE"


def remote_error_for(status_code: int, message: str) -> RemoteError:
    """Build the RemoteError subclass matching a status code bucket."""
    if status_code == STATUS_NOT_FOUND:
        return NotFoundError(message, status_code)
    if status_code == STATUS_FORBIDDEN:
        return ForbiddenError(message, status_code)
    if status_code == STATUS_UNAUTHORIZED:
        return UnauthorizedError(message, status_code)
    if 400 <= status_code < 500:
        return BadRequestError(message, status_code)
    if status_code >= STATUS_INTERNAL:
        return InternalServerError(message, status_code)
    return RemoteError(message, status_code)


class PartialFanoutError(ApplicationError):
    """Raised (or attached) when some, but not all, fan-out members failed."""

    def __init__(self, results: list[Any], failures: list[tuple[str, Exception]]) -> None:
        self.results = results
        self.failures = failures
        self.members = [member for member, _ in failures]
        members = ", ".join(self.members)
        super().__init__(
            f"{len(failures)} cluster call(s) failed: {members}",
            code="REMOTE_PARTIAL_FANOUT",
        )


@contextmanager
def not_found_hint(message: str) -> Iterator[None]:
    """
    Attach a contextual hint to a not-found RemoteError raised in the block.

    Other errors pass through untouched.

    Example:
        with not_found_hint(f"connector '{cluster}:{name}' does not exist"):
            connector = client.get_connector(cluster, name)
    """
    try:
        yield
    except NotFoundError as e:
        e.hint = message
        raise
