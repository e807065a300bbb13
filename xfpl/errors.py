"""Error types carrying process exit codes, and API error classification."""

from __future__ import annotations


class CliError(Exception):
    """An error that maps onto a specific process exit code."""

    code: int = 1

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def message(self) -> str:
        return str(self)


class UsageError(CliError):
    """Bad invocation: missing or malformed arguments."""

    code = 2


class NotFoundError(CliError):
    """The requested resource does not exist."""

    code = 3


class AuthError(CliError):
    """Credentials are missing, invalid or lack permission."""

    code = 4


class ApiError(CliError):
    """The API rejected the request or returned something unusable."""

    code = 5


class PartialFailureError(CliError):
    """A batch request was accepted but some of its operations failed."""

    code = 6


class RateLimitError(CliError):
    """The API is throttling requests."""

    code = 7


class ConfigError(CliError):
    """The configuration could not be read or written."""

    code = 10


class HttpError(Exception):
    """A non-2xx response from the API."""

    def __init__(self, status_code: int, method: str = "GET", path: str = "", body: str = "") -> None:
        self.status_code = status_code
        self.method = method
        self.path = path
        self.body = body
        detail = f"{method} {path}".strip()
        text = f"{detail}: HTTP {status_code}" if detail else f"HTTP {status_code}"
        if body:
            text = f"{text}: {body}"
        super().__init__(text)


_DOCTOR_HINT = "\n      Run 'xfpl doctor' to check auth status."


def classify_api_error(err: BaseException, idempotent: bool = False) -> CliError | None:
    """Map an API error onto a CliError with an actionable hint.

    Returns None when the error is a conflict on an idempotent request,
    which counts as "already exists" rather than a failure.
    """
    msg = str(err)
    if "HTTP 409" in msg:
        if idempotent:
            return None
        return ApiError(msg, err)
    if "HTTP 401" in msg:
        return AuthError(f"{msg}\nhint: check your API key.{_DOCTOR_HINT}", err)
    if "HTTP 403" in msg:
        return AuthError(
            f"{msg}\nhint: permission denied. Your credentials are valid but lack access to this resource."
            "\n      Check that your API key has the required permissions."
            f"{_DOCTOR_HINT}",
            err,
        )
    if "HTTP 404" in msg:
        return NotFoundError(
            f"{msg}\nhint: resource not found. Run the 'list' command to see available items",
            err,
        )
    if "HTTP 429" in msg:
        return RateLimitError(msg, err)
    return ApiError(msg, err)


def exit_code(err: BaseException | None) -> int:
    """Return the process exit code for an error (0 when there is none)."""
    if err is None:
        return 0
    if isinstance(err, CliError):
        return err.code
    return 1