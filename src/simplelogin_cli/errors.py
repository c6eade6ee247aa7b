"""Error types for the SimpleLogin client and the `sl` CLI."""

from __future__ import annotations

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_INVALID_ARGUMENTS = 2
EXIT_UNAUTHENTICATED = 3
EXIT_API_ERROR = 4


class SimpleLoginError(RuntimeError):
    """Base client error."""


class SimpleLoginUnavailableError(SimpleLoginError):
    """SimpleLogin could not be reached."""


class SimpleLoginRequestError(SimpleLoginError):
    """SimpleLogin returned an HTTP error response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        detail: str | None = None,
        body: object | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
        self.body = body


class SimpleLoginResponseError(SimpleLoginError):
    """SimpleLogin returned a body that is not valid JSON."""


class CLIError(RuntimeError):
    """Base error for failures reported by a command."""

    code = "ERROR"
    exit_code = EXIT_ERROR


class InvalidArgumentsError(CLIError):
    code = "INVALID_ARGUMENTS"
    exit_code = EXIT_INVALID_ARGUMENTS


class UnauthenticatedError(CLIError):
    code = "UNAUTHORIZED"
    exit_code = EXIT_UNAUTHENTICATED


class ApiError(CLIError):
    code = "API_ERROR"
    exit_code = EXIT_API_ERROR


class ConfigReadError(CLIError):
    code = "CONFIG_ERROR"


class ConfigWriteError(CLIError):
    code = "CONFIG_ERROR"


class LoginError(CLIError):
    code = "LOGIN_ERROR"


class LogoutError(CLIError):
    code = "LOGOUT_ERROR"


class WhoamiError(CLIError):
    code = "WHOAMI_ERROR"


class UsageError(InvalidArgumentsError):
    """Command line could not be parsed."""

    def __init__(self, message: str, *, prog: str = "sl", usage: str = "") -> None:
        super().__init__(message)
        self.prog = prog
        self.usage = usage
