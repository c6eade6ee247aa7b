"""SimpleLogin client and `sl` command-line interface."""

from simplelogin_cli.client import DEFAULT_URL, SimpleLoginClient, api_base_url
from simplelogin_cli.errors import (
    ApiError,
    CLIError,
    ConfigReadError,
    ConfigWriteError,
    InvalidArgumentsError,
    LoginError,
    LogoutError,
    SimpleLoginError,
    SimpleLoginRequestError,
    SimpleLoginResponseError,
    SimpleLoginUnavailableError,
    UnauthenticatedError,
    WhoamiError,
)

__all__ = [
    "DEFAULT_URL",
    "SimpleLoginClient",
    "api_base_url",
    "SimpleLoginError",
    "SimpleLoginUnavailableError",
    "SimpleLoginRequestError",
    "SimpleLoginResponseError",
    "CLIError",
    "InvalidArgumentsError",
    "UnauthenticatedError",
    "ApiError",
    "ConfigReadError",
    "ConfigWriteError",
    "LoginError",
    "LogoutError",
    "WhoamiError",
]
