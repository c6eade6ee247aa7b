"""Authenticated session handling for the sl CLI.

A :class:`Session` is created once per invocation by ``main`` and handed to
each command. It resolves the stored credentials lazily and builds at most
one API client for the lifetime of the object.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from simplelogin_cli.cli.config import read_config
from simplelogin_cli.client import DEFAULT_URL, SimpleLoginClient, api_base_url
from simplelogin_cli.errors import UnauthenticatedError

logger = logging.getLogger(__name__)

NOT_LOGGED_IN_MESSAGE = "User unauthenticated. Use sl login to authenticate."
LOGIN_REQUIRED_MESSAGE = "Please run 'sl login' to authenticate"


@dataclass(frozen=True)
class SessionConfig:
    api_key: str
    base_url: str


class Session:
    def __init__(
        self,
        config_path: str | Path | None = None,
        *,
        client_factory: Callable[..., SimpleLoginClient] = SimpleLoginClient,
    ) -> None:
        self.config_path = config_path
        self._client_factory = client_factory
        self._config: SessionConfig | None = None
        self._client: SimpleLoginClient | None = None

    def get_config(self) -> SessionConfig:
        if self._config is not None:
            return self._config

        stored = read_config(self.config_path)
        if not stored.api_key:
            raise UnauthenticatedError(NOT_LOGGED_IN_MESSAGE)
        self._config = SessionConfig(
            api_key=stored.api_key,
            base_url=api_base_url(stored.url or DEFAULT_URL),
        )
        return self._config

    def client(self) -> SimpleLoginClient:
        if self._client is None:
            config = self.get_config()
            self._client = self._client_factory(base_url=config.base_url, api_key=config.api_key)
        return self._client

    def invalidate(self) -> None:
        self._config = None
        self._client = None

    def get_authenticated_user(self) -> dict | None:
        """Return the current user, or ``None`` when it cannot be determined.

        Bad credentials and transport failures are not distinguished here;
        the cause is only visible in the debug log.
        """
        try:
            return self.client().get_user_info()
        except Exception as exc:
            logger.debug("could not fetch SimpleLogin user info: %s", exc)
            return None

    def is_authenticated(self) -> bool:
        return self.get_authenticated_user() is not None

    def require_auth(self) -> None:
        if not self.is_authenticated():
            raise UnauthenticatedError(LOGIN_REQUIRED_MESSAGE)
