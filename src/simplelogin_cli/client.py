"""Typed client for the SimpleLogin REST API."""

from __future__ import annotations

from dataclasses import dataclass, field

import requests

from simplelogin_cli.errors import (
    SimpleLoginRequestError,
    SimpleLoginResponseError,
    SimpleLoginUnavailableError,
)

DEFAULT_URL = "https://app.simplelogin.io"
API_KEY_HEADER = "Authentication"


def api_base_url(url: str) -> str:
    """Return the API root for a SimpleLogin instance URL."""
    return f"{url.rstrip('/')}/api"


@dataclass
class SimpleLoginClient:
    base_url: str
    api_key: str
    timeout: float = 10.0
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = requests.Session()
        self._session.headers[API_KEY_HEADER] = self.api_key

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json_payload: dict | None = None,
    ) -> dict:
        try:
            response = self._session.request(
                method,
                self._url(path),
                params=params,
                json=json_payload,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise SimpleLoginUnavailableError(str(exc)) from exc

        if response.status_code >= 400:
            body: object | None = None
            detail: str | None = None
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and isinstance(body.get("error"), str):
                detail = body["error"]
            if detail:
                message = f"SimpleLogin request failed: {response.status_code} {detail}"
            else:
                message = f"SimpleLogin request failed: {response.status_code} {response.text}"
            raise SimpleLoginRequestError(
                message,
                status_code=response.status_code,
                detail=detail,
                body=body,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise SimpleLoginResponseError(
                f"invalid JSON in SimpleLogin response: {method} {path}"
            ) from exc

    def get_user_info(self) -> dict:
        return self._request("GET", "/user_info")

    def list_aliases(
        self,
        *,
        page_id: int,
        pinned: bool = False,
        disabled: bool = False,
        enabled: bool = False,
    ) -> dict:
        params = _alias_query(page_id, pinned=pinned, disabled=disabled, enabled=enabled)
        return self._request("GET", "/v2/aliases", params=params)

    def search_aliases(
        self,
        query: str,
        *,
        page_id: int,
        pinned: bool = False,
        disabled: bool = False,
        enabled: bool = False,
    ) -> dict:
        params = _alias_query(page_id, pinned=pinned, disabled=disabled, enabled=enabled)
        return self._request("POST", "/v2/aliases", params=params, json_payload={"query": query})

    def get_alias_options(self, *, hostname: str | None = None) -> dict:
        params = {"hostname": hostname} if hostname else None
        return self._request("GET", "/v5/alias/options", params=params)

    def create_random_alias(
        self,
        *,
        note: str | None = None,
        hostname: str | None = None,
        mode: str | None = None,
    ) -> dict:
        params = {}
        if hostname:
            params["hostname"] = hostname
        if mode:
            params["mode"] = mode
        payload = {"note": note} if note is not None else {}
        return self._request(
            "POST",
            "/alias/random/new",
            params=params or None,
            json_payload=payload,
        )

    def create_custom_alias(
        self,
        *,
        prefix: str,
        signed_suffix: str,
        mailbox_ids: list[int],
        note: str | None = None,
        name: str | None = None,
        hostname: str | None = None,
    ) -> dict:
        payload: dict = {
            "alias_prefix": prefix,
            "signed_suffix": signed_suffix,
            "mailbox_ids": mailbox_ids,
        }
        if note is not None:
            payload["note"] = note
        if name is not None:
            payload["name"] = name
        params = {"hostname": hostname} if hostname else None
        return self._request("POST", "/v3/alias/custom/new", params=params, json_payload=payload)

    def update_alias(self, alias_id: int, payload: dict) -> dict:
        return self._request("PATCH", f"/aliases/{alias_id}", json_payload=payload)

    def delete_alias(self, alias_id: int) -> dict:
        return self._request("DELETE", f"/aliases/{alias_id}")


def _alias_query(page_id: int, *, pinned: bool, disabled: bool, enabled: bool) -> dict:
    params: dict = {"page_id": page_id}
    if pinned:
        params["pinned"] = "true"
    if disabled:
        params["disabled"] = "true"
    if enabled:
        params["enabled"] = "true"
    return params


__all__ = ["DEFAULT_URL", "SimpleLoginClient", "api_base_url"]
