from __future__ import annotations

import pytest

from simplelogin_cli.cli.config import Config, write_config
from simplelogin_cli.errors import SimpleLoginError, SimpleLoginRequestError

VALID_KEY = "sl_test_key_0123456789"
INSTANCE_URL = "https://sl.example.com"


def make_alias(alias_id: int, **overrides) -> dict:
    alias = {
        "id": alias_id,
        "email": f"alias{alias_id}@sl.example.com",
        "enabled": True,
        "pinned": False,
        "note": None,
        "name": None,
        "mailboxes": [{"id": 1, "email": "me@example.com"}],
    }
    alias.update(overrides)
    return alias


class FakeSimpleLogin:
    """In-memory stand-in for the SimpleLogin API shared by every fake client."""

    def __init__(self) -> None:
        self.valid_keys = {VALID_KEY}
        self.user = {
            "name": "Jane",
            "email": "jane@example.com",
            "is_premium": True,
            "in_trial": False,
            "max_alias_free_plan": 10,
        }
        self.alias_pages: list[list[dict]] = [[make_alias(1), make_alias(2, pinned=True)]]
        self.search_pages: list[list[dict]] = [[make_alias(7, email="shop@sl.example.com")]]
        self.options = {
            "can_create": True,
            "prefix_suggestion": "shop",
            "suffixes": [
                {"suffix": ".cat@sl.example.com", "signed_suffix": "s1", "is_custom": False, "is_premium": False},
                {"suffix": "@mydomain.com", "signed_suffix": "s2", "is_custom": True, "is_premium": False},
                {"suffix": ".dog@premium.example", "signed_suffix": "s3", "is_custom": False, "is_premium": True},
            ],
        }
        self.delete_result: dict = {"deleted": True}
        self.fail_with: SimpleLoginError | None = None
        self.calls: list[tuple[str, dict]] = []
        self.clients: list[_FakeClient] = []

    def client_factory(self, *, base_url: str, api_key: str, **kwargs) -> _FakeClient:  # noqa: ARG002
        client = _FakeClient(self, base_url=base_url, api_key=api_key)
        self.clients.append(client)
        return client

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


class _FakeClient:
    def __init__(self, backend: FakeSimpleLogin, *, base_url: str, api_key: str) -> None:
        self.backend = backend
        self.base_url = base_url
        self.api_key = api_key

    def _record(self, call: str, /, **kwargs) -> None:
        self.backend.calls.append((call, kwargs))
        if call != "get_user_info" and self.backend.fail_with is not None:
            raise self.backend.fail_with

    def get_user_info(self) -> dict:
        self._record("get_user_info")
        if self.api_key not in self.backend.valid_keys:
            raise SimpleLoginRequestError(
                "SimpleLogin request failed: 401 Wrong api key",
                status_code=401,
                detail="Wrong api key",
            )
        return dict(self.backend.user)

    @staticmethod
    def _page(pages: list[list[dict]], page_id: int) -> dict:
        return {"aliases": pages[page_id] if page_id < len(pages) else []}

    def list_aliases(self, *, page_id: int, **filters) -> dict:
        self._record("list_aliases", page_id=page_id, **filters)
        return self._page(self.backend.alias_pages, page_id)

    def search_aliases(self, query: str, *, page_id: int, **filters) -> dict:
        self._record("search_aliases", query=query, page_id=page_id, **filters)
        return self._page(self.backend.search_pages, page_id)

    def get_alias_options(self, *, hostname: str | None = None) -> dict:
        self._record("get_alias_options", hostname=hostname)
        return self.backend.options

    def create_random_alias(self, **kwargs) -> dict:
        self._record("create_random_alias", **kwargs)
        return make_alias(42, note=kwargs.get("note"))

    def create_custom_alias(self, **kwargs) -> dict:
        self._record("create_custom_alias", **kwargs)
        return make_alias(43, email=f"{kwargs['prefix']}@mydomain.com", note=kwargs.get("note"))

    def update_alias(self, alias_id: int, payload: dict) -> dict:
        self._record("update_alias", alias_id=alias_id, payload=payload)
        return {"ok": True}

    def delete_alias(self, alias_id: int) -> dict:
        self._record("delete_alias", alias_id=alias_id)
        return dict(self.backend.delete_result)


@pytest.fixture(autouse=True)
def _isolated_config_env(monkeypatch) -> None:
    monkeypatch.delenv("SIMPLELOGIN_CONFIG", raising=False)


@pytest.fixture
def fake_api(monkeypatch) -> FakeSimpleLogin:
    backend = FakeSimpleLogin()
    monkeypatch.setattr("simplelogin_cli.cli.main.SimpleLoginClient", backend.client_factory)
    return backend


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "sl" / "config.yaml"
    write_config(Config(url=INSTANCE_URL, api_key=VALID_KEY), path)
    return path
