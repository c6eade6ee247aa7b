"""Credential storage for the sl CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from simplelogin_cli.errors import ConfigReadError, ConfigWriteError

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "simplelogin-cli" / "config.yaml"
CONFIG_PATH_ENV_VAR = "SIMPLELOGIN_CONFIG"
REDACTED_API_KEY = "******"


@dataclass(frozen=True)
class Config:
    url: str | None = None
    api_key: str | None = None

    def to_dict(self) -> dict[str, str]:
        payload: dict[str, str] = {}
        if self.url is not None:
            payload["url"] = self.url
        if self.api_key is not None:
            payload["apiKey"] = self.api_key
        return payload


def get_config_path(path: str | Path | None = None) -> Path:
    if path:
        return Path(path).expanduser()
    env_path = os.getenv(CONFIG_PATH_ENV_VAR)
    if env_path and env_path.strip():
        return Path(env_path.strip()).expanduser()
    return DEFAULT_CONFIG_PATH


def _optional_str(source: dict[str, Any], key: str) -> str | None:
    value = source.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigReadError(f"Failed to read config file: {key} must be a string")
    return value


def read_config(path: str | Path | None = None) -> Config:
    config_path = get_config_path(path)
    if not config_path.exists():
        return Config()

    try:
        parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigReadError(f"Failed to read config file: {exc}") from exc
    if parsed is None:
        return Config()
    if not isinstance(parsed, dict):
        raise ConfigReadError(f"Failed to read config file: {config_path} must contain a mapping")

    return Config(url=_optional_str(parsed, "url"), api_key=_optional_str(parsed, "apiKey"))


def _chmod_owner_only(path: Path, mode: int = 0o600) -> None:
    if os.name != "posix":
        return
    path.chmod(mode)


def write_config(config: Config, path: str | Path | None = None) -> Path:
    config_path = get_config_path(path)
    config_dir = config_path.parent

    try:
        if not config_dir.exists():
            config_dir.mkdir(parents=True, mode=0o700)
        content = yaml.safe_dump(config.to_dict(), sort_keys=False, default_flow_style=False)
        fd = os.open(config_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        # the file may predate this write with looser permissions
        _chmod_owner_only(config_path)
    except OSError as exc:
        raise ConfigWriteError(f"Failed to write config file: {exc}") from exc
    return config_path


def redact_api_key(api_key: str) -> str:  # noqa: ARG001
    return REDACTED_API_KEY
