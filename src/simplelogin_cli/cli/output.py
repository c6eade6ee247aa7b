"""Output rendering for the sl CLI."""

from __future__ import annotations

import json
import re
from typing import Any

import yaml

PLAIN = "plain"
JSON = "json"
YAML = "yaml"
FORMATS = (PLAIN, JSON, YAML)

_SENSITIVE_FIELDS = ("apiKey", "api_key", "Authentication")


def is_structured(fmt: str) -> bool:
    return fmt in (JSON, YAML)


def _dump_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def _dump_yaml(value: Any) -> str:
    return yaml.safe_dump(
        value,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    ).rstrip("\n")


def render(value: Any, fmt: str, *, stdout) -> None:
    if fmt == JSON:
        text = _dump_json(value)
    elif fmt == YAML:
        text = _dump_yaml(value)
    elif isinstance(value, str):
        text = value
    else:
        # no plain renderer for this value
        text = _dump_json(value)
    print(text, file=stdout)


def sanitize_error_text(value: str) -> str:
    redacted = value
    for field in _SENSITIVE_FIELDS:
        redacted = re.sub(
            rf"(?i)({field}\s*[=:]\s*)([^,\s]+)",
            r"\1[REDACTED]",
            redacted,
        )
    redacted = re.sub(r"(?i)([?&]api_?key=)([^&\s]+)", r"\1[REDACTED]", redacted)
    return redacted


def error_envelope(message: str, code: str) -> dict[str, Any]:
    return {"success": False, "error": {"code": code, "message": message}}


def render_error(message: str, code: str, fmt: str, *, stdout, stderr) -> None:
    message = sanitize_error_text(message)
    if is_structured(fmt):
        render(error_envelope(message, code), fmt, stdout=stdout)
        return
    print(f"Error: {message}", file=stderr)
