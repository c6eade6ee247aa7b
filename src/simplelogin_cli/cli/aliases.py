"""Alias argument parsing, option filters and plain-text renderers."""

from __future__ import annotations

from typing import Any, Iterable

from simplelogin_cli.errors import InvalidArgumentsError

_ID_WIDTH = 8
_EMAIL_WIDTH = 40
_FLAG_WIDTH = 10


def parse_mailbox_ids(raw: str) -> list[int]:
    mailbox_ids: list[int] = []
    for token in raw.split(","):
        stripped = token.strip()
        try:
            mailbox_ids.append(int(stripped))
        except ValueError as exc:
            raise InvalidArgumentsError(f"Invalid mailbox ID: {token}") from exc
    if not mailbox_ids:
        raise InvalidArgumentsError("At least one mailbox ID is required")
    return mailbox_ids


def _has_prefix(suffix: str) -> bool:
    at_index = suffix.find("@")
    if at_index <= 0:
        return False
    return "." in suffix[:at_index]


def filter_suffixes(
    suffixes: Iterable[dict[str, Any]],
    *,
    domain: str | None = None,
    custom: bool = False,
    premium: bool = False,
    prefix: bool = False,
) -> list[dict[str, Any]]:
    filtered = list(suffixes)
    if domain:
        filtered = [s for s in filtered if str(s.get("suffix", "")).endswith(f"@{domain}")]
    if custom:
        filtered = [s for s in filtered if s.get("is_custom") is True]
    if premium:
        filtered = [s for s in filtered if s.get("is_premium") is True]
    if prefix:
        filtered = [s for s in filtered if _has_prefix(str(s.get("suffix", "")))]
    return filtered


def yes_no(value: object) -> str:
    return "Yes" if value else "No"


def _mailbox_emails(alias: dict[str, Any]) -> str:
    return ", ".join(str(m.get("email", "")) for m in alias.get("mailboxes") or [])


def format_created_alias(alias: dict[str, Any]) -> str:
    enabled = str(bool(alias.get("enabled"))).lower()
    lines = [
        "Alias created successfully",
        f"ID:      {alias.get('id')}",
        f"Email:   {alias.get('email')}",
        f"Enabled: {enabled}",
    ]
    if alias.get("note"):
        lines.append(f"Note:    {alias['note']}")
    if alias.get("mailboxes"):
        lines.append(f"Mailboxes: {_mailbox_emails(alias)}")
    return "\n".join(lines)


def format_alias_table(aliases: list[dict[str, Any]]) -> str:
    if not aliases:
        return "No aliases found."

    header = (
        "ID".ljust(_ID_WIDTH)
        + "Email".ljust(_EMAIL_WIDTH)
        + "Enabled".ljust(_FLAG_WIDTH)
        + "Pinned".ljust(_FLAG_WIDTH)
        + "Mailboxes"
    )
    lines = [header, "-" * 100]
    for alias in aliases:
        alias_id = str(alias.get("id")).ljust(_ID_WIDTH)
        email = str(alias.get("email", "")).ljust(_EMAIL_WIDTH)[:_EMAIL_WIDTH]
        enabled = yes_no(alias.get("enabled")).ljust(_FLAG_WIDTH)
        pinned = yes_no(alias.get("pinned")).ljust(_FLAG_WIDTH)
        lines.append(f"{alias_id}{email}{enabled}{pinned}{_mailbox_emails(alias)}")

    total = len(aliases)
    lines.append("")
    lines.append(f"Total: {total} alias{'' if total == 1 else 'es'}")
    return "\n".join(lines)


def format_alias_options(options: dict[str, Any]) -> str:
    lines = [
        "Alias Options",
        f"Can Create: {yes_no(options.get('can_create'))}",
        f"\nPrefix Suggestion: {options.get('prefix_suggestion')}",
    ]
    suffixes = options.get("suffixes") or []
    if suffixes:
        lines.append("\nAvailable Suffixes:")
        for suffix in suffixes:
            tags = []
            if suffix.get("is_custom"):
                tags.append("custom")
            if suffix.get("is_premium"):
                tags.append("premium")
            tag_text = f" ({', '.join(tags)})" if tags else ""
            lines.append(f"  {suffix.get('suffix')}{tag_text}")
    else:
        lines.append("\nNo suffixes available")
    return "\n".join(lines)
