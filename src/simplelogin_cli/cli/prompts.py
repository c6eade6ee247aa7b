"""Interactive prompts used by login and alias deletion."""

from __future__ import annotations

from urllib.parse import urlparse

from rich.console import Console
from rich.prompt import InvalidResponse, Prompt


class UrlPrompt(Prompt):
    validate_error_message = "Please enter a valid URL"

    def process_response(self, value: str) -> str:
        url = value.strip()
        if not url:
            raise InvalidResponse("URL is required")
        if not is_valid_url(url):
            raise InvalidResponse(self.validate_error_message)
        return url


class RawPrompt(Prompt):
    """Prompt that prints its message exactly as given."""

    prompt_suffix = ""


def is_valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def _console(stdout) -> Console:
    return Console(file=stdout, highlight=False, soft_wrap=True)


def ask_url(*, default: str, stdin=None, stdout=None) -> str:
    return UrlPrompt.ask(
        "Enter SimpleLogin instance URL",
        console=_console(stdout),
        default=default,
        stream=stdin,
    )


def ask_api_key(*, stdout=None) -> str:
    return Prompt.ask("Enter your API key", console=_console(stdout), password=True)


def confirm(message: str, *, stdin=None, stdout=None) -> bool:
    answer = RawPrompt.ask(message, console=_console(stdout), stream=stdin)
    return answer.strip().lower() in {"y", "yes"}
