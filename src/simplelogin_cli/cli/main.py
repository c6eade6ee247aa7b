"""Command-line interface for SimpleLogin (`sl`)."""

from __future__ import annotations

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from typing import Any, Callable, Sequence

from simplelogin_cli.cli.aliases import (
    filter_suffixes,
    format_alias_options,
    format_alias_table,
    format_created_alias,
    parse_mailbox_ids,
    yes_no,
)
from simplelogin_cli.cli.config import (
    Config,
    get_config_path,
    read_config,
    redact_api_key,
    write_config,
)
from simplelogin_cli.cli.output import FORMATS, PLAIN, is_structured, render, render_error
from simplelogin_cli.cli.pagination import drain_pages
from simplelogin_cli.cli.prompts import ask_api_key, ask_url, confirm, is_valid_url
from simplelogin_cli.cli.session import NOT_LOGGED_IN_MESSAGE, Session
from simplelogin_cli.client import DEFAULT_URL, SimpleLoginClient, api_base_url
from simplelogin_cli.errors import (
    EXIT_SUCCESS,
    ApiError,
    CLIError,
    InvalidArgumentsError,
    LoginError,
    LogoutError,
    SimpleLoginError,
    UnauthenticatedError,
    UsageError,
    WhoamiError,
)

CREATE_CUSTOM_COMMANDS = {"create-custom", "custom", "create:custom"}
LIST_COMMANDS = {"list", "ls"}
DELETE_COMMANDS = {"delete", "rm"}

UPDATE_OPTIONS_REQUIRED_MESSAGE = (
    "At least one optional parameter must be provided "
    "(--note, --name, --mailbox-id, --mailbox-ids, --pinned, or --disable-pgp)"
)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):
        raise UsageError(message, prog=self.prog, usage=self.format_usage())


def _cli_version() -> str:
    try:
        return pkg_version("simplelogin-cli")
    except PackageNotFoundError:
        return "0.0.0+local"


def _non_negative_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {raw!r}") from exc
    if value < 0:
        raise argparse.ArgumentTypeError("page must be >= 0")
    return value


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default=None,
        help=(
            "Path to config file containing credentials "
            "(default: $SIMPLELOGIN_CONFIG or ~/.config/simplelogin-cli/config.yaml)"
        ),
    )
    common.add_argument("--format", choices=FORMATS, default=PLAIN, help="Output format")
    common.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return common


def _add_list_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--page",
        type=_non_negative_int,
        default=0,
        help="Page number (20 aliases per page)",
    )
    state = parser.add_mutually_exclusive_group()
    state.add_argument("--pinned", action="store_true", help="Show only pinned aliases")
    state.add_argument("--disabled", action="store_true", help="Show only disabled aliases")
    state.add_argument("--enabled", action="store_true", help="Show only enabled aliases")
    parser.add_argument("--all", action="store_true", help="Fetch all pages automatically")


def _build_parser() -> argparse.ArgumentParser:
    common = _common_options()
    parser = _ArgumentParser(prog="sl", description="Manage SimpleLogin aliases")
    parser.add_argument(
        "--version",
        action="version",
        version=f"simplelogin-cli {_cli_version()}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser(
        "login",
        parents=[common],
        help="Authenticate with SimpleLogin and store credentials",
    )
    login.add_argument("--url", default=None, help="SimpleLogin instance URL")
    login.add_argument(
        "--key",
        default=None,
        help="API key (prefer the interactive prompt so the key stays out of shell history)",
    )

    sub.add_parser("logout", parents=[common], help="Remove API credentials from config")
    sub.add_parser("whoami", parents=[common], help="Check the authenticated user")

    config = sub.add_parser("config", parents=[common], help="Display current configuration")
    config.add_argument(
        "--show-key",
        action="store_true",
        help="Show full API key (default: redacted)",
    )

    alias = sub.add_parser("alias", help="Manage aliases")
    alias_sub = alias.add_subparsers(dest="alias_command", required=True)

    create = alias_sub.add_parser("create", parents=[common], help="Create a new random alias")
    create.add_argument("--mode", choices=("uuid", "word"), default=None, help="Generation mode")
    create.add_argument("--note", default=None, help="Note/description for the alias")
    create.add_argument("--hostname", default=None, help="Associated hostname")

    create_custom = alias_sub.add_parser(
        "create-custom",
        aliases=["custom", "create:custom"],
        parents=[common],
        help="Create a custom alias with specific prefix and suffix",
    )
    create_custom.add_argument("prefix", help="Alias prefix (local part)")
    create_custom.add_argument("suffix", help="Signed suffix from `sl alias options`")
    create_custom.add_argument(
        "--mailbox-ids",
        required=True,
        help="Comma-separated mailbox IDs",
    )
    create_custom.add_argument("--name", default=None, help="Display name")
    create_custom.add_argument("--note", default=None, help="Note/description for the alias")
    create_custom.add_argument("--hostname", default=None, help="Associated hostname")

    alias_list = alias_sub.add_parser(
        "list",
        aliases=["ls"],
        parents=[common],
        help="List all aliases with pagination",
    )
    _add_list_options(alias_list)

    search = alias_sub.add_parser("search", parents=[common], help="Search aliases by email")
    search.add_argument("query", help="Search query for alias email")
    _add_list_options(search)

    update = alias_sub.add_parser("update", parents=[common], help="Update alias settings")
    update.add_argument("alias_id", type=int, metavar="ALIAS_ID", help="Alias ID")
    update.add_argument("--note", default=None, help="Update note")
    update.add_argument("--name", default=None, help="Update display name")
    update.add_argument("--mailbox-id", type=int, default=None, help="Change primary mailbox")
    update.add_argument("--mailbox-ids", default=None, help="Comma-separated mailbox IDs")
    update.add_argument(
        "--pinned",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Pin/unpin alias",
    )
    update.add_argument(
        "--disable-pgp",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Disable/enable PGP",
    )

    delete = alias_sub.add_parser(
        "delete",
        aliases=["rm"],
        parents=[common],
        help="Delete an alias by ID",
    )
    delete.add_argument("alias_id", type=int, metavar="ALIAS_ID", help="Alias ID to delete")
    delete.add_argument("--confirm", action="store_true", help="Skip confirmation prompt")

    options = alias_sub.add_parser(
        "options",
        parents=[common],
        help="Get available options for creating aliases",
    )
    options.add_argument("--hostname", default=None, help="Get options for specific hostname")
    options.add_argument("--domain", default=None, help="Only suffixes for this mail domain")
    options.add_argument("--custom", action="store_true", help="Only custom suffixes")
    options.add_argument("--premium", action="store_true", help="Only premium suffixes")
    options.add_argument(
        "--prefix",
        action="store_true",
        help="Only suffixes with a prefix in front of the suffix before the @",
    )

    return parser


def _requested_format(argv: Sequence[str]) -> str:
    """Best-effort --format lookup for argument lines argparse rejected."""
    fmt = PLAIN
    tokens = list(argv)
    for index, token in enumerate(tokens):
        if token == "--format" and index + 1 < len(tokens):
            fmt = tokens[index + 1]
        elif token.startswith("--format="):
            fmt = token.split("=", 1)[1]
    return fmt if fmt in FORMATS else PLAIN


def _configure_logging(*, verbose: bool, stderr) -> None:
    package_logger = logging.getLogger("simplelogin_cli")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    handler = logging.StreamHandler(stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _fail(exc: CLIError, *, fmt: str, stdout, stderr) -> int:
    render_error(str(exc), exc.code, fmt, stdout=stdout, stderr=stderr)
    return exc.exit_code


def _call_api(method: Callable[..., dict], *args: Any, **kwargs: Any) -> dict:
    try:
        return method(*args, **kwargs)
    except SimpleLoginError as exc:
        raise ApiError(str(exc)) from exc


def _run_login(*, args, stdout, stderr, stdin) -> int:
    fmt = args.format
    prompt_out = stderr if is_structured(fmt) else stdout
    try:
        url = args.url
        if not url:
            url = read_config(args.config).url
        if not url:
            url = ask_url(default=DEFAULT_URL, stdin=stdin, stdout=prompt_out)
        url = url.strip().rstrip("/")
        if not is_valid_url(url):
            raise LoginError(f"Please enter a valid URL: {url}")

        key = args.key or ask_api_key(stdout=prompt_out)
        key = key.strip()
        if not key:
            raise LoginError("API key is required")

        base_url = api_base_url(url)
        client = SimpleLoginClient(base_url=base_url, api_key=key)
        info = client.get_user_info()
        config_path = write_config(Config(url=url, api_key=key), args.config)
    except (EOFError, KeyboardInterrupt):
        return _fail(LoginError("Login cancelled"), fmt=fmt, stdout=stdout, stderr=stderr)
    except (CLIError, SimpleLoginError) as exc:
        return _fail(LoginError(str(exc)), fmt=fmt, stdout=stdout, stderr=stderr)

    if is_structured(fmt):
        payload = {
            "success": True,
            "config": {"apiKey": redact_api_key(key), "url": base_url},
            "data": info,
        }
        render(payload, fmt, stdout=stdout)
        return EXIT_SUCCESS

    print(f"Hello {info.get('name')}! Your login was successful.", file=stdout)
    print(f"URL: {base_url}", file=stdout)
    print(f"API Key: {redact_api_key(key)}", file=stdout)
    print(f"Email: {info.get('email')}", file=stdout)
    print(f"Premium: {yes_no(info.get('is_premium'))}", file=stdout)
    print(f"\nConfiguration saved to: {config_path}", file=stdout)
    return EXIT_SUCCESS


def _run_logout(*, args, session: Session, stdout, stderr) -> int:
    fmt = args.format
    try:
        session.require_auth()
    except UnauthenticatedError as exc:
        return _fail(exc, fmt=fmt, stdout=stdout, stderr=stderr)

    try:
        stored = read_config(args.config)
        write_config(Config(url=stored.url), args.config)
    except CLIError as exc:
        return _fail(LogoutError(str(exc)), fmt=fmt, stdout=stdout, stderr=stderr)
    session.invalidate()

    if is_structured(fmt):
        render({"success": True}, fmt, stdout=stdout)
    else:
        print("Successfully logged out. API key removed from config.", file=stdout)
    return EXIT_SUCCESS


def _run_whoami(*, args, session: Session, stdout, stderr) -> int:
    fmt = args.format
    try:
        user = session.get_authenticated_user()
        if user is None:
            raise UnauthenticatedError(NOT_LOGGED_IN_MESSAGE)
        if not isinstance(user, dict):
            raise WhoamiError("unexpected user info response from SimpleLogin")
    except CLIError as exc:
        return _fail(exc, fmt=fmt, stdout=stdout, stderr=stderr)

    if is_structured(fmt):
        render({"data": user, "success": True}, fmt, stdout=stdout)
        return EXIT_SUCCESS

    print(f"Name: {user.get('name') or '(not set)'}", file=stdout)
    print(f"Email: {user.get('email')}", file=stdout)
    print(f"Premium: {yes_no(user.get('is_premium'))}", file=stdout)
    if user.get("in_trial") is not None:
        print(f"Trial: {yes_no(user['in_trial'])}", file=stdout)
    if user.get("max_alias_free_plan") is not None:
        print(f"Max aliases (free plan): {user['max_alias_free_plan']}", file=stdout)
    return EXIT_SUCCESS


def _run_config(*, args, stdout, stderr) -> int:
    fmt = args.format
    try:
        stored = read_config(args.config)
    except CLIError as exc:
        return _fail(exc, fmt=fmt, stdout=stdout, stderr=stderr)

    if stored.api_key:
        api_key = stored.api_key if args.show_key else redact_api_key(stored.api_key)
    else:
        api_key = "(not set)"
    display = {"url": stored.url or "(not set)", "apiKey": api_key}

    if is_structured(fmt):
        render(display, fmt, stdout=stdout)
        return EXIT_SUCCESS

    print(f"Config file: {get_config_path(args.config)}", file=stdout)
    print(f"URL: {display['url']}", file=stdout)
    print(f"API Key: {display['apiKey']}", file=stdout)
    return EXIT_SUCCESS


def _render_created_alias(alias: dict, fmt: str, *, stdout) -> int:
    if is_structured(fmt):
        render(alias, fmt, stdout=stdout)
    else:
        render(format_created_alias(alias), fmt, stdout=stdout)
    return EXIT_SUCCESS


def _run_alias_create(*, args, session: Session, stdout, stderr) -> int:
    fmt = args.format
    try:
        session.require_auth()
        alias = _call_api(
            session.client().create_random_alias,
            note=args.note,
            hostname=args.hostname,
            mode=args.mode,
        )
    except CLIError as exc:
        return _fail(exc, fmt=fmt, stdout=stdout, stderr=stderr)
    return _render_created_alias(alias, fmt, stdout=stdout)


def _run_alias_create_custom(*, args, session: Session, stdout, stderr) -> int:
    fmt = args.format
    try:
        mailbox_ids = parse_mailbox_ids(args.mailbox_ids)
        session.require_auth()
        alias = _call_api(
            session.client().create_custom_alias,
            prefix=args.prefix,
            signed_suffix=args.suffix,
            mailbox_ids=mailbox_ids,
            note=args.note,
            name=args.name,
            hostname=args.hostname,
        )
    except CLIError as exc:
        return _fail(exc, fmt=fmt, stdout=stdout, stderr=stderr)
    return _render_created_alias(alias, fmt, stdout=stdout)


def _list_filters(args) -> dict[str, bool]:
    filters = {}
    if args.pinned:
        filters["pinned"] = True
    if args.disabled:
        filters["disabled"] = True
    if args.enabled:
        filters["enabled"] = True
    return filters


def _fetch_alias_page(api: SimpleLoginClient, page_id: int, filters: dict) -> list:
    return _call_api(api.list_aliases, page_id=page_id, **filters).get("aliases") or []


def _search_page_fetcher(query: str) -> Callable[[SimpleLoginClient, int, dict], list]:
    def fetch(api: SimpleLoginClient, page_id: int, filters: dict) -> list:
        result = _call_api(api.search_aliases, query, page_id=page_id, **filters)
        return result.get("aliases") or []

    return fetch


def _run_alias_listing(
    *,
    args,
    session: Session,
    fetch_page: Callable[[SimpleLoginClient, int, dict], list],
    stdout,
    stderr,
) -> int:
    fmt = args.format

    def announce(page_id: int) -> None:
        print(f"Fetching page {page_id}...", file=stdout)

    try:
        session.require_auth()
        aliases = drain_pages(
            fetch_page,
            session.client(),
            _list_filters(args),
            start_page=args.page,
            fetch_all=args.all,
            on_page=None if is_structured(fmt) else announce,
        )
    except CLIError as exc:
        return _fail(exc, fmt=fmt, stdout=stdout, stderr=stderr)

    if is_structured(fmt):
        render(aliases, fmt, stdout=stdout)
    else:
        render(format_alias_table(aliases), fmt, stdout=stdout)
    return EXIT_SUCCESS


def _update_payload(args) -> dict:
    payload: dict = {}
    if args.note is not None:
        payload["note"] = args.note
    if args.name is not None:
        payload["name"] = args.name
    if args.mailbox_id is not None:
        payload["mailbox_id"] = args.mailbox_id
    if args.mailbox_ids is not None:
        payload["mailbox_ids"] = parse_mailbox_ids(args.mailbox_ids)
    if args.pinned is not None:
        payload["pinned"] = args.pinned
    if args.disable_pgp is not None:
        payload["disable_pgp"] = args.disable_pgp
    if not payload:
        raise InvalidArgumentsError(UPDATE_OPTIONS_REQUIRED_MESSAGE)
    return payload


def _run_alias_update(*, args, session: Session, stdout, stderr) -> int:
    fmt = args.format
    try:
        payload = _update_payload(args)
        session.require_auth()
        _call_api(session.client().update_alias, args.alias_id, payload)
    except CLIError as exc:
        return _fail(exc, fmt=fmt, stdout=stdout, stderr=stderr)

    if is_structured(fmt):
        render({"success": True}, fmt, stdout=stdout)
    else:
        print(f"Alias {args.alias_id} updated successfully.", file=stdout)
    return EXIT_SUCCESS


def _run_alias_delete(*, args, session: Session, stdout, stderr, stdin) -> int:
    fmt = args.format
    try:
        session.require_auth()
    except UnauthenticatedError as exc:
        return _fail(exc, fmt=fmt, stdout=stdout, stderr=stderr)

    if not args.confirm and fmt == PLAIN:
        question = f"Are you sure you want to delete alias {args.alias_id}? (y/N): "
        try:
            confirmed = confirm(question, stdin=stdin, stdout=stdout)
        except (EOFError, KeyboardInterrupt):
            confirmed = False
            print(file=stdout)
        if not confirmed:
            print("Deletion cancelled.", file=stdout)
            return EXIT_SUCCESS

    try:
        _call_api(session.client().delete_alias, args.alias_id)
    except CLIError as exc:
        return _fail(exc, fmt=fmt, stdout=stdout, stderr=stderr)

    if is_structured(fmt):
        # a 2xx from DELETE means the alias is gone, whatever the body says
        render({"success": True, "deleted": True}, fmt, stdout=stdout)
    else:
        print(f"Alias {args.alias_id} deleted successfully.", file=stdout)
    return EXIT_SUCCESS


def _run_alias_options(*, args, session: Session, stdout, stderr) -> int:
    fmt = args.format
    try:
        session.require_auth()
        options = _call_api(session.client().get_alias_options, hostname=args.hostname)
    except CLIError as exc:
        return _fail(exc, fmt=fmt, stdout=stdout, stderr=stderr)

    suffixes = filter_suffixes(
        options.get("suffixes") or [],
        domain=args.domain,
        custom=args.custom,
        premium=args.premium,
        prefix=args.prefix,
    )
    options = {**options, "suffixes": suffixes}

    if is_structured(fmt):
        render(options, fmt, stdout=stdout)
    else:
        render(format_alias_options(options), fmt, stdout=stdout)
    return EXIT_SUCCESS


def _run_alias(*, args, session: Session, stdout, stderr, stdin) -> int:
    command = args.alias_command
    if command == "create":
        return _run_alias_create(args=args, session=session, stdout=stdout, stderr=stderr)
    if command in CREATE_CUSTOM_COMMANDS:
        return _run_alias_create_custom(args=args, session=session, stdout=stdout, stderr=stderr)
    if command in LIST_COMMANDS:
        return _run_alias_listing(
            args=args,
            session=session,
            fetch_page=_fetch_alias_page,
            stdout=stdout,
            stderr=stderr,
        )
    if command == "search":
        return _run_alias_listing(
            args=args,
            session=session,
            fetch_page=_search_page_fetcher(args.query),
            stdout=stdout,
            stderr=stderr,
        )
    if command == "update":
        return _run_alias_update(args=args, session=session, stdout=stdout, stderr=stderr)
    if command in DELETE_COMMANDS:
        return _run_alias_delete(
            args=args,
            session=session,
            stdout=stdout,
            stderr=stderr,
            stdin=stdin,
        )
    if command == "options":
        return _run_alias_options(args=args, session=session, stdout=stdout, stderr=stderr)
    return _fail(
        InvalidArgumentsError(f"unknown alias command: {command}"),
        fmt=args.format,
        stdout=stdout,
        stderr=stderr,
    )


def main(
    argv: Sequence[str] | None = None,
    *,
    stdout=sys.stdout,
    stderr=sys.stderr,
    stdin=None,
) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as exc:
        fmt = _requested_format(argv)
        if is_structured(fmt):
            return _fail(exc, fmt=fmt, stdout=stdout, stderr=stderr)
        print(exc.usage, end="", file=stderr)
        print(f"{exc.prog}: error: {exc}", file=stderr)
        return exc.exit_code

    _configure_logging(verbose=args.verbose, stderr=stderr)
    session = Session(args.config, client_factory=SimpleLoginClient)

    if args.command == "login":
        return _run_login(args=args, stdout=stdout, stderr=stderr, stdin=stdin)

    if args.command == "logout":
        return _run_logout(args=args, session=session, stdout=stdout, stderr=stderr)

    if args.command == "whoami":
        return _run_whoami(args=args, session=session, stdout=stdout, stderr=stderr)

    if args.command == "config":
        return _run_config(args=args, stdout=stdout, stderr=stderr)

    if args.command == "alias":
        return _run_alias(args=args, session=session, stdout=stdout, stderr=stderr, stdin=stdin)

    print("unknown command", file=stderr)
    return InvalidArgumentsError.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
