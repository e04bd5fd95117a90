"""Command-line entry point."""

import argparse
import sys
from importlib import metadata

from . import fmt
from .client import OllamaClient
from .config import _UNSET, generate_config, resolve_settings
from .errors import ConfigError, ConnectivityError
from .repl import Session


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ollama-repl",
        description=(
            "Chat with a local Ollama model, run Python snippets and shell "
            "commands, all in one shared conversation."
        ),
    )
    parser.add_argument(
        "--host",
        default=_UNSET,
        help="Ollama base URL (env: OLLAMA_HOST, default http://localhost:11434).",
    )
    parser.add_argument(
        "--model", default=_UNSET, help="Model to chat with (env: OLLAMA_MODEL)."
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=_UNSET,
        help="Show debug diagnostics and full tracebacks (env: DEBUG).",
    )
    parser.add_argument(
        "--cache-duration",
        dest="cache_duration",
        type=float,
        default=_UNSET,
        help="Seconds to cache the model list (default 300).",
    )
    parser.add_argument(
        "--request-timeout",
        dest="request_timeout",
        type=float,
        default=_UNSET,
        help="HTTP timeout in seconds (default 300).",
    )
    color_group = parser.add_mutually_exclusive_group()
    color_group.add_argument(
        "--color", action="store_true", default=_UNSET, help="Force colored output."
    )
    color_group.add_argument(
        "--no-color",
        dest="no_color",
        action="store_true",
        default=_UNSET,
        help="Disable colored output.",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Print a commented config file template and exit.",
    )
    parser.add_argument(
        "--version", action="store_true", help="Print the version and exit."
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        try:
            version = metadata.version("ollama-repl")
        except metadata.PackageNotFoundError:
            version = "unknown"
        print(version)
        sys.exit(0)

    if args.init_config:
        print(generate_config())
        sys.exit(0)

    try:
        settings = resolve_settings(args)
    except ConfigError as e:
        fmt.error(str(e))
        sys.exit(1)

    fmt.init(color=settings.color, no_color=settings.no_color, debug=settings.debug)

    client = OllamaClient(settings.host, settings.model, timeout=settings.request_timeout)
    session = Session(client, cache_duration=settings.cache_duration)
    try:
        session.startup_check()
    except ConnectivityError as e:
        fmt.error(str(e))
        fmt.info(
            "Please check your OLLAMA_HOST and OLLAMA_MODEL settings and ensure Ollama is running."
        )
        sys.exit(1)

    session.run()
    sys.exit(0)
