"""Configuration loading and merging for ollama-repl.

Reads TOML config from ~/.config/ollama-repl/config.toml (global) and
./ollama-repl.toml (project), then the OLLAMA_HOST / OLLAMA_MODEL / DEBUG
environment variables. Precedence: CLI > environment > project > global >
defaults.
"""

import argparse
import os
import re
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigError

_UNSET = object()  # Sentinel for "not set by CLI"

DEFAULT_HOST = "http://localhost:11434"
PROJECT_CONFIG_NAME = "ollama-repl.toml"

# --- Schema ---

CONFIG_KEYS: dict[str, type | tuple[type, ...]] = {
    "host": str,
    "model": str,
    "debug": bool,
    "color": bool,
    "cache_duration": (int, float),
    "request_timeout": (int, float),
}

# Environment variable -> config key
ENV_KEYS: dict[str, str] = {
    "OLLAMA_HOST": "host",
    "OLLAMA_MODEL": "model",
    "DEBUG": "debug",
}

_DEFAULTS: dict[str, Any] = {
    "host": DEFAULT_HOST,
    "model": None,
    "debug": False,
    "color": False,
    "no_color": False,
    "cache_duration": 300,
    "request_timeout": 300,
}

_TRUTHY = {"1", "true", "yes", "on"}
_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


@dataclass
class Settings:
    host: str
    model: str
    debug: bool = False
    color: bool = False
    no_color: bool = False
    cache_duration: float = 300
    request_timeout: float = 300


# --- Internal helpers ---


def global_config_dir() -> Path:
    """Return the global config directory, respecting XDG_CONFIG_HOME."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "ollama-repl"
    return Path.home() / ".config" / "ollama-repl"


def _type_name(expected: type | tuple[type, ...]) -> str:
    if isinstance(expected, tuple):
        return " or ".join(t.__name__ for t in expected)
    return expected.__name__


def _validate_config(config: dict, source: str) -> None:
    """Type-check a parsed config dict. Unknown keys only warn."""
    for key, value in config.items():
        if key not in CONFIG_KEYS:
            print(f"warning: {source}: unknown config key {key!r}", file=sys.stderr)
            continue

        expected = CONFIG_KEYS[key]
        # bool is a subclass of int; reject it for numeric keys.
        if isinstance(value, bool) and expected is not bool:
            raise ConfigError(
                f"{source}: {key!r} expected {_type_name(expected)}, got bool"
            )
        if not isinstance(value, expected):
            raise ConfigError(
                f"{source}: {key!r} expected {_type_name(expected)}, got {type(value).__name__}"
            )


def _load_single(path: Path, label: str) -> dict:
    """Load and validate a single TOML config file. Returns empty dict if missing."""
    if not path.is_file():
        return {}
    try:
        with open(path, "rb") as f:
            config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{label}: invalid TOML: {e}") from e

    _validate_config(config, label)
    return {k: v for k, v in config.items() if k in CONFIG_KEYS}


# --- Public API ---


def load_config(base_dir: Path) -> dict:
    """Load and merge global + project config files.

    Only keys actually set in a file are returned; no defaults are injected.
    """
    global_path = global_config_dir() / "config.toml"
    global_config = _load_single(global_path, str(global_path))

    project_path = Path(base_dir).resolve() / PROJECT_CONFIG_NAME
    project_config = _load_single(project_path, str(project_path))

    return {**global_config, **project_config}


def env_config(environ: Mapping[str, str] | None = None) -> dict:
    """Read the supported environment variables into config keys."""
    environ = os.environ if environ is None else environ
    config: dict[str, Any] = {}
    for var, key in ENV_KEYS.items():
        value = environ.get(var)
        if value is None or value == "":
            continue
        if CONFIG_KEYS[key] is bool:
            config[key] = value.strip().lower() in _TRUTHY
        else:
            config[key] = value
    return config


def apply_config_to_args(args: argparse.Namespace, config: dict) -> None:
    """Fill argparse values the CLI left unset from ``config``, then defaults."""

    def _is_unset(dest: str) -> bool:
        return getattr(args, dest, _UNSET) is _UNSET

    # A single config key controls the --color/--no-color pair.
    if "color" in config and _is_unset("color") and _is_unset("no_color"):
        args.color = config["color"]
        args.no_color = not config["color"]

    for key, value in config.items():
        if key == "color":
            continue
        if _is_unset(key):
            setattr(args, key, value)

    for dest, default in _DEFAULTS.items():
        if _is_unset(dest):
            setattr(args, dest, default)


def validate_settings(args: argparse.Namespace) -> Settings:
    """Turn resolved arguments into Settings, enforcing the startup requirements."""
    model = (args.model or "").strip()
    if not model:
        raise ConfigError(
            "Configuration error: OLLAMA_MODEL environment variable (or --model) must be set."
        )
    host = (args.host or "").strip().rstrip("/")
    if not _URL_RE.match(host):
        raise ConfigError(
            "Configuration error: OLLAMA_HOST must be a valid URL (e.g., http://localhost:11434)."
        )
    if args.cache_duration < 0:
        raise ConfigError("Configuration error: cache_duration must not be negative.")
    if args.request_timeout <= 0:
        raise ConfigError("Configuration error: request_timeout must be positive.")
    return Settings(
        host=host,
        model=model,
        debug=bool(args.debug),
        color=bool(args.color),
        no_color=bool(args.no_color),
        cache_duration=args.cache_duration,
        request_timeout=args.request_timeout,
    )


def resolve_settings(
    args: argparse.Namespace,
    base_dir: Path | str = ".",
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Merge files, environment and CLI flags into validated Settings."""
    config = load_config(Path(base_dir))
    config.update(env_config(environ))
    apply_config_to_args(args, config)
    return validate_settings(args)


def generate_config(project: bool = False) -> str:
    """Return a commented-out template config string."""
    lines = [
        "# ollama-repl configuration file",
        f"# {'Project' if project else 'Global'} config: "
        f"{'<project>/' + PROJECT_CONFIG_NAME if project else '~/.config/ollama-repl/config.toml'}",
        "#",
        "# CLI flags and OLLAMA_HOST / OLLAMA_MODEL / DEBUG override these values.",
        "",
        "# --- Server / model ---",
        f'# host = "{DEFAULT_HOST}"',
        '# model = "llama3"',
        "# request_timeout = 300     # seconds",
        "",
        "# --- Model list cache ---",
        "# cache_duration = 300      # seconds",
        "",
        "# --- UI ---",
        "# color = true       # true = force color, false = force no-color, absent = auto",
        "# debug = false",
        "",
    ]
    return "\n".join(lines)
