"""Configuration loading and validation."""

import logging
import sys
from pathlib import Path
from typing import Any, Dict

import yaml

from .launcher import LAUNCHER_NAMES

# Valid configuration keys and their expected Python types.
_VALID_KEYS: Dict[str, type] = {
    "languages": list,
    "timeout_ms": int,
    "launcher": str,
    "executable": str,
    "stderr_excerpt_limit": int,
}

# Keys that must hold an integer >= 1.
_POSITIVE_INT_KEYS: frozenset = frozenset({"timeout_ms", "stderr_excerpt_limit"})

CONFIG_FILENAME = ".subtitle-fetcher.yaml"


def validate_config(config: Dict[str, Any]) -> None:
    """Validate *config* dict against known keys and types.

    Calls ``sys.exit(1)`` with a human-readable message on the first set of
    errors found so that the user sees all problems at once.
    """
    errors = []

    if not isinstance(config, dict):
        errors.append(f"top level must be a mapping, got {type(config).__name__}")
        config = {}

    for key, value in config.items():
        if key not in _VALID_KEYS:
            errors.append(
                f"Unknown key '{key}'. Valid keys: {', '.join(sorted(_VALID_KEYS))}"
            )
            continue

        expected = _VALID_KEYS[key]
        # bool is an int subclass; `timeout_ms: yes` is a mistake, not 1.
        if isinstance(value, bool) and expected is not bool:
            errors.append(f"'{key}' must be {expected.__name__}, got bool")
        elif not isinstance(value, expected):
            errors.append(
                f"'{key}' must be {expected.__name__}, got {type(value).__name__}"
            )

    # Value-level checks (only when the type already passed).
    for key in _POSITIVE_INT_KEYS:
        value = config.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value < 1:
            errors.append(f"'{key}' must be >= 1, got {value}")

    languages = config.get("languages")
    if isinstance(languages, list):
        if not languages:
            errors.append("'languages' must not be empty")
        bad = [lang for lang in languages if not isinstance(lang, str)]
        if bad:
            errors.append(f"'languages' entries must be strings, got {bad!r}")

    launcher = config.get("launcher")
    if isinstance(launcher, str) and launcher not in LAUNCHER_NAMES:
        errors.append(
            f"'launcher' must be one of {sorted(LAUNCHER_NAMES)}, got '{launcher}'"
        )

    executable = config.get("executable")
    if isinstance(executable, str) and not executable.strip():
        errors.append("'executable' must not be empty")

    if errors:
        print("Configuration error(s):", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        sys.exit(1)


def load_config() -> Dict[str, Any]:
    """Load and validate configuration from the first existing config file.

    Searches:
      1. ``~/.subtitle-fetcher.yaml``
      2. ``.subtitle-fetcher.yaml`` (current working directory)

    Returns an empty dict when no config file is found.
    """
    config_locations = [
        Path.home() / CONFIG_FILENAME,
        Path(CONFIG_FILENAME),
    ]

    for config_file in config_locations:
        if not config_file.exists():
            continue

        try:
            with open(config_file) as fh:
                config = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logging.warning(f"Could not load config from {config_file}: {exc}")
            break

        validate_config(config)  # exits on error
        logging.debug(f"Loaded configuration from: {config_file}")
        return config

    return {}
