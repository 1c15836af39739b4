"""Settings for binding generation, read from ``arbiter.toml``."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from arbiter.errors import ConfigError

DEFAULT_CONFIG_FILE = "arbiter.toml"

_TRUE_WORDS = {"1", "true", "on", "yes"}
_FALSE_WORDS = {"0", "false", "off", "no"}


@dataclass(frozen=True)
class ArbiterConfig:
    """Where bindings go and which contracts they cover."""

    bindings_path: Path = field(default_factory=lambda: Path("src"))
    submodules: bool = False
    ignore_interfaces: bool = False


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return default


def load_arbiter_config(path: str | Path = DEFAULT_CONFIG_FILE) -> ArbiterConfig:
    """Read a TOML settings file into an :class:`ArbiterConfig`.

    The bindings always go to ``src/bindings``; ``submodules`` defaults to
    false and ``ignore_interfaces`` to true when absent or unreadable.
    """
    config_path = Path(path)
    try:
        with config_path.open("rb") as handle:
            data = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f'configuration file "{config_path}" not found') from exc
    except OSError as exc:
        raise ConfigError(exc) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{config_path}: {exc}") from exc

    settings = {str(key).lower(): value for key, value in data.items()}
    return ArbiterConfig(
        bindings_path=Path("src") / "bindings",
        submodules=_as_bool(settings.get("submodules"), False),
        ignore_interfaces=_as_bool(settings.get("ignore_interfaces"), True),
    )


def mock_config() -> ArbiterConfig:
    """A config writing to ``src/bindings`` without submodules."""
    return ArbiterConfig(
        bindings_path=Path("src") / "bindings",
        submodules=False,
        ignore_interfaces=False,
    )


def mock_config_with_submodules() -> ArbiterConfig:
    """A config writing to ``src`` with submodule bindings enabled."""
    return ArbiterConfig(
        bindings_path=Path("src"),
        submodules=True,
        ignore_interfaces=False,
    )