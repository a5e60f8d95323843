from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

ENV_STRICT = "TGKIT_STRICT"
ENV_IMMEDIATE = "TGKIT_IMMEDIATE"
ENV_USERNAME = "TGKIT_USERNAME"

LOCAL_CONFIG_NAME = Path(".tgkit") / "tgkit.toml"
HOME_CONFIG_PATH = Path.home() / ".tgkit" / "tgkit.toml"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class BotOptions:
    strict: bool = False
    immediate: bool = False
    username: str | None = None


def _config_candidates() -> list[Path]:
    candidates = [Path.cwd() / LOCAL_CONFIG_NAME, HOME_CONFIG_PATH]
    if candidates[0] == candidates[1]:
        return [candidates[0]]
    return candidates


def _read_config(cfg_path: Path) -> dict:
    try:
        raw = cfg_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Missing config file {cfg_path}.") from None
    except OSError as e:
        raise ConfigError(f"Failed to read config file {cfg_path}: {e}") from e
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed TOML in {cfg_path}: {e}") from None


def _parse_env_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"Invalid {name} environment variable; expected a boolean.")


def _get_bool(table: dict[str, Any], key: str, default: bool, cfg_path: Path) -> bool:
    value = table.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"Invalid `bot.{key}` in {cfg_path}; expected a boolean.")
    return value


def options_from_config(config: dict, config_path: Path) -> BotOptions:
    table = config.get("bot", {})
    if not isinstance(table, dict):
        raise ConfigError(f"Invalid `bot` in {config_path}; expected a table.")
    username = table.get("username")
    if username is not None and (not isinstance(username, str) or not username.strip()):
        raise ConfigError(
            f"Invalid `bot.username` in {config_path}; expected a non-empty string."
        )
    return BotOptions(
        strict=_get_bool(table, "strict", False, config_path),
        immediate=_get_bool(table, "immediate", False, config_path),
        username=username.strip().lstrip("@") if username else None,
    )


def apply_env_overrides(options: BotOptions) -> BotOptions:
    """Environment variables take precedence over the config file."""
    changes: dict[str, Any] = {}
    strict = os.environ.get(ENV_STRICT)
    if strict and strict.strip():
        changes["strict"] = _parse_env_bool(ENV_STRICT, strict)
    immediate = os.environ.get(ENV_IMMEDIATE)
    if immediate and immediate.strip():
        changes["immediate"] = _parse_env_bool(ENV_IMMEDIATE, immediate)
    username = os.environ.get(ENV_USERNAME)
    if username and username.strip():
        changes["username"] = username.strip().lstrip("@")
    return replace(options, **changes) if changes else options


def load_options(path: str | Path | None = None) -> BotOptions:
    if path:
        cfg_path = Path(path).expanduser()
        return apply_env_overrides(options_from_config(_read_config(cfg_path), cfg_path))

    for candidate in _config_candidates():
        if candidate.is_file():
            return apply_env_overrides(
                options_from_config(_read_config(candidate), candidate)
            )
    return apply_env_overrides(BotOptions())
