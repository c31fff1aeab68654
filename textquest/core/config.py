from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any
import yaml

from textquest.core.errors import ConfigError


CONFIG_FILENAME = "textquest.yaml"
CONFIG_ENV_VAR = "TEXTQUEST_CONFIG"
DEFAULT_WORLD_PATH = Path(__file__).resolve().parent.parent / "world" / "world.json"
DEFAULT_AUDIT_PATH = "./textquest_audit.jsonl"


@dataclass(frozen=True)
class GameConfig:
    world_path: str
    clear_screen: bool = True
    audit_enabled: bool = False
    audit_path: str = DEFAULT_AUDIT_PATH


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"unable to parse {p}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{p} must contain a mapping")
    return raw


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"config section '{name}' must be a mapping")
    return value


def _relative_to(base: Path, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"config path {value!r} must be a string")
    if Path(value).is_absolute():
        return value
    return str((base / value).resolve())


def default_config() -> GameConfig:
    return GameConfig(world_path=str(DEFAULT_WORLD_PATH))


def load_config(path: str | Path) -> GameConfig:
    config_path = Path(path).resolve()
    raw = load_yaml(config_path)
    base = config_path.parent

    world_path = _section(raw, "world").get("path")
    world_path = _relative_to(base, world_path) if world_path else str(DEFAULT_WORLD_PATH)

    audit = _section(raw, "audit")
    audit_path = _relative_to(base, audit.get("path", DEFAULT_AUDIT_PATH))

    return GameConfig(
        world_path=world_path,
        clear_screen=bool(_section(raw, "display").get("clear_screen", True)),
        audit_enabled=bool(audit.get("enabled", False)),
        audit_path=audit_path,
    )


def resolve_config_path(config_path: str | None) -> Path | None:
    """Find the config file to use, or None when the defaults apply.

    An explicit path is returned as-is even if missing so that loading it
    reports the problem. Otherwise $TEXTQUEST_CONFIG is tried, then the first
    textquest.yaml found walking up from the working directory.
    """
    if config_path:
        return Path(config_path)

    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        env_candidate = Path(env_path)
        if env_candidate.exists():
            return env_candidate

    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / CONFIG_FILENAME
        if candidate.exists():
            return candidate

    return None


def get_config(config_path: str | None = None) -> GameConfig:
    path = resolve_config_path(config_path)
    if path is None:
        return default_config()
    return load_config(path)
