import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from code_assist.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "CODE_ASSIST_"
CONFIG_ENV_VAR = "CODE_ASSIST_CONFIG"


def _default_workers() -> int:
    return min(8, os.cpu_count() or 1)


def default_config_path() -> Path:
    base = os.getenv("XDG_CONFIG_HOME")
    config_dir = Path(base) if base else Path.home() / ".config"
    return config_dir / "code-assist" / "config.toml"


class Settings(BaseModel):
    budget_bytes: int = Field(default=16_000, gt=0)
    search_limit: int = Field(default=20, gt=0)
    max_file_bytes: int = Field(default=1024 * 1024, gt=0)
    workers: int = Field(default_factory=_default_workers, gt=0)
    feature_scan_depth: int = Field(default=4, ge=0)
    max_excerpts_per_file: int = Field(default=5, ge=0)
    excerpt_chars: int = Field(default=160, gt=0)
    extra_ignore: list[str] = Field(default_factory=list)


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        logger.debug("No config file at %s, using defaults", path)
        return {}
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    section = data.get("context", {})
    if not isinstance(section, dict):
        raise ConfigError(f"[context] in {path} must be a table")
    return section


def _read_env() -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name in Settings.model_fields:
        raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if raw is None:
            continue
        if name == "extra_ignore":
            values[name] = [p.strip() for p in raw.split(",") if p.strip()]
        else:
            values[name] = raw
    return values


def load_settings(path: Path | None = None) -> Settings:
    """Build settings from defaults, the TOML config file and the environment.

    Later sources win: ``[context]`` in the config file overrides defaults and
    ``CODE_ASSIST_<FIELD>`` variables override the file.
    """
    if path is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        path = Path(env_path) if env_path else default_config_path()

    values = _read_config_file(path)
    values.update(_read_env())
    try:
        return Settings.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
