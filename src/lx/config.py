import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

PROJECT_CONFIG_NAME = "lx-config.yaml"
DEFAULT_MODEL = "gemini-2.5-flash"


class ConfigError(Exception):
    """Configuration is missing, unreadable or invalid."""


class LxConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    provider: Literal["gemini"] = "gemini"
    api_key: str = Field(min_length=1)
    model: str = DEFAULT_MODEL


def global_config_path() -> Path:
    config_home = os.getenv("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "lx" / "config.yaml"


def find_config_file(project_dir: Path | None = None) -> Path:
    """Return the project-local config file, falling back to the global one."""
    candidates = [(project_dir or Path.cwd()) / PROJECT_CONFIG_NAME, global_config_path()]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    searched = ", ".join(str(candidate) for candidate in candidates)
    raise ConfigError(f"No configuration file found (searched: {searched})")


def load_config(config_path: Path | None = None, project_dir: Path | None = None) -> LxConfig:
    path = config_path or find_config_file(project_dir)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a mapping in {path}, got {type(raw).__name__}")

    env_key = os.getenv("GEMINI_API_KEY")
    if not raw.get("api_key") and env_key:
        raw = {**raw, "api_key": env_key}

    try:
        return LxConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc
