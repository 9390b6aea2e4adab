import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from rship._src.constants import (
    CONFIG_ENV_VAR,
    DEFAULT_BIOC_MANAGER,
    DEFAULT_CONFIG_PATH,
    DEFAULT_CRAN_MIRROR,
    DEFAULT_FILE_PREFIX,
    DEFAULT_GITHUB_HELPER,
    DEFAULT_RSCRIPT,
)
from rship._src.exceptions import ConfigurationError


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# environment variable -> config field
ENV_OVERRIDES = {
    "RSHIP_RSCRIPT": "rscript",
    "RSHIP_CRAN_MIRROR": "cran_mirror",
    "RSHIP_OUTPUT_DIR": "output_dir",
    "RSHIP_LOG_LEVEL": "log_level",
}


class RshipConfig(BaseModel):
    """User settings, read from config.yaml"""
    model_config = ConfigDict(extra="forbid")

    rscript: str = DEFAULT_RSCRIPT
    cran_mirror: str = DEFAULT_CRAN_MIRROR
    output_dir: str = "."
    file_prefix: str = DEFAULT_FILE_PREFIX
    github_helper: str = DEFAULT_GITHUB_HELPER
    bioc_manager: str = DEFAULT_BIOC_MANAGER
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


def load_config(path: Optional[str] = None, environ=None) -> RshipConfig:
    """Load settings from a YAML file, then apply environment overrides.

    Parameters
    ----------
    path: str | None
        Config file to read. When not given, `$RSHIP_CONFIG` and then
        ~/.config/rship/config.yaml are tried, and a missing file just
        means defaults.
    environ: Mapping | None
        Environment to read overrides from, defaults to os.environ
    """
    if environ is None:
        environ = os.environ

    explicit = path is not None or CONFIG_ENV_VAR in environ
    if path is None:
        path = environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
    config_file = Path(path).expanduser()

    raw = {}
    if config_file.exists():
        try:
            raw = yaml.safe_load(config_file.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"could not parse config file {config_file}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigurationError(f"config file {config_file} must hold a mapping")
    elif explicit:
        raise ConfigurationError(f"config file {config_file} does not exist")

    for var, field in ENV_OVERRIDES.items():
        if environ.get(var):
            raw[field] = environ[var]

    try:
        return RshipConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"invalid config in {config_file}:\n{e}") from e
