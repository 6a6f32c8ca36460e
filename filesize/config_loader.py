from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from filesize.logging_setup import category_context
from filesize.size_parser import parse_size, validate_size

LOGGER = logging.getLogger(__name__)

ENV_LIMIT_PREFIX = "FILESIZE_LIMIT_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class AppSettings(BaseModel):
    log_level: str = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, value: object) -> str:
        if value is None:
            return "INFO"
        text = str(value).strip().upper()
        if text not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return text


class AppConfig(BaseModel):
    settings: AppSettings = Field(default_factory=AppSettings)
    # Raw size strings keyed by lower-cased limit name.
    limits: Dict[str, str] = Field(default_factory=dict)

    @field_validator("limits", mode="before")
    @classmethod
    def validate_limits(cls, value: object) -> object:
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        limits: Dict[str, str] = {}
        for name, raw in value.items():
            key = str(name).strip().lower()
            if not key:
                raise ValueError("Limit names must not be empty")
            text = str(raw).strip()
            error = validate_size(text)
            if error is not None:
                raise ValueError(f"Invalid size for limit {key!r}: {error}")
            limits[key] = text
        return limits

    def limit_bytes(self, name: str) -> int:
        return parse_size(self.limits[name.lower()])


def apply_env_overrides(cfg: AppConfig, environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Return a copy of cfg with FILESIZE_LIMIT_<NAME> variables merged into limits."""
    environ = os.environ if environ is None else environ
    overrides = {
        key[len(ENV_LIMIT_PREFIX) :].lower(): value
        for key, value in environ.items()
        if key.startswith(ENV_LIMIT_PREFIX) and len(key) > len(ENV_LIMIT_PREFIX)
    }
    if not overrides:
        return cfg
    LOGGER.info("Applying limit overrides from environment names=%s", sorted(overrides), extra={"category": "CONFIG"})
    data = cfg.model_dump()
    data["limits"] = {**data["limits"], **overrides}
    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        LOGGER.error("Environment override validation failed error=%s", exc, extra={"category": "ERRORS"})
        raise ValueError(f"Invalid environment override: {exc}") from exc


def load_config(config_path: Path) -> AppConfig:
    with category_context("CONFIG"):
        LOGGER.info("Loading config path=%s", config_path)
        if not config_path.exists():
            raise ValueError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in config file: {exc}") from exc

        if parsed is None:
            parsed = {}
        if not isinstance(parsed, dict):
            raise ValueError("Configuration root must be a YAML object")

        try:
            cfg = AppConfig.model_validate(parsed)
        except ValidationError as exc:
            LOGGER.error("Config validation failed error=%s", exc, extra={"category": "ERRORS"})
            raise ValueError(f"Invalid configuration: {exc}") from exc
        LOGGER.info("Config loaded limits=%s", sorted(cfg.limits))
        return cfg
