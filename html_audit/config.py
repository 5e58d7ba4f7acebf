"""
Engine configuration and per-call parse options.

EngineConfig holds the defaults for an engine instance; ParseOptions
overrides them for a single parse_html() call. Any option left as None
falls back to the engine config.
"""

import logging
import os
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

ENV_PREFIX = "HTML_AUDIT_"

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ValueError(f"{ENV_PREFIX}{name} must be a boolean, got {raw!r}")


def _env_log_level(name: str) -> Optional[int]:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return None
    raw = raw.strip()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    if not isinstance(level, int):
        raise ValueError(f"{ENV_PREFIX}{name} is not a logging level: {raw!r}")
    return level


class EngineConfig(BaseModel):
    """Defaults for one HTMLAnalysisEngine."""
    model_config = ConfigDict(extra="forbid")

    preserve_whitespace: bool = False
    validate_html: bool = True
    xml_mode: bool = False
    # Host the documents come from; decides which links are external
    current_host: Optional[str] = None
    log_level: Optional[int] = None

    @classmethod
    def from_env(cls, **overrides) -> "EngineConfig":
        """
        Build a config from HTML_AUDIT_* environment variables.

        Keyword arguments win over the environment.
        """
        values = {
            "preserve_whitespace": _env_flag("PRESERVE_WHITESPACE", False),
            "validate_html": _env_flag("VALIDATE_HTML", True),
            "xml_mode": _env_flag("XML_MODE", False),
            "current_host": os.getenv(ENV_PREFIX + "CURRENT_HOST") or None,
            "log_level": _env_log_level("LOG_LEVEL"),
        }
        values.update(overrides)
        return cls(**values)


class ParseOptions(BaseModel):
    """Per-call overrides; accepts snake_case or camelCase keys."""

    preserve_whitespace: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("preserve_whitespace", "preserveWhitespace"),
    )
    validate_html: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("validate_html", "validateHTML"),
    )
    current_host: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("current_host", "currentHost"),
    )

    def resolve(self, config: EngineConfig) -> EngineConfig:
        """The engine config with these overrides applied."""
        overrides = {
            key: value
            for key, value in self.model_dump().items()
            if value is not None
        }
        return config.model_copy(update=overrides)
