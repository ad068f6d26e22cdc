# src/glosspipe/core/config.py
"""
Configuration schema and loading for glosspipe runs.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from glosspipe.contracts.enums import ConflictStrategy

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


class ProcessorOptions(BaseModel):
    """Options for one processing run.

    Accepts both snake_case and the camelCase names used by document
    tooling elsewhere (``conflictStrategy``, ``copyDocument``).

    Example:
        ProcessorOptions(lenient=True, conflict_strategy="warn")
        ProcessorOptions.model_validate({"conflictStrategy": "lastWins"})
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    lenient: bool = Field(
        default=False,
        description="Continue past a failing extension instead of stopping the run",
    )
    conflict_strategy: ConflictStrategy = Field(
        default=ConflictStrategy.ERROR,
        alias="conflictStrategy",
        description="What happens when two extensions write the same tracked field",
    )
    debug: bool = Field(
        default=False,
        description="Emit per-phase debug log events",
    )
    copy_document: bool = Field(
        default=False,
        alias="copyDocument",
        description="Deep-copy the input tree before processing so the caller's tree is untouched",
    )

    @classmethod
    def coerce(cls, value: "ProcessorOptions | Mapping[str, Any] | None") -> "ProcessorOptions":
        """Normalise the ``options`` argument accepted by process()."""
        if value is None:
            return cls()
        if isinstance(value, ProcessorOptions):
            return value
        return cls.model_validate(dict(value))


class ExtensionSettings(BaseModel):
    """One entry of the configured extension list.

    Example YAML:
        extensions:
          - id: frequency
            options:
              skip_existing: false
          - reading-score
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1, description="Registered extension id")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Options passed to the extension factory",
    )


class LoggingSettings(BaseModel):
    """Logging output configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_output: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def normalise_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class PipelineSettings(BaseModel):
    """Top-level pipeline configuration.

    The single source of truth for CLI runs. Extensions are referenced by
    registry id; presets expand to their extension lists ahead of the
    explicit ``extensions`` entries.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    options: ProcessorOptions = Field(default_factory=ProcessorOptions)
    presets: list[str] = Field(default_factory=list, description="Preset ids applied first")
    extensions: list[ExtensionSettings] = Field(default_factory=list)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("extensions", mode="before")
    @classmethod
    def accept_bare_ids(cls, v: Any) -> Any:
        """Allow ``- frequency`` as shorthand for ``- id: frequency``."""
        if isinstance(v, list):
            return [{"id": item} if isinstance(item, str) else item for item in v]
        return v

    @model_validator(mode="after")
    def validate_unique_extensions(self) -> "PipelineSettings":
        ids = [ext.id for ext in self.extensions]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate extension ids in settings: {duplicates}")
        return self


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values."""

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            if match.group(2) is not None:
                return match.group(2)
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _normalise_keys(raw: dict[str, Any]) -> dict[str, Any]:
    """Lowercase Dynaconf's uppercased keys for the schema-owned sections.

    Extension option mappings keep their keys as written.
    """
    config = {str(k).lower(): v for k, v in raw.items()}
    renames = {"conflictstrategy": "conflict_strategy", "copydocument": "copy_document", "jsonoutput": "json_output"}
    for section in ("options", "logging"):
        value = config.get(section)
        if isinstance(value, dict):
            config[section] = {renames.get(str(k).lower(), str(k).lower()): v for k, v in value.items()}
    return config


def load_settings(config_path: Path) -> PipelineSettings:
    """Load settings from a YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (GLOSSPIPE_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic schema - lowest priority

    Nested keys use a double underscore: GLOSSPIPE_OPTIONS__LENIENT=true.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If the config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="GLOSSPIPE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = _normalise_keys({k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys})
    raw_config = _expand_env_vars(raw_config)
    return PipelineSettings(**raw_config)
