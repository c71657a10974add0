"""
Configuration management for translate-md.

Handles loading configuration from YAML files and environment variables.
Settings are validated eagerly and frozen: load them once and pass them
explicitly to every component that needs them.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from translate_md.exceptions import ConfigError

# Load .env file if present (before Settings initialization)
load_dotenv()

# Instruction value that suppresses translation for a language
NO_TRANSLATE_SENTINEL = "don't translate"

DEFAULT_CONFIG_PATHS = (
    Path("config.yaml"),
    Path("config.yml"),
    Path(".translate-md.yaml"),
)


def is_no_translate(instructions: str) -> bool:
    """Return True if the instruction string is the "don't translate" sentinel."""
    return instructions.strip().lower() == NO_TRANSLATE_SENTINEL


class ServiceConfig(BaseModel):
    """Connection settings for the translation service (OpenAI-compatible API)."""

    model_config = ConfigDict(frozen=True)

    endpoint: str
    api_key: str
    model: str
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=4000, ge=256, le=128000)
    timeout_seconds: float = Field(default=120.0, ge=1.0, le=3600.0)

    @field_validator("endpoint", "api_key", "model")
    @classmethod
    def require_value(cls, v: str) -> str:
        """Reject blank required fields."""
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class PathsConfig(BaseModel):
    """Configuration for file paths."""

    model_config = ConfigDict(frozen=True)

    # None means "<input_dir>/translated"
    output_dir: Path | None = Field(default=None)
    # None means "formatted_md" next to the input directory
    formatted_dir: Path | None = Field(default=None)

    @field_validator("output_dir", "formatted_dir")
    @classmethod
    def expand_path(cls, v: Path | None) -> Path | None:
        """Expand user home directory and make path absolute."""
        if v is None:
            return None
        return Path(v).expanduser().resolve()

    def resolve_output_dir(self, input_dir: Path) -> Path:
        """Return the output root for a given input directory."""
        if self.output_dir is not None:
            return self.output_dir
        return Path(input_dir).resolve() / "translated"

    def resolve_formatted_dir(self, input_dir: Path) -> Path:
        """Return the reformatting output root for a given input directory."""
        if self.formatted_dir is not None:
            return self.formatted_dir
        return Path(input_dir).resolve().parent / "formatted_md"


class ProcessingConfig(BaseModel):
    """Configuration for the processing pipeline."""

    model_config = ConfigDict(frozen=True)

    # Maximum LanguageTasks in flight at once
    concurrency: int = Field(default=5, ge=1, le=100)
    # Documents longer than this (in characters) are translated chunk by chunk
    large_file_threshold: int = Field(default=10000, ge=1)
    chunk_size: int = Field(default=10000, ge=1)
    recursive: bool = Field(default=True)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO")
    file: Path | None = Field(default=Path("./logs/translate-md.log"))
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    max_file_size_mb: int = Field(default=10, ge=1, le=100)
    backup_count: int = Field(default=5, ge=1, le=20)

    @field_validator("level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return v


class Settings(BaseSettings):
    """Main settings class that combines all configurations."""

    model_config = SettingsConfigDict(
        env_prefix="TRANSLATE_MD_",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )

    service: ServiceConfig
    # Language code -> free-form instructions for the service
    languages: dict[str, str]
    source_language: str = Field(default="en")
    paths: PathsConfig = Field(default_factory=PathsConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("languages", mode="before")
    @classmethod
    def fill_bare_languages(cls, v: Any) -> Any:
        """A language listed without instructions (``fr:`` in YAML) gets none."""
        if isinstance(v, dict):
            return {code: "" if value is None else value for code, value in v.items()}
        return v

    @field_validator("languages")
    @classmethod
    def require_languages(cls, v: dict[str, str]) -> dict[str, str]:
        """At least one language, with non-blank codes."""
        if not v:
            raise ValueError("at least one language must be configured")
        cleaned: dict[str, str] = {}
        for code, instructions in v.items():
            code = code.strip()
            if not code:
                raise ValueError("language codes must not be empty")
            cleaned[code] = instructions
        return cleaned

    @field_validator("source_language")
    @classmethod
    def normalize_source_language(cls, v: str) -> str:
        return v.strip().lower()

    def is_source_language(self, language: str) -> bool:
        """Check whether a language code is the source language."""
        return language.strip().lower() == self.source_language

    @classmethod
    def from_yaml(cls, path: Path | str, **overrides: Any) -> Settings:
        """Load settings from a YAML file, with environment variable overrides."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file {path} is not valid YAML: {e}") from e

        if not isinstance(yaml_config, dict):
            raise ConfigError(f"Config file {path} must contain a mapping at the top level")

        # Process environment variable substitutions in YAML values
        yaml_config = _substitute_env_vars(yaml_config)
        yaml_config.update(overrides)

        return _build_settings(yaml_config, source=str(path))


def _build_settings(data: dict[str, Any], source: str) -> Settings:
    """Construct Settings, turning validation errors into ConfigError."""
    try:
        return Settings(**data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration ({source}): {problems}") from e


def _substitute_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively substitute ${ENV_VAR} patterns in config values."""
    result = {}
    for key, value in config.items():
        if isinstance(value, dict):
            result[key] = _substitute_env_vars(value)
        elif isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            env_var = value[2:-1]
            result[key] = os.getenv(env_var, "")
        elif isinstance(value, list):
            result[key] = [
                _substitute_env_vars(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            result[key] = value
    return result


def load_language_formats(path: Path | str) -> dict[str, str]:
    """
    Load a language -> instructions mapping from a JSON file.

    The file holds a flat object, e.g. ``{"fr": "formal", "en": "don't translate"}``.

    Raises:
        ConfigError: If the file is missing, unparsable or not a flat string mapping.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigError(f"Language formats file not found: {path}") from None
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot load language formats from {path}: {e}") from e

    if not isinstance(data, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in data.items()
    ):
        raise ConfigError(f"{path} must map language codes to instruction strings")
    return data


def load_settings(
    path: Path | str | None = None,
    *,
    formats_path: Path | str | None = None,
) -> Settings:
    """
    Load and validate configuration.

    Args:
        path: Path to YAML config file. If None, looks for config.yaml in the
            current directory and falls back to environment variables only.
        formats_path: Optional JSON file with the language -> instructions
            mapping; replaces the ``languages`` section of the YAML file.

    Returns:
        Frozen Settings instance.

    Raises:
        ConfigError: If configuration is missing or malformed.
    """
    overrides: dict[str, Any] = {}
    if formats_path is not None:
        overrides["languages"] = load_language_formats(formats_path)

    if path is None:
        for p in DEFAULT_CONFIG_PATHS:
            if p.exists():
                path = p
                break

    if path is not None:
        return Settings.from_yaml(path, **overrides)

    return _build_settings(overrides, source="environment")


DEFAULT_CONFIG = """# translate-md configuration

# Translation service (any OpenAI-compatible chat completions API)
service:
  endpoint: https://api.openai.com/v1
  api_key: ${OPENAI_API_KEY}
  model: gpt-4o
  temperature: 0.7
  max_tokens: 4000
  timeout_seconds: 120

# Documents in this language are copied verbatim instead of translated
source_language: en

# Language code -> instructions passed to the service.
# "don't translate" skips the language entirely.
languages:
  en: don't translate
  fr: Formal register, keep technical terms in English where customary
  de: Formal register (Sie)
  es: Neutral Latin American Spanish

paths:
  output_dir: null              # null means <input_dir>/translated
  formatted_dir: null           # null means formatted_md next to <input_dir>

processing:
  concurrency: 5                # Languages translated in parallel per document
  large_file_threshold: 10000   # Characters; longer documents are chunked
  chunk_size: 10000             # Maximum characters per chunk
  recursive: true

logging:
  level: INFO
  file: ./logs/translate-md.log
"""


def create_default_config(path: Path | str = "config.yaml") -> None:
    """Create a default configuration file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(DEFAULT_CONFIG)
