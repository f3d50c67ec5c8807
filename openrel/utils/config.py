"""Configuration management using Pydantic for validation."""

import codecs
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from openrel.errors import ConfigurationError
from openrel.extraction.confidence import DEFAULT_CONFIDENCE_MODEL_PATH
from openrel.extraction.dependency_extractor import DEFAULT_EXTRACTOR_THRESHOLD, DEFAULT_PATTERNS_PATH
from openrel.parsing.parser import DEFAULT_PARSER_MODEL
from openrel.pipeline.output_formats import OutputFormat


class ModelConfig(BaseSettings):
    """Locations of the parser, extraction and confidence models."""

    model_config = SettingsConfigDict(env_prefix="OPENREL_MODELS_")

    parser: str = DEFAULT_PARSER_MODEL
    extraction: Path = DEFAULT_PATTERNS_PATH
    # None disables confidence scoring.
    confidence: Optional[Path] = DEFAULT_CONFIDENCE_MODEL_PATH


class ExtractionConfig(BaseSettings):
    """Extraction thresholds."""

    model_config = SettingsConfigDict(env_prefix="OPENREL_EXTRACTION_")

    confidence_threshold: float = 0.0
    extractor_threshold: float = Field(default=DEFAULT_EXTRACTOR_THRESHOLD, ge=0.0, le=1.0)


class PipelineConfig(BaseSettings):
    """Pipeline configuration."""

    model_config = SettingsConfigDict(env_prefix="OPENREL_PIPELINE_")

    max_workers: int = Field(default=4, ge=1)
    encoding: str = "utf-8"
    output_format: str = OutputFormat.INTERACTIVE.value

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        """Validate the format name is known."""
        if v.strip().lower() not in {f.value for f in OutputFormat}:
            raise ValueError(f"Unknown output format: {v}")
        return v.strip().lower()


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="OPENREL_LOGGING_")

    level: str = "INFO"
    file: Optional[str] = None
    rotation: str = "10 MB"
    retention: str = "1 week"


class Config(BaseSettings):
    """Main configuration class."""

    model_config = SettingsConfigDict(
        env_prefix="OPENREL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    models: ModelConfig = Field(default_factory=ModelConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @staticmethod
    def _deep_merge_dict(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """Deep-merge two dicts (overrides win)."""
        merged: Dict[str, Any] = dict(base)
        for key, value in overrides.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = Config._deep_merge_dict(merged[key], value)
            else:
                merged[key] = value
        return merged

    @classmethod
    def from_yaml(cls, yaml_path: str | Path | None = None) -> "Config":
        """Load configuration from an optional YAML file and environment variables.

        Precedence (highest to lowest):
        1) Environment variables / .env (``OPENREL_`` prefix, ``__`` for nesting)
        2) YAML file
        3) Model defaults

        Raises:
            ConfigurationError: If the YAML file is missing, malformed, or its root is not a mapping
        """
        yaml_config: Dict[str, Any] = {}
        if yaml_path is not None:
            yaml_path = Path(yaml_path)
            if not yaml_path.exists():
                raise ConfigurationError(f"Configuration file not found: {yaml_path}")
            with open(yaml_path, encoding="utf-8") as f:
                try:
                    yaml_config = yaml.safe_load(f) or {}
                except yaml.YAMLError as exc:
                    raise ConfigurationError(f"Invalid YAML in {yaml_path}: {exc}") from exc
            if not isinstance(yaml_config, dict):
                raise ConfigurationError(f"YAML config root must be a mapping/dict: {yaml_path}")

        env_overrides = cls().model_dump(exclude_defaults=True)
        merged = cls._deep_merge_dict(yaml_config, env_overrides)
        return cls(**merged)


class RunSettings(BaseModel):
    """Read-only snapshot of everything one run needs.

    Built once before any model is loaded; never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    input_files: Optional[Tuple[Path, ...]] = None
    output_file: Optional[Path] = None
    encoding: str = "utf-8"

    model_path: Path = DEFAULT_PATTERNS_PATH
    confidence_model_path: Optional[Path] = DEFAULT_CONFIDENCE_MODEL_PATH
    confidence_threshold: float = 0.0
    extractor_threshold: float = DEFAULT_EXTRACTOR_THRESHOLD
    parser_model: str = DEFAULT_PARSER_MODEL

    parse_input: bool = True
    split_input: bool = False
    output_format: OutputFormat = OutputFormat.INTERACTIVE
    parallel: bool = False
    invincible: bool = False
    max_workers: int = 4

    @property
    def interactive_input(self) -> bool:
        """True when reading standard input rather than files."""
        return self.input_files is None

    def validate_settings(self) -> None:
        """Validate settings before any model loading or I/O.

        Raises:
            ConfigurationError: If settings are invalid or incompatible
        """
        if self.split_input and not self.parse_input:
            raise ConfigurationError("options 'split' and 'dependencies' are not compatible.")

        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ConfigurationError(f"Unknown character encoding: {self.encoding}") from None

        for path in self.input_files or ():
            if not path.exists():
                raise ConfigurationError(f"file does not exist: {path}")
        if self.output_file is not None and not self.output_file.parent.exists():
            raise ConfigurationError(f"output directory does not exist: {self.output_file.parent}")
        if not self.model_path.exists():
            raise ConfigurationError(f"file does not exist: {self.model_path}")
        if self.confidence_model_path is not None and not self.confidence_model_path.exists():
            raise ConfigurationError(f"file does not exist: {self.confidence_model_path}")
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")

    @classmethod
    def from_config(cls, config: Config, **overrides: Any) -> "RunSettings":
        """Build settings from configuration; ``None`` overrides are ignored."""
        values: Dict[str, Any] = {
            "encoding": config.pipeline.encoding,
            "model_path": config.models.extraction,
            "confidence_model_path": config.models.confidence,
            "confidence_threshold": config.extraction.confidence_threshold,
            "extractor_threshold": config.extraction.extractor_threshold,
            "parser_model": config.models.parser,
            "output_format": OutputFormat.parse(config.pipeline.output_format),
            "max_workers": config.pipeline.max_workers,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
