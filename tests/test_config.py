"""Tests for configuration loading and override behavior."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from openrel.errors import ConfigurationError
from openrel.pipeline.output_formats import OutputFormat
from openrel.utils.config import Config, RunSettings


def _write_yaml(path: Path, data: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")


def test_defaults_without_yaml() -> None:
    cfg = Config.from_yaml()

    assert cfg.models.parser == "en_core_web_sm"
    assert cfg.models.extraction.exists()
    assert cfg.pipeline.output_format == "interactive"
    assert cfg.extraction.confidence_threshold == 0.0


def test_yaml_loads_values(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.yaml"
    _write_yaml(cfg_path, {"pipeline": {"max_workers": 2, "output_format": "Tabbed"}})

    cfg = Config.from_yaml(cfg_path)

    assert cfg.pipeline.max_workers == 2
    assert cfg.pipeline.output_format == "tabbed"


def test_env_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg_path = tmp_path / "config.yaml"
    _write_yaml(cfg_path, {"pipeline": {"max_workers": 2}, "logging": {"level": "DEBUG"}})

    monkeypatch.setenv("OPENREL_PIPELINE__MAX_WORKERS", "8")

    cfg = Config.from_yaml(cfg_path)

    assert cfg.pipeline.max_workers == 8
    assert cfg.logging.level == "DEBUG"


def test_missing_yaml_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        Config.from_yaml(tmp_path / "missing.yaml")


def test_invalid_yaml_root_type_raises(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(yaml.safe_dump(["not", "a", "mapping"]), encoding="utf-8")

    with pytest.raises(ConfigurationError, match="YAML config root must be a mapping"):
        Config.from_yaml(cfg_path)


def test_unknown_output_format_in_yaml(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.yaml"
    _write_yaml(cfg_path, {"pipeline": {"output_format": "xml"}})

    with pytest.raises(ValidationError):
        Config.from_yaml(cfg_path)


def test_run_settings_from_config_ignores_unset_overrides() -> None:
    cfg = Config.from_yaml()
    cfg.pipeline.max_workers = 3

    settings = RunSettings.from_config(cfg, confidence_threshold=0.4, output_file=None, parallel=True)

    assert settings.confidence_threshold == 0.4
    assert settings.output_file is None
    assert settings.parallel is True
    assert settings.max_workers == 3
    assert settings.output_format is OutputFormat.INTERACTIVE
    assert settings.interactive_input is True


def test_run_settings_are_frozen() -> None:
    settings = RunSettings()

    with pytest.raises(ValidationError):
        settings.parallel = True  # type: ignore[misc]


def test_validate_rejects_unknown_encoding() -> None:
    with pytest.raises(ConfigurationError, match="encoding"):
        RunSettings(encoding="no-such-codec").validate_settings()


def test_validate_rejects_missing_models(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="does not exist"):
        RunSettings(model_path=tmp_path / "patterns.yaml").validate_settings()
    with pytest.raises(ConfigurationError, match="does not exist"):
        RunSettings(confidence_model_path=tmp_path / "model.yaml").validate_settings()


def test_validate_allows_disabled_confidence_model() -> None:
    RunSettings(confidence_model_path=None).validate_settings()


def test_malformed_yaml_raises_configuration_error(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("pipeline: [unclosed\n  max_workers: 2\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        Config.from_yaml(cfg_path)


def test_validate_rejects_missing_output_directory(tmp_path: Path) -> None:
    settings = RunSettings(output_file=tmp_path / "missing" / "out.tsv")

    with pytest.raises(ConfigurationError, match="output directory does not exist"):
        settings.validate_settings()

    RunSettings(output_file=tmp_path / "out.tsv").validate_settings()
