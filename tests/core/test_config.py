# tests/core/test_config.py
"""Tests for configuration schema and loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from glosspipe.contracts.enums import ConflictStrategy


class TestProcessorOptions:
    """Run option validation."""

    def test_defaults(self) -> None:
        from glosspipe.core.config import ProcessorOptions

        options = ProcessorOptions()
        assert options.lenient is False
        assert options.conflict_strategy is ConflictStrategy.ERROR
        assert options.debug is False
        assert options.copy_document is False

    def test_camel_case_aliases(self) -> None:
        from glosspipe.core.config import ProcessorOptions

        options = ProcessorOptions.model_validate({"conflictStrategy": "lastWins", "copyDocument": True})
        assert options.conflict_strategy is ConflictStrategy.LAST_WINS
        assert options.copy_document is True

    def test_snake_case_names(self) -> None:
        from glosspipe.core.config import ProcessorOptions

        options = ProcessorOptions(lenient=True, conflict_strategy="warn")  # type: ignore[arg-type]
        assert options.conflict_strategy is ConflictStrategy.WARN

    def test_unknown_option_rejected(self) -> None:
        from glosspipe.core.config import ProcessorOptions

        with pytest.raises(ValidationError):
            ProcessorOptions.model_validate({"lenientt": True})

    def test_unknown_strategy_rejected(self) -> None:
        from glosspipe.core.config import ProcessorOptions

        with pytest.raises(ValidationError):
            ProcessorOptions(conflict_strategy="merge")  # type: ignore[arg-type]

    def test_options_are_frozen(self) -> None:
        from glosspipe.core.config import ProcessorOptions

        options = ProcessorOptions()
        with pytest.raises(ValidationError):
            options.lenient = True  # type: ignore[misc]

    def test_coerce(self) -> None:
        from glosspipe.core.config import ProcessorOptions

        existing = ProcessorOptions(debug=True)
        assert ProcessorOptions.coerce(None) == ProcessorOptions()
        assert ProcessorOptions.coerce(existing) is existing
        assert ProcessorOptions.coerce({"lenient": True}).lenient is True


class TestPipelineSettings:
    """Top-level settings validation."""

    def test_bare_extension_ids(self) -> None:
        from glosspipe.core.config import PipelineSettings

        settings = PipelineSettings(extensions=["frequency", {"id": "difficulty", "options": {"language": "fr"}}])  # type: ignore[list-item]

        assert [e.id for e in settings.extensions] == ["frequency", "difficulty"]
        assert settings.extensions[0].options == {}
        assert settings.extensions[1].options == {"language": "fr"}

    def test_duplicate_extension_ids_rejected(self) -> None:
        from glosspipe.core.config import PipelineSettings

        with pytest.raises(ValidationError, match="Duplicate extension ids"):
            PipelineSettings(extensions=["frequency", "frequency"])  # type: ignore[list-item]

    def test_empty_extension_id_rejected(self) -> None:
        from glosspipe.core.config import ExtensionSettings

        with pytest.raises(ValidationError):
            ExtensionSettings(id="")

    def test_logging_level_normalised(self) -> None:
        from glosspipe.core.config import LoggingSettings

        assert LoggingSettings(level="debug").level == "DEBUG"  # type: ignore[arg-type]
        with pytest.raises(ValidationError):
            LoggingSettings(level="chatty")  # type: ignore[arg-type]

    def test_settings_are_frozen(self) -> None:
        from glosspipe.core.config import PipelineSettings

        settings = PipelineSettings()
        with pytest.raises(ValidationError):
            settings.presets = ["reading"]  # type: ignore[misc]


class TestLoadSettings:
    """Test Dynaconf-based settings loading."""

    def test_load_from_yaml_file(self, tmp_path: Path) -> None:
        from glosspipe.core.config import load_settings

        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
options:
  lenient: true
  conflictStrategy: warn
presets:
  - word-stats
extensions:
  - frequency
  - id: difficulty
    options:
      skip_existing: false
logging:
  level: debug
""")
        settings = load_settings(config_file)

        assert settings.options.lenient is True
        assert settings.options.conflict_strategy is ConflictStrategy.WARN
        assert settings.presets == ["word-stats"]
        assert [e.id for e in settings.extensions] == ["frequency", "difficulty"]
        assert settings.extensions[1].options == {"skip_existing": False}
        assert settings.logging.level == "DEBUG"

    def test_load_with_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from glosspipe.core.config import load_settings

        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
options:
  lenient: false
""")
        # Environment variable should override YAML
        monkeypatch.setenv("GLOSSPIPE_OPTIONS__LENIENT", "true")

        settings = load_settings(config_file)
        assert settings.options.lenient is True

    def test_env_var_placeholders_expanded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from glosspipe.core.config import load_settings

        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
extensions:
  - id: frequency
    options:
      language: "${GLOSSPIPE_TEST_LANGUAGE}"
      fallback: "${GLOSSPIPE_TEST_UNSET:-en}"
""")
        monkeypatch.setenv("GLOSSPIPE_TEST_LANGUAGE", "fr")
        monkeypatch.delenv("GLOSSPIPE_TEST_UNSET", raising=False)

        settings = load_settings(config_file)
        assert settings.extensions[0].options == {"language": "fr", "fallback": "en"}

    def test_load_validates_schema(self, tmp_path: Path) -> None:
        from glosspipe.core.config import load_settings

        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
options:
  conflictStrategy: merge
""")
        with pytest.raises(ValidationError):
            load_settings(config_file)

    def test_load_missing_file_raises_file_not_found(self, tmp_path: Path) -> None:
        from glosspipe.core.config import load_settings

        missing_file = tmp_path / "nonexistent.yaml"
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_settings(missing_file)
