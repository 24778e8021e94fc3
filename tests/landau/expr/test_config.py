"""
Tests for calculator configuration loading.
"""

import pytest
from pydantic import ValidationError

from landau.expr import (
    CalculatorConfig,
    evaluate,
    get_config,
    load_config,
    parse,
    reset_config,
    set_config,
)
from landau.expr.config import CONFIG_PATH_ENV


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch, tmp_path):
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self):
        assert load_config().high_accuracy is False

    def test_loads_yaml_file(self, tmp_path):
        path = tmp_path / "calc.yaml"
        path.write_text("high_accuracy: true\n", encoding="utf-8")
        assert load_config(str(path)).high_accuracy is True

    def test_accepts_camel_case_alias(self, tmp_path):
        path = tmp_path / "calc.yaml"
        path.write_text("highAccuracy: true\n", encoding="utf-8")
        assert load_config(str(path)).high_accuracy is True

    def test_accepts_json_document(self, tmp_path):
        path = tmp_path / "calc.json"
        path.write_text('{"high_accuracy": true}', encoding="utf-8")
        assert load_config(str(path)).high_accuracy is True

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "calc.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(str(path)) == CalculatorConfig()

    def test_reads_working_directory_file(self, tmp_path):
        (tmp_path / "config.yaml").write_text("high_accuracy: true\n", encoding="utf-8")
        assert load_config().high_accuracy is True

    def test_reads_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("high_accuracy: true\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_PATH_ENV, str(path))
        assert load_config().high_accuracy is True

    def test_rejects_non_mapping(self, tmp_path):
        path = tmp_path / "calc.yaml"
        path.write_text("- high_accuracy\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_rejects_wrong_type(self, tmp_path):
        path = tmp_path / "calc.yaml"
        path.write_text("high_accuracy: [1, 2]\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(str(path))


class TestActiveConfig:
    """Tests for the process-wide configuration."""

    def test_loaded_once(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("high_accuracy: true\n", encoding="utf-8")
        first = get_config()
        path.write_text("high_accuracy: false\n", encoding="utf-8")
        assert get_config() is first
        assert get_config().high_accuracy is True

    def test_set_config(self):
        set_config(CalculatorConfig(high_accuracy=True))
        assert get_config().high_accuracy is True

    @pytest.mark.parametrize(
        "content",
        ["- a\n- b\n", "high_accuracy: [1, 2]\n", "high_accuracy: {unclosed\n"],
    )
    def test_invalid_file_falls_back_to_defaults(self, tmp_path, caplog, content):
        (tmp_path / "config.yaml").write_text(content, encoding="utf-8")
        with caplog.at_level("WARNING", logger="landau.expr.config"):
            assert get_config() == CalculatorConfig()
        assert "using defaults" in caplog.text

    def test_evaluation_survives_invalid_file(self, tmp_path):
        (tmp_path / "config.yaml").write_text("- a\n- b\n", encoding="utf-8")
        result = evaluate(parse("1 + 1"))
        assert result.success is True
        assert result.value == 2.0

    def test_reset_config_reloads(self, tmp_path):
        set_config(CalculatorConfig(high_accuracy=True))
        reset_config()
        assert get_config().high_accuracy is False
