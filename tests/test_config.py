"""
tests/test_config.py — YAML configuration loader
=================================================
"""

from __future__ import annotations

import pytest

from santuario.config import load_config

_MINIMAL = """
app_name: "Santuario"
api_port: 8000
default_timezone: "Europe/Madrid"
"""


def _write(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_minimal_file_uses_mentor_defaults(self, tmp_path):
        cfg = load_config(_write(tmp_path, _MINIMAL))
        assert cfg.app_name == "Santuario"
        assert cfg.app_motto == ""
        assert cfg.mentor_model == "gemini-3-flash-preview"
        assert cfg.mentor_rate_limit == 10
        assert cfg.mentor_rate_window_seconds == 3600

    def test_mentor_section(self, tmp_path):
        text = _MINIMAL + "mentor:\n  model: custom\n  timeout_seconds: 5\n  rate_limit: 2\n"
        cfg = load_config(_write(tmp_path, text))
        assert cfg.mentor_model == "custom"
        assert cfg.mentor_timeout_seconds == 5.0
        assert cfg.mentor_rate_limit == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_missing_required_key(self, tmp_path):
        with pytest.raises(KeyError):
            load_config(_write(tmp_path, 'app_name: "x"\napi_port: 1\n'))

    def test_unknown_timezone(self, tmp_path):
        text = _MINIMAL.replace("Europe/Madrid", "Mars/Olympus_Mons")
        with pytest.raises(ValueError, match="default_timezone"):
            load_config(_write(tmp_path, text))

    def test_env_override_path(self, tmp_path, monkeypatch):
        path = _write(tmp_path, _MINIMAL)
        monkeypatch.setenv("SANTUARIO_CONFIG", str(path))
        assert load_config().default_timezone == "Europe/Madrid"

    def test_example_file_loads(self):
        from pathlib import Path

        example = Path(__file__).resolve().parent.parent / "config.yaml.example"
        cfg = load_config(example)
        assert cfg.api_port == 8000
