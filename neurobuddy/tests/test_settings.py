import pytest

from neurobuddy.config.settings import Settings


def _clear_env(monkeypatch):
    for name in ("API_KEY", "GEMINI_API_KEY", "MODEL", "HTTP_TIMEOUT", "NEUROBUDDY_CONFIG_FILE"):
        monkeypatch.delenv(name, raising=False)


def test_api_key_from_environment(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("API_KEY", "from-env")
    assert Settings(_env_file=None).api_key == "from-env"


def test_gemini_api_key_alias(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("GEMINI_API_KEY", "alias-key")
    assert Settings(_env_file=None).api_key == "alias-key"


def test_yaml_config_file(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    cfg = tmp_path / "neuro.yaml"
    cfg.write_text("model: gemini-2.5-pro\nhttp_timeout: 12\n", encoding="utf-8")
    monkeypatch.setenv("NEUROBUDDY_CONFIG_FILE", str(cfg))
    s = Settings(_env_file=None)
    assert s.model == "gemini-2.5-pro"
    assert s.http_timeout == 12.0


def test_environment_wins_over_yaml(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    cfg = tmp_path / "neuro.yaml"
    cfg.write_text("api_key: from-yaml\n", encoding="utf-8")
    monkeypatch.setenv("NEUROBUDDY_CONFIG_FILE", str(cfg))
    monkeypatch.setenv("API_KEY", "from-env")
    assert Settings(_env_file=None).api_key == "from-env"


def test_yaml_neurobuddy_section_and_unknown_keys(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    cfg = tmp_path / "shared.yaml"
    cfg.write_text("other_tool:\n  x: 1\nneurobuddy:\n  LOCALE: es\n  temperature: 0.3\n  colour: red\n", encoding="utf-8")
    monkeypatch.setenv("NEUROBUDDY_CONFIG_FILE", str(cfg))
    with pytest.warns(UserWarning, match="colour"):
        s = Settings(_env_file=None)
    assert s.locale == "es"
    assert s.temperature == 0.3
