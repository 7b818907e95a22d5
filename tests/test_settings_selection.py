from config.settings import use_default_settings


def test_existing_settings_module_wins(monkeypatch):
    monkeypatch.setenv("DJANGO_SETTINGS_MODULE", "config.settings.test")
    monkeypatch.setenv("BUILD_ENV", "local")
    assert use_default_settings() == "config.settings.test"


def test_build_env_selects_module(monkeypatch):
    monkeypatch.delenv("DJANGO_SETTINGS_MODULE", raising=False)
    monkeypatch.setenv("BUILD_ENV", "Local")
    assert use_default_settings() == "config.settings.local"


def test_unknown_build_env_falls_back_to_production(monkeypatch):
    monkeypatch.delenv("DJANGO_SETTINGS_MODULE", raising=False)
    monkeypatch.setenv("BUILD_ENV", "staging")
    assert use_default_settings() == "config.settings.production"
