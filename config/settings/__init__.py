import os

SETTINGS_BY_ENV = {
    "local": "config.settings.local",
    "test": "config.settings.test",
    "production": "config.settings.production",
}


def use_default_settings(fallback: str = "production") -> str:
    """Point DJANGO_SETTINGS_MODULE at the module for ``BUILD_ENV`` unless set."""
    build_env = os.environ.get("BUILD_ENV", fallback).lower()
    module = SETTINGS_BY_ENV.get(build_env, SETTINGS_BY_ENV["production"])
    return os.environ.setdefault("DJANGO_SETTINGS_MODULE", module)
