# tests/core/test_config.py
from app.core.config import get_settings, Settings

def test_get_settings_loads_defaults():
    settings = get_settings()
    assert isinstance(settings, Settings)
    assert settings.PROJECT_NAME == "Sketch Party Backend" # Check a default value
    assert settings.SESSION_CODE_LENGTH == 6
    assert settings.SESSION_TTL_HOURS == 2
    assert settings.DEFAULT_ROUNDS_TARGET == 3
    assert settings.MIN_PLAYERS_TO_START == 2
    assert len(settings.FALLBACK_PROMPTS) == 5

def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("SESSION_TTL_HOURS", "6")
    monkeypatch.setenv("DEFAULT_ROUNDS_TARGET", "5")
    settings = Settings()
    assert settings.SESSION_TTL_HOURS == 6
    assert settings.DEFAULT_ROUNDS_TARGET == 5
