# backend/tests/test_config.py
from app.core.config import DEFAULT_SECRET_KEY, Settings, settings


def test_settings_loads_defaults():
    assert settings.app_name == "NGO Platform"
    assert settings.environment in ["development", "staging", "production", "test"]


def test_settings_database_url_required():
    assert settings.database_url is not None


def test_session_defaults_match_token_lifetime():
    config = Settings(_env_file=None)
    assert config.access_token_expire_hours == 24
    assert config.session_idle_hours == 24
    assert config.secret_key == DEFAULT_SECRET_KEY


def test_cors_origin_list_splits_and_strips():
    config = Settings(_env_file=None, cors_origins="http://a.test, http://b.test ,")
    assert config.cors_origin_list == ["http://a.test", "http://b.test"]
