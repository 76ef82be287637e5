from scan2dine.core.config import AuthBackend, DataBackend, EnvironmentMode, Settings


def test_development_defaults_to_local_backends():
    settings = Settings(env_mode="development", _env_file=None)

    assert settings.data_backend == DataBackend.MEMORY
    assert settings.auth_backend == AuthBackend.MOCK
    assert settings.flash_dismiss_seconds == 3
    assert settings.qr_default_width == 300
    assert settings.qr_default_margin == 2


def test_production_defaults_to_firebase_and_reports_missing_config():
    settings = Settings(env_mode="PRODUCTION", _env_file=None)

    assert settings.env_mode == EnvironmentMode.PRODUCTION
    assert settings.data_backend == DataBackend.FIRESTORE
    assert settings.auth_backend == AuthBackend.FIREBASE
    assert set(settings.validate_production_config()) >= {
        "FIREBASE_CREDENTIALS_PATH",
        "FIREBASE_API_KEY",
        "SESSION_SECRET",
    }


def test_backend_override():
    settings = Settings(env_mode="production", data_backend="sql", auth_backend="mock", _env_file=None)

    assert settings.data_backend == DataBackend.SQL
    assert "FIREBASE_CREDENTIALS_PATH" not in settings.validate_production_config()


def test_unknown_server_variables_are_ignored(monkeypatch):
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "9000")

    settings = Settings(_env_file=None)

    assert "api_host" not in Settings.model_fields
    assert "api_port" not in Settings.model_fields
    assert not hasattr(settings, "api_port")
