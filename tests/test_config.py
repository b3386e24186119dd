"""Test class Settings."""
from pathlib import Path

from pydantic import ValidationError
import pytest

from calculator_service.common.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path) -> None:
    """Run every test without CALCULATOR_* variables or a .env file."""
    monkeypatch.chdir(tmp_path)
    for name in ("HOST", "PORT", "CORS_ORIGINS", "LOG_LEVEL", "LOG_FILE", "LOG_FORMAT",
                 "API_BASE_URL", "REQUEST_TIMEOUT"):
        monkeypatch.delenv(f"CALCULATOR_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults() -> None:
    settings = Settings()
    assert str(settings.host) == "127.0.0.1"
    assert settings.port == 8080
    assert settings.cors_origins == ["http://localhost:3000"]
    assert settings.log_file == Path("calculator.log")
    assert settings.log_format == "json"
    assert settings.api_base_url == "http://127.0.0.1:8080"


def test_environment_overrides(monkeypatch) -> None:
    """CALCULATOR_* variables override the defaults."""
    monkeypatch.setenv("CALCULATOR_PORT", "9090")
    monkeypatch.setenv("CALCULATOR_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("CALCULATOR_CORS_ORIGINS", '["http://a.test", "http://b.test"]')

    settings = Settings()
    assert settings.port == 9090
    assert settings.log_level == "DEBUG"
    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_dotenv_file(tmp_path) -> None:
    (tmp_path / ".env").write_text("CALCULATOR_LOG_FORMAT=text\n")
    assert Settings().log_format == "text"


def test_empty_log_file_disables_file_logging(monkeypatch) -> None:
    monkeypatch.setenv("CALCULATOR_LOG_FILE", "")
    assert Settings().log_file is None


def test_trailing_slash_is_stripped() -> None:
    assert Settings(api_base_url="http://calc.test/").api_base_url == "http://calc.test"


@pytest.mark.parametrize(
    "kwargs",
    [{"port": 0}, {"port": 65536}, {"host": "localhost:80"}, {"request_timeout": 0}, {"log_format": "xml"}],
)
def test_invalid_values(kwargs: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(**kwargs)


def test_get_settings_is_cached(monkeypatch) -> None:
    first = get_settings()
    monkeypatch.setenv("CALCULATOR_PORT", "9999")
    assert get_settings() is first
