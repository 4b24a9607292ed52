import pytest

from directory_gateway.config import settings

ENV_VARS = [
    "DEMO_MODE",
    "JWT_ACCESS_SECRET",
    "DIRECTORY_BASE_URL",
    "DIRECTORY_TIMEOUT",
    "DIRECTORY_MAX_RETRIES",
    "DIRECTORY_RETRY_DELAY",
    "DIRECTORY_POOL_SIZE",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # set first so monkeypatch restores the original state, even for
        # variables load_settings() writes back into os.environ
        monkeypatch.setenv(name, "unset")
        monkeypatch.delenv(name)

    real_path = settings.Path

    def fake_path(target):
        if str(target) == "/run/secrets":
            return tmp_path
        return real_path(target)

    monkeypatch.setattr(settings, "Path", fake_path)
    return tmp_path


def test_production_requires_token_secret(monkeypatch):
    monkeypatch.setenv("DIRECTORY_BASE_URL", "http://directory:8081/api")
    with pytest.raises(RuntimeError, match="JWT_ACCESS_SECRET"):
        settings.load_settings()


def test_production_requires_directory_url(monkeypatch):
    monkeypatch.setenv("JWT_ACCESS_SECRET", "s" * 40)
    with pytest.raises(RuntimeError, match="DIRECTORY_BASE_URL"):
        settings.load_settings()


def test_defaults(monkeypatch):
    monkeypatch.setenv("JWT_ACCESS_SECRET", "s" * 40)
    monkeypatch.setenv("DIRECTORY_BASE_URL", "http://directory:8081/api/")

    cfg = settings.load_settings()

    assert cfg.demo_mode is False
    assert cfg.directory_base_url == "http://directory:8081/api"
    assert cfg.directory_timeout == 5.0
    assert cfg.directory_max_retries == 3
    assert cfg.directory_retry_delay == 1.0
    assert cfg.directory_pool_size == 10
    assert cfg.log_level == "INFO"


def test_overrides(monkeypatch):
    monkeypatch.setenv("JWT_ACCESS_SECRET", "s" * 40)
    monkeypatch.setenv("DIRECTORY_BASE_URL", "http://directory:8081/api")
    monkeypatch.setenv("DIRECTORY_TIMEOUT", "2.5")
    monkeypatch.setenv("DIRECTORY_MAX_RETRIES", "5")
    monkeypatch.setenv("DIRECTORY_RETRY_DELAY", "0.25")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    cfg = settings.load_settings()

    assert cfg.directory_timeout == 2.5
    assert cfg.directory_max_retries == 5
    assert cfg.directory_retry_delay == 0.25
    assert cfg.log_level == "DEBUG"


@pytest.mark.parametrize("value", ["many", "-1"])
def test_invalid_retry_count(monkeypatch, value):
    monkeypatch.setenv("JWT_ACCESS_SECRET", "s" * 40)
    monkeypatch.setenv("DIRECTORY_BASE_URL", "http://directory:8081/api")
    monkeypatch.setenv("DIRECTORY_MAX_RETRIES", value)
    with pytest.raises(RuntimeError, match="DIRECTORY_MAX_RETRIES"):
        settings.load_settings()


def test_secret_file_wins_over_env(monkeypatch, clean_env):
    (clean_env / "jwt_access_secret").write_text("from-file\n")
    monkeypatch.setenv("JWT_ACCESS_SECRET", "from-env")
    monkeypatch.setenv("DIRECTORY_BASE_URL", "http://directory:8081/api")

    assert settings.load_settings().jwt_access_secret == "from-file"


def test_demo_mode_generates_defaults(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")

    cfg = settings.load_settings()

    assert cfg.demo_mode is True
    assert cfg.jwt_access_secret
    assert cfg.directory_base_url == "http://localhost:8081/api"
