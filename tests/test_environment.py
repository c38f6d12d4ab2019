import pytest

from devassist.environment import (
    DEFAULT_API_URL,
    ConfigurationError,
    EnvironmentConfig,
    mask_sensitive_value,
    resolve_log_level,
)


@pytest.fixture
def sample_env_file(tmp_path):
    """Create a sample .env file for testing."""
    env_file = tmp_path / "custom.env"
    env_file.write_text("""# Test environment variables
DEVASSIST_API_KEY=sk-from-file
DEVASSIST_API_URL=http://localhost:8000/api/
# Commented variable
# DEVASSIST_TIMEOUT=1
""")
    return env_file


def test_defaults():
    config = EnvironmentConfig.load()
    assert config.DEVASSIST_API_KEY is None
    assert config.DEVASSIST_API_URL == DEFAULT_API_URL
    assert config.DEVASSIST_SYNC_INTERVAL == 30
    assert config.DEVASSIST_LOG_LEVEL == "INFO"


def test_missing_api_key_raises():
    config = EnvironmentConfig.load()
    with pytest.raises(ConfigurationError, match="DEVASSIST_API_KEY"):
        config.require_api_key()


def test_load_from_env_file(sample_env_file):
    config = EnvironmentConfig.load(env_file=sample_env_file)
    assert config.require_api_key() == "sk-from-file"
    assert config.DEVASSIST_API_URL == "http://localhost:8000/api"


def test_dotenv_in_working_directory_is_loaded(tmp_path):
    (tmp_path / "cwd" / ".env").write_text("DEVASSIST_API_KEY=sk-cwd\n")
    assert EnvironmentConfig.load().DEVASSIST_API_KEY == "sk-cwd"


def test_process_environment_wins_over_file(monkeypatch, sample_env_file):
    monkeypatch.setenv("DEVASSIST_API_KEY", "sk-process")
    assert EnvironmentConfig.load(env_file=sample_env_file).DEVASSIST_API_KEY == "sk-process"


def test_missing_env_file_raises(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        EnvironmentConfig.load(env_file=tmp_path / "nope.env")


@pytest.mark.parametrize("name,value", [
    ("DEVASSIST_TIMEOUT", "soon"),
    ("DEVASSIST_TIMEOUT", "0"),
    ("DEVASSIST_SYNC_INTERVAL", "1.5"),
    ("DEVASSIST_SYNC_INTERVAL", "-3"),
])
def test_invalid_numbers(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError, match=name):
        EnvironmentConfig.load()


def test_log_level_from_devassist_variable(monkeypatch):
    monkeypatch.setenv("DEVASSIST_LOG_LEVEL", "warning")
    assert resolve_log_level() == "WARNING"


def test_invalid_log_level(monkeypatch):
    monkeypatch.setenv("DEVASSIST_LOG_LEVEL", "LOUD")
    with pytest.raises(ConfigurationError):
        resolve_log_level()


@pytest.mark.parametrize("rust_log,expected", [
    ("info", "INFO"),
    ("debug", "DEBUG"),
    ("warn", "WARNING"),
    ("devassist=error", "ERROR"),
    ("nonsense", "INFO"),
])
def test_rust_log_fallback(monkeypatch, rust_log, expected):
    monkeypatch.setenv("RUST_LOG", rust_log)
    assert resolve_log_level() == expected


def test_debug_flag_overrides(monkeypatch):
    monkeypatch.setenv("DEVASSIST_LOG_LEVEL", "ERROR")
    assert resolve_log_level(debug=True) == "DEBUG"
    monkeypatch.setenv("DEVASSIST_DEBUG", "yes")
    assert resolve_log_level() == "DEBUG"


def test_mask_sensitive_value(monkeypatch):
    assert mask_sensitive_value("sk-123456") == "sk***"
    assert mask_sensitive_value("a") == "***"
    monkeypatch.setenv("DEVASSIST_API_KEY", "sk-123456")
    assert EnvironmentConfig.load().masked_api_key == "sk***"
