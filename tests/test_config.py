"""Tests for inspection_sync.config: env-var config loading and validation.

NOT to be confused with test_config_loader.py (YAML discovery) or
test_config_schema.py (Pydantic models).
"""

import logging

import pytest

from inspection_sync.config import Config, load_config, validate_config

_ENV_VARS = (
    "INSPECTION_API_URL",
    "INSPECTION_API_TOKEN",
    "INSPECTION_INSECURE",
    "INSPECTION_DEBUG",
    "INSPECTION_TIMEOUT",
    "INSPECTION_SAMPLE_DATA",
    "INSPECTION_ANALYTICS",
    "INSPECTION_SERIALIZE_UPLOADS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


# -------------------------------------------------------------------------
# validate_config()
# -------------------------------------------------------------------------


class TestValidateConfig:
    def test_empty_url_allowed(self):
        validate_config(Config())

    def test_https_url_valid(self):
        config = Config(api_url="https://inspections.example.com/api")
        validate_config(config)

    def test_trailing_slash_stripped(self):
        config = Config(api_url="  http://localhost:8000/api/ ")
        validate_config(config)
        assert config.api_url == "http://localhost:8000/api"

    def test_invalid_url_no_scheme(self):
        with pytest.raises(
            ValueError, match="must start with http:// or https://"
        ):
            validate_config(Config(api_url="example.com"))

    def test_invalid_url_no_host(self):
        with pytest.raises(ValueError, match="must include a hostname"):
            validate_config(Config(api_url="https://"))

    @pytest.mark.parametrize("timeout", [0, 601])
    def test_timeout_range(self, timeout):
        with pytest.raises(ValueError, match="Invalid timeout"):
            validate_config(Config(timeout=timeout))

    def test_unknown_analytics(self):
        with pytest.raises(ValueError, match="Invalid analytics sink"):
            validate_config(Config(analytics="kafka"))

    def test_insecure_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            validate_config(Config(insecure=True))
        assert "SSL verification disabled" in caplog.text


# -------------------------------------------------------------------------
# load_config()
# -------------------------------------------------------------------------


class TestLoadConfig:
    def test_defaults(self):
        config = load_config()
        assert config == Config()

    def test_cli_beats_env_beats_yaml(self, monkeypatch):
        monkeypatch.setenv("INSPECTION_API_URL", "https://env.example.com")
        fb = {"url": "https://yaml.example.com"}

        assert load_config(yaml_fallbacks=fb).api_url == "https://env.example.com"
        assert (
            load_config(url="https://cli.example.com", yaml_fallbacks=fb).api_url
            == "https://cli.example.com"
        )
        monkeypatch.delenv("INSPECTION_API_URL")
        assert load_config(yaml_fallbacks=fb).api_url == "https://yaml.example.com"

    def test_token_from_env(self, monkeypatch):
        monkeypatch.setenv("INSPECTION_API_TOKEN", " abc ")
        assert load_config().api_token == "abc"

    def test_bool_env_values(self, monkeypatch):
        monkeypatch.setenv("INSPECTION_SAMPLE_DATA", "yes")
        monkeypatch.setenv("INSPECTION_SERIALIZE_UPLOADS", "0")
        config = load_config()
        assert config.sample_data is True
        assert config.serialize_uploads is False

    def test_env_false_beats_yaml_true(self, monkeypatch):
        monkeypatch.setenv("INSPECTION_INSECURE", "false")
        assert load_config(yaml_fallbacks={"insecure": True}).insecure is False

    def test_cli_flag_beats_env_false(self, monkeypatch):
        monkeypatch.setenv("INSPECTION_SAMPLE_DATA", "false")
        assert load_config(sample_data=True).sample_data is True

    def test_timeout_from_env(self, monkeypatch):
        monkeypatch.setenv("INSPECTION_TIMEOUT", "30")
        assert load_config().timeout == 30

    def test_timeout_not_a_number(self, monkeypatch):
        monkeypatch.setenv("INSPECTION_TIMEOUT", "soon")
        with pytest.raises(ValueError, match="INSPECTION_TIMEOUT"):
            load_config()

    def test_yaml_fallbacks_for_sync_section(self):
        config = load_config(
            yaml_fallbacks={
                "timeout": 15,
                "analytics": "console",
                "serialize_uploads": False,
                "sample_data": True,
            }
        )
        assert config.timeout == 15
        assert config.analytics == "console"
        assert config.serialize_uploads is False
        assert config.sample_data is True

    def test_analytics_env_is_lowercased(self, monkeypatch):
        monkeypatch.setenv("INSPECTION_ANALYTICS", "NONE")
        assert load_config().analytics == "none"
