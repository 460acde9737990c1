"""
Testes para a configuração (ambiente + YAML do workspace).
"""

import pytest

from autoapi.config import (
    AutoAPISettings,
    find_config_file,
    load_settings,
    load_yaml_config,
)
from autoapi.errors import ConfigurationError
from autoapi.models import AIProvider

ENV_VARS = [
    "AUTOAPI_AI_PROVIDER", "AUTOAPI_AI_API_KEY", "AUTOAPI_AI_BASE_URL", "AUTOAPI_AI_MODEL",
    "AUTOAPI_BASE_URL", "AUTOAPI_AUTH_TOKEN", "AUTOAPI_AUTH_HEADER", "AUTOAPI_USE_PROXY",
    "AUTOAPI_PROXY_URL", "AUTOAPI_TIMEOUT", "AUTOAPI_PACE_MS", "AUTOAPI_VERBOSE",
    "GEMINI_API_KEY", "DEEPSEEK_API_KEY", "DASHSCOPE_API_KEY", "OPENAI_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    config_dir = tmp_path / ".autoapi"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text(
        "ai:\n"
        "  provider: deepseek\n"
        "  model: deepseek-reasoner\n"
        "base_url: https://yaml.example.com\n"
        "use_proxy: true\n"
        "global_headers:\n"
        "  X-Env: staging\n"
        "global_query_params:\n"
        "  page: 1\n",
        encoding="utf-8",
    )
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)
    return tmp_path


class TestFromEnv:
    def test_defaults(self):
        settings = AutoAPISettings.from_env()
        assert settings.ai_provider == AIProvider.GEMINI
        assert settings.pace_ms == 100
        assert settings.timeout is None

    def test_reads_variables(self, monkeypatch):
        monkeypatch.setenv("AUTOAPI_AI_PROVIDER", "openai")
        monkeypatch.setenv("AUTOAPI_BASE_URL", "https://env.example.com")
        monkeypatch.setenv("AUTOAPI_USE_PROXY", "yes")
        monkeypatch.setenv("AUTOAPI_TIMEOUT", "2.5")
        monkeypatch.setenv("AUTOAPI_PACE_MS", "0")

        settings = AutoAPISettings.from_env()

        assert settings.ai_provider == AIProvider.OPENAI
        assert settings.base_url == "https://env.example.com"
        assert settings.use_proxy is True
        assert settings.timeout == 2.5
        assert settings.pace_ms == 0

    def test_invalid_number(self, monkeypatch):
        monkeypatch.setenv("AUTOAPI_TIMEOUT", "rápido")
        with pytest.raises(ConfigurationError):
            AutoAPISettings.from_env()

    def test_provider_key_fallback(self, monkeypatch):
        monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-deepseek")
        settings = AutoAPISettings(ai_provider="deepseek")
        assert settings.to_ai_config().api_key == "sk-deepseek"

    def test_explicit_key_wins(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        settings = AutoAPISettings(ai_api_key="explicit")
        assert settings.resolve_api_key() == "explicit"


class TestYamlConfig:
    def test_find_walks_up(self, workspace):
        assert find_config_file() == (workspace / ".autoapi" / "config.yaml").resolve()

    def test_find_returns_none(self, tmp_path):
        assert find_config_file(tmp_path) is None

    def test_load_settings_from_workspace(self, workspace):
        settings = load_settings()

        assert settings.ai_provider == AIProvider.DEEPSEEK
        assert settings.ai_model == "deepseek-reasoner"
        assert settings.base_url == "https://yaml.example.com"
        assert settings.use_proxy is True
        assert settings.global_query_params == {"page": "1"}

    def test_env_overrides_yaml(self, workspace, monkeypatch):
        monkeypatch.setenv("AUTOAPI_BASE_URL", "https://env.example.com")
        assert load_settings().base_url == "https://env.example.com"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("base_url: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_yaml_config(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_yaml_config(path)

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_settings(tmp_path / "missing.yaml")


class TestToApiConfig:
    def test_builds_api_config(self):
        settings = AutoAPISettings(
            ai_provider="tongyi",
            base_url="https://api",
            global_headers={"X-Env": "qa"},
            global_body_params={"source": "ci"},
            use_proxy=True,
            proxy_url="http://localhost:3001/proxy",
        )
        config = settings.to_api_config(documentation="docs")

        assert config.ai_config.model_name == "qwen-plus"
        assert config.global_headers[0].key == "X-Env"
        assert config.global_body_params[0].value == "ci"
        assert config.use_server_proxy
        assert config.documentation == "docs"

    def test_override_ignores_none(self):
        settings = AutoAPISettings(base_url="https://a")
        assert settings.override(base_url=None, auth_token="t").base_url == "https://a"
