"""
================================================================================
CONFIGURAÇÃO CENTRALIZADA DO AUTOAPI
================================================================================

Reúne, em um só lugar, tudo o que a CLI precisa para gerar e executar
planos: provedor de IA, alvo da API, relay, timeout e ritmo.

## Fontes de configuração (em ordem de prioridade):

1. Flags da CLI
2. Variáveis de ambiente (`AUTOAPI_*`)
3. Arquivo do workspace (`.autoapi/config.yaml`)
4. Valores padrão

## Exemplo de `.autoapi/config.yaml`:

```yaml
ai:
  provider: deepseek
  model: deepseek-chat
base_url: https://api.example.com
auth_token: meu-token
use_proxy: true
proxy_url: http://localhost:3001/proxy
global_headers:
  X-Env: staging
global_query_params:
  tenant: acme
```

## Exemplo de uso:

    >>> settings = load_settings()
    >>> config = settings.to_api_config()
    >>> config.ai_config.provider
    <AIProvider.GEMINI: 'gemini'>
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError
from .models import PROVIDER_DEFAULTS, AIConfig, AIProvider, ApiConfig, ImportedFile, KeyValuePair

CONFIG_DIR = ".autoapi"
CONFIG_FILE = "config.yaml"

# Chaves aceitas no bloco `ai:` do YAML → campo do AutoAPISettings
_AI_KEYS = {
    "provider": "ai_provider",
    "api_key": "ai_api_key",
    "base_url": "ai_base_url",
    "model": "ai_model",
}


class AutoAPISettings(BaseModel):
    """
    Configuração do AutoAPI.

    Campos `None` significam "não informado": o valor padrão do
    provedor (ou do transporte) é usado.

    ## Atributos:

    - `ai_provider`: Provedor de IA (gemini, deepseek, tongyi, openai)
    - `ai_api_key`: API key do provedor
    - `ai_base_url` / `ai_model`: Sobrescrevem os padrões do provedor
    - `base_url`, `auth_token`, `auth_header`: Alvo da API testada
    - `use_proxy` / `proxy_url`: Modo relay
    - `timeout`: Timeout por requisição, em segundos
    - `pace_ms`: Pausa entre casos durante a execução da suíte
    - `global_*`: Overrides globais (chave → valor)
    """

    # =========================================================================
    # PROVEDOR DE IA
    # =========================================================================

    ai_provider: AIProvider = Field(
        default=AIProvider.GEMINI,
        description="Provedor de IA usado na geração de planos",
    )

    ai_api_key: str = Field(
        default="",
        repr=False,
        description="API key do provedor (fallback: variável específica do provedor)",
    )

    ai_base_url: str | None = Field(
        default=None,
        description="Base URL do provedor (None = padrão do provedor)",
    )

    ai_model: str | None = Field(
        default=None,
        description="Modelo do provedor (None = padrão do provedor)",
    )

    # =========================================================================
    # API TESTADA
    # =========================================================================

    base_url: str = Field(default="", description="URL base da API testada")

    auth_token: str = Field(default="", repr=False, description="Token de autenticação")

    auth_header: str = Field(
        default="Authorization",
        description="Header que carrega o token",
    )

    global_headers: dict[str, str] = Field(default_factory=dict)
    global_query_params: dict[str, str] = Field(default_factory=dict)
    global_body_params: dict[str, str] = Field(default_factory=dict)

    # =========================================================================
    # TRANSPORTE
    # =========================================================================

    use_proxy: bool = Field(default=False, description="Se True, envia via relay")

    proxy_url: str = Field(default="", description="URL do relay (vazio = /api/proxy)")

    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Timeout por requisição em segundos (None = padrão do transporte)",
    )

    pace_ms: int = Field(
        default=100,
        ge=0,
        description="Pausa entre casos em milissegundos",
    )

    verbose: bool = Field(default=False, description="Logs detalhados")

    # =========================================================================
    # MÉTODOS DE CLASSE
    # =========================================================================

    @classmethod
    def from_yaml(cls, data: dict[str, Any]) -> "AutoAPISettings":
        """
        Cria configuração a partir do conteúdo de um config.yaml.

        O bloco `ai:` é achatado para os campos `ai_*`. Chaves
        desconhecidas são ignoradas.
        """
        flat: dict[str, Any] = {}
        ai_block = data.get("ai")
        if isinstance(ai_block, dict):
            for key, field_name in _AI_KEYS.items():
                if ai_block.get(key) is not None:
                    flat[field_name] = ai_block[key]

        for name in cls.model_fields:
            if name in data and data[name] is not None:
                flat[name] = data[name]

        for name in ("global_headers", "global_query_params", "global_body_params"):
            if name in flat:
                if not isinstance(flat[name], dict):
                    raise ConfigurationError(f"'{name}' deve ser um mapeamento chave: valor")
                flat[name] = {str(k): _stringify(v) for k, v in flat[name].items()}

        try:
            return cls(**flat)
        except ValidationError as exc:
            raise ConfigurationError(f"Configuração inválida: {exc}") from exc

    def with_env(self) -> "AutoAPISettings":
        """
        Sobrepõe as variáveis de ambiente definidas.

        ## Variáveis suportadas:

        - `AUTOAPI_AI_PROVIDER`, `AUTOAPI_AI_API_KEY`, `AUTOAPI_AI_BASE_URL`,
          `AUTOAPI_AI_MODEL`
        - `AUTOAPI_BASE_URL`, `AUTOAPI_AUTH_TOKEN`, `AUTOAPI_AUTH_HEADER`
        - `AUTOAPI_USE_PROXY`, `AUTOAPI_PROXY_URL`
        - `AUTOAPI_TIMEOUT`, `AUTOAPI_PACE_MS`, `AUTOAPI_VERBOSE`
        """
        def get_bool(key: str) -> bool | None:
            val = os.environ.get(key)
            if val is None:
                return None
            return val.lower() in ("true", "1", "yes", "on")

        def get_float(key: str) -> float | None:
            val = os.environ.get(key)
            if not val:
                return None
            try:
                return float(val)
            except ValueError:
                raise ConfigurationError(f"{key} deve ser numérico, recebido {val!r}") from None

        def get_int(key: str) -> int | None:
            val = os.environ.get(key)
            if not val:
                return None
            try:
                return int(val)
            except ValueError:
                raise ConfigurationError(f"{key} deve ser inteiro, recebido {val!r}") from None

        env_values: dict[str, Any] = {
            "ai_provider": os.environ.get("AUTOAPI_AI_PROVIDER") or None,
            "ai_api_key": os.environ.get("AUTOAPI_AI_API_KEY") or None,
            "ai_base_url": os.environ.get("AUTOAPI_AI_BASE_URL") or None,
            "ai_model": os.environ.get("AUTOAPI_AI_MODEL") or None,
            "base_url": os.environ.get("AUTOAPI_BASE_URL") or None,
            "auth_token": os.environ.get("AUTOAPI_AUTH_TOKEN") or None,
            "auth_header": os.environ.get("AUTOAPI_AUTH_HEADER") or None,
            "use_proxy": get_bool("AUTOAPI_USE_PROXY"),
            "proxy_url": os.environ.get("AUTOAPI_PROXY_URL") or None,
            "timeout": get_float("AUTOAPI_TIMEOUT"),
            "pace_ms": get_int("AUTOAPI_PACE_MS"),
            "verbose": get_bool("AUTOAPI_VERBOSE"),
        }
        return self.override(**env_values)

    @classmethod
    def from_env(cls) -> "AutoAPISettings":
        """Cria configuração a partir apenas das variáveis de ambiente."""
        return cls().with_env()

    def override(self, **values: Any) -> "AutoAPISettings":
        """
        Nova instância com os valores informados (valores None são ignorados).

        Usado para aplicar flags da CLI por cima das demais fontes.
        """
        update = {k: v for k, v in values.items() if v is not None}
        if not update:
            return self
        try:
            return self.model_validate({**self.model_dump(), **update})
        except ValidationError as exc:
            raise ConfigurationError(f"Configuração inválida: {exc}") from exc

    # =========================================================================
    # CONVERSÕES
    # =========================================================================

    @property
    def pace_seconds(self) -> float:
        return self.pace_ms / 1000

    def resolve_api_key(self) -> str:
        """API key explícita ou, na falta dela, a variável específica do provedor."""
        if self.ai_api_key:
            return self.ai_api_key
        return os.environ.get(PROVIDER_DEFAULTS[self.ai_provider].api_key_env, "")

    def to_ai_config(self) -> AIConfig:
        data: dict[str, Any] = {"provider": self.ai_provider, "api_key": self.resolve_api_key()}
        if self.ai_base_url is not None:
            data["base_url"] = self.ai_base_url
        if self.ai_model:
            data["model_name"] = self.ai_model
        return AIConfig(**data)

    def to_api_config(
        self,
        documentation: str = "",
        imported_file: ImportedFile | None = None,
    ) -> ApiConfig:
        """Monta o ApiConfig usado pelo composer, dispatcher e gerador."""
        return ApiConfig(
            ai_config=self.to_ai_config(),
            base_url=self.base_url,
            auth_token=self.auth_token,
            auth_header=self.auth_header,
            global_headers=_pairs(self.global_headers),
            global_query_params=_pairs(self.global_query_params),
            global_body_params=_pairs(self.global_body_params),
            documentation=documentation,
            imported_file=imported_file,
            use_server_proxy=self.use_proxy,
            proxy_url=self.proxy_url,
        )


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def _pairs(values: dict[str, str]) -> list[KeyValuePair]:
    return [KeyValuePair(key=k, value=v) for k, v in values.items()]


# =============================================================================
# ARQUIVO DO WORKSPACE
# =============================================================================


def find_config_file(start: Path | None = None) -> Path | None:
    """
    Procura `.autoapi/config.yaml` subindo na hierarquia de diretórios.

    ## Retorna:
        Caminho do arquivo, ou None se não encontrar.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_DIR / CONFIG_FILE
        if candidate.is_file():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def load_yaml_config(path: Path) -> dict[str, Any]:
    """
    Lê um config.yaml.

    ## Erros:
        ConfigurationError: arquivo ilegível, YAML inválido ou topo que
        não é um mapeamento
    """
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Não foi possível ler {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"YAML inválido em {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"{path} deve conter um mapeamento no topo")
    return dict(loaded)


def load_settings(config_path: Path | str | None = None) -> AutoAPISettings:
    """
    Carrega a configuração: padrões ← YAML ← ambiente.

    ## Parâmetros:
        config_path: Arquivo explícito (`--config`). Se None, procura
            `.autoapi/config.yaml` a partir do diretório atual.
    """
    path = Path(config_path) if config_path else find_config_file()
    if path is None:
        settings = AutoAPISettings()
    else:
        if not path.is_file():
            raise ConfigurationError(f"Arquivo de configuração não encontrado: {path}")
        settings = AutoAPISettings.from_yaml(load_yaml_config(path))
    return settings.with_env()
