"""
================================================================================
MODELOS DE DADOS DO AUTOAPI
================================================================================

Este módulo define as estruturas de dados do AutoAPI usando Pydantic.

## Para todos entenderem:

Tudo que circula pelo sistema tem um "formato" conhecido:

- A configuração que o usuário edita (ApiConfig)
- Os casos de teste que a IA gera (TestCase)
- O resultado de cada execução (TestResult)

Pydantic valida esses formatos automaticamente e converte entre
Python (snake_case) e JSON (camelCase, o formato de troca dos planos).

## Hierarquia dos modelos:

```
ApiConfig (raiz)
├── ai_config: AIConfig
│   └── provider, api_key, base_url, model_name
├── base_url, auth_token, auth_header
├── global_headers:      [KeyValuePair, ...]
├── global_query_params: [KeyValuePair, ...]
├── global_body_params:  [KeyValuePair, ...]
├── documentation, imported_file: ImportedFile
└── use_server_proxy, proxy_url

GeneratedTestPlan
├── config: PlanConfigHints
└── cases: [TestCase, ...]

TestResult (um por execução de TestCase, chaveado por id)
```

## Nomes no JSON:

Os campos aceitam os dois formatos na entrada:

    >>> TestCase.model_validate({"method": "GET", "endpoint": "/x", "expectedStatus": 200})
    >>> TestCase(method="GET", endpoint="/x", expected_status=200)

Na saída (`model_dump(by_alias=True)`) sempre usamos camelCase.
"""

from __future__ import annotations

import base64
import mimetypes
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def new_entry_id() -> str:
    """Gera um identificador opaco curto (9 caracteres)."""
    return uuid.uuid4().hex[:9]


class _CamelModel(BaseModel):
    """Base comum: aceita snake_case e camelCase, serializa em camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# ENUMS
# =============================================================================


class HttpMethod(str, Enum):
    """Métodos HTTP suportados pelos casos de teste."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


# Métodos que carregam corpo (inclui DELETE)
BODY_METHODS: frozenset[HttpMethod] = frozenset(
    {HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH, HttpMethod.DELETE}
)


class AIProvider(str, Enum):
    """Provedores de IA suportados para geração de planos."""

    GEMINI = "gemini"
    DEEPSEEK = "deepseek"
    TONGYI = "tongyi"
    OPENAI = "openai"


class ResultStatus(str, Enum):
    """
    Desfecho de um caso de teste.

    - PASS: status real == status esperado
    - FAIL: a requisição completou, mas o status não bate (assertion)
    - ERROR: a requisição não completou ou não pôde ser interpretada
    """

    PASS = "PASS"
    FAIL = "FAIL"
    ERROR = "ERROR"


class OverrideKind(str, Enum):
    """Os três conjuntos de override globais."""

    HEADERS = "headers"
    QUERY = "query"
    BODY = "body"

    @property
    def field_name(self) -> str:
        """Nome do campo correspondente em ApiConfig."""
        return {
            OverrideKind.HEADERS: "global_headers",
            OverrideKind.QUERY: "global_query_params",
            OverrideKind.BODY: "global_body_params",
        }[self]


# =============================================================================
# PADRÕES POR PROVEDOR
# =============================================================================


@dataclass(frozen=True)
class ProviderDefaults:
    """
    Valores padrão de um provedor de IA.

    ## Atributos:

    - `base_url`: URL base da API ("" = o SDK decide)
    - `model_name`: Modelo padrão
    - `api_key_env`: Variável de ambiente alternativa com a API key
    """

    base_url: str
    model_name: str
    api_key_env: str


PROVIDER_DEFAULTS: dict[AIProvider, ProviderDefaults] = {
    AIProvider.GEMINI: ProviderDefaults(
        base_url="",
        model_name="gemini-2.5-flash",
        api_key_env="GEMINI_API_KEY",
    ),
    AIProvider.DEEPSEEK: ProviderDefaults(
        base_url="https://api.deepseek.com",
        model_name="deepseek-chat",
        api_key_env="DEEPSEEK_API_KEY",
    ),
    AIProvider.TONGYI: ProviderDefaults(
        base_url="https://dashscope.aliyuncs.com/compatible-mode/v1",
        model_name="qwen-plus",
        api_key_env="DASHSCOPE_API_KEY",
    ),
    AIProvider.OPENAI: ProviderDefaults(
        base_url="https://api.openai.com/v1",
        model_name="gpt-4o-mini",
        api_key_env="OPENAI_API_KEY",
    ),
}


# =============================================================================
# CONFIGURAÇÃO
# =============================================================================


class KeyValuePair(_CamelModel):
    """
    Uma entrada de um conjunto de override (header, query ou body).

    Entradas desabilitadas continuam guardadas (com seu valor), mas
    não participam da requisição efetiva.
    """

    id: str = Field(default_factory=new_entry_id)
    key: str = ""
    value: str = ""
    enabled: bool = True

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, v: Any) -> Any:
        # YAML pode entregar números/booleanos; overrides são sempre texto
        if v is None:
            return ""
        if isinstance(v, bool):
            return "true" if v else "false"
        if isinstance(v, (int, float)):
            return str(v)
        return v


class AIConfig(_CamelModel):
    """
    Configuração do provedor de IA.

    A `api_key` é sensível: fica só em memória, não aparece em `repr`
    e é excluída de qualquer serialização.

    ## Exemplo:

        >>> cfg = AIConfig(provider="deepseek", api_key="sk-...")
        >>> cfg.base_url
        'https://api.deepseek.com'
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    provider: AIProvider = AIProvider.GEMINI
    api_key: str = Field(default="", exclude=True, repr=False)
    base_url: str = ""
    model_name: str = ""

    @model_validator(mode="before")
    @classmethod
    def _fill_provider_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        provider = AIProvider(data.get("provider") or AIProvider.GEMINI)
        defaults = PROVIDER_DEFAULTS[provider]
        if "base_url" not in data and "baseUrl" not in data:
            data["base_url"] = defaults.base_url
        if not data.get("model_name") and not data.get("modelName"):
            data["model_name"] = defaults.model_name
        return data

    @classmethod
    def for_provider(cls, provider: AIProvider | str, api_key: str = "") -> "AIConfig":
        """Cria configuração com os padrões do provedor."""
        return cls(provider=AIProvider(provider), api_key=api_key)

    def switch_provider(self, provider: AIProvider | str) -> None:
        """
        Troca o provedor e SEMPRE reseta base_url e model_name
        para os padrões do novo provedor.
        """
        self.provider = AIProvider(provider)
        defaults = PROVIDER_DEFAULTS[self.provider]
        self.base_url = defaults.base_url
        self.model_name = defaults.model_name

    @property
    def defaults(self) -> ProviderDefaults:
        return PROVIDER_DEFAULTS[self.provider]


class ImportedFile(_CamelModel):
    """Arquivo importado pelo usuário (conteúdo em base64)."""

    name: str
    mime_type: str
    data: str

    @property
    def is_binary(self) -> bool:
        """True para qualquer coisa que não seja text/*."""
        return not self.mime_type.startswith("text/")

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> "ImportedFile":
        """Lê um arquivo do disco e codifica em base64."""
        file_path = Path(path)
        guessed, _ = mimetypes.guess_type(file_path.name)
        return cls(
            name=file_path.name,
            mime_type=mime_type or guessed or "application/octet-stream",
            data=base64.b64encode(file_path.read_bytes()).decode("ascii"),
        )

    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.data)


class PlanConfigHints(_CamelModel):
    """
    Dicas de configuração extraídas da documentação pela IA.

    Campos ausentes ficam None (nunca recebem padrão), para que o
    chamador possa preencher "só se estiver vazio".
    """

    base_url: str | None = None
    auth_header: str | None = None
    auth_token: str | None = None


class ApiConfig(_CamelModel):
    """
    Raiz agregada da configuração de uma sessão de testes.

    ## Invariantes:

    - `global_body_params` só é aplicado em POST/PUT/PATCH/DELETE
    - Durante uma execução, use `snapshot()`: a execução nunca lê a
      cópia que o usuário está editando
    """

    ai_config: AIConfig = Field(default_factory=AIConfig)
    base_url: str = ""
    auth_token: str = ""
    auth_header: str = "Authorization"
    global_headers: list[KeyValuePair] = Field(default_factory=list)
    global_query_params: list[KeyValuePair] = Field(default_factory=list)
    global_body_params: list[KeyValuePair] = Field(default_factory=list)
    documentation: str = ""
    imported_file: ImportedFile | None = None
    use_server_proxy: bool = False
    proxy_url: str = ""

    # -------------------------------------------------------------------------
    # Conjuntos de override
    # -------------------------------------------------------------------------

    def overrides(self, kind: OverrideKind | str) -> list[KeyValuePair]:
        """Retorna a lista (mutável) de um conjunto de override."""
        return getattr(self, OverrideKind(kind).field_name)

    def add_override(
        self,
        kind: OverrideKind | str,
        key: str = "",
        value: str = "",
        enabled: bool = True,
    ) -> KeyValuePair:
        """Adiciona uma entrada ao final do conjunto (id aleatório)."""
        entry = KeyValuePair(key=key, value=value, enabled=enabled)
        self.overrides(kind).append(entry)
        return entry

    def update_override(
        self,
        kind: OverrideKind | str,
        entry_id: str,
        **fields: Any,
    ) -> KeyValuePair:
        """
        Altera uma entrada no lugar, pelo id.

        ## Erros:
            KeyError: se o id não existir no conjunto
            ValueError: se um campo não for key/value/enabled
        """
        unknown = set(fields) - {"key", "value", "enabled"}
        if unknown:
            raise ValueError(f"Campos inválidos para override: {sorted(unknown)}")

        for entry in self.overrides(kind):
            if entry.id == entry_id:
                for name, val in fields.items():
                    setattr(entry, name, val)
                return entry
        raise KeyError(entry_id)

    def remove_override(self, kind: OverrideKind | str, entry_id: str) -> bool:
        """Remove uma entrada pelo id. Retorna False se não existia."""
        entries = self.overrides(kind)
        for i, entry in enumerate(entries):
            if entry.id == entry_id:
                del entries[i]
                return True
        return False

    # -------------------------------------------------------------------------
    # Snapshot e auto-preenchimento
    # -------------------------------------------------------------------------

    def snapshot(self) -> "ApiConfig":
        """Cópia profunda e independente, tirada no início da execução."""
        return self.model_copy(deep=True)

    def apply_plan_hints(self, hints: PlanConfigHints) -> list[str]:
        """
        Preenche a configuração com as dicas extraídas pela IA.

        ## Regras:
        - base_url e auth_token: só se estiverem vazios
        - auth_header: se a dica existir e for diferente de "Authorization"

        ## Retorna:
            Nomes dos campos preenchidos (base_url/auth_token), para
            mensagens ao usuário.
        """
        filled: list[str] = []
        if not self.base_url and hints.base_url:
            self.base_url = hints.base_url
            filled.append("base_url")
        if not self.auth_token and hints.auth_token:
            self.auth_token = hints.auth_token
            filled.append("auth_token")
        if hints.auth_header and hints.auth_header != "Authorization":
            self.auth_header = hints.auth_header
        return filled


# =============================================================================
# CASOS DE TESTE E RESULTADOS
# =============================================================================


class TestCase(_CamelModel):
    """
    Um caso de teste HTTP gerado pela IA.

    Imutável depois de criado (frozen=True).

    ## Atributos:
        id: Identificador (usado como chave dos resultados)
        title / description: Textos para o usuário
        method: GET, POST, PUT, DELETE ou PATCH
        endpoint: Caminho relativo (pode conter query string)
        headers: Headers específicos do caso (opcional)
        body: Corpo gerado pela IA (opcional, normalmente um objeto)
        expected_status: Status HTTP esperado
    """

    __test__ = False  # evita que o pytest tente coletar esta classe

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(default_factory=lambda: f"TC-{new_entry_id()}")
    title: str = ""
    description: str = ""
    method: HttpMethod
    endpoint: str
    headers: dict[str, str] | None = None
    body: Any = None
    expected_status: int

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class TestResult(_CamelModel):
    """
    Resultado de UMA execução de um caso de teste.

    Uma nova execução do mesmo caso substitui o resultado anterior
    (o mapa de resultados é chaveado pelo id do caso).
    """

    __test__ = False

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    test_case_id: str
    status: ResultStatus
    actual_status: int
    latency_ms: int
    response_body: Any = None
    error_message: str | None = None
    timestamp: str


class GeneratedTestPlan(_CamelModel):
    """
    Saída transitória da geração: dicas de config + casos de teste.

    Consumida uma vez para semear ApiConfig e a lista de casos.
    """

    config: PlanConfigHints = Field(default_factory=PlanConfigHints)
    cases: list[TestCase] = Field(default_factory=list)

    def to_json(self) -> str:
        """Serializa para JSON (camelCase), pronto para `autoapi run`."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)

    @classmethod
    def from_json(cls, text: str) -> "GeneratedTestPlan":
        return cls.model_validate_json(text)


class SuiteStats(BaseModel):
    """Estatísticas agregadas de uma execução."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    errors: int = 0
    avg_latency_ms: int = 0

    @property
    def executed(self) -> int:
        return self.passed + self.failed + self.errors

    @property
    def pass_rate(self) -> int:
        """Percentual de PASS sobre o total de casos (0 se não há casos)."""
        if self.total == 0:
            return 0
        return round(self.passed / self.total * 100)
