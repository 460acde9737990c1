"""
================================================================================
COMPOSIÇÃO DA REQUISIÇÃO EFETIVA
================================================================================

Dado um caso de teste e a configuração da sessão, calcula a requisição
HTTP que será REALMENTE enviada: URL, headers e body.

## Para todos entenderem:

A IA gera casos de teste, mas ela só consegue "chutar" valores como
chaves de API, assinaturas e IDs de rastreio. Os overrides globais
existem para que uma pessoa injete os valores reais em TODAS as
requisições sem precisar gerar os casos de novo.

A regra é uma só, para headers, query e body:

    **a última escrita vence, e o global sempre vence o gerado.**

## Ordem de precedência:

```
URL:      base_url + endpoint  ←  query params globais (set: substitui)
Headers:  Content-Type padrão  ←  headers do caso  ←  headers globais  ←  auth
Body:     body do caso         ←  body params globais   (só POST/PUT/PATCH/DELETE)
```

Tudo aqui é puro: nada de I/O, nada de estado.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from .models import BODY_METHODS, ApiConfig, KeyValuePair, TestCase

DEFAULT_CONTENT_TYPE = "application/json"
DEFAULT_AUTH_HEADER = "Authorization"


@dataclass
class EffectiveRequest:
    """
    A requisição final, depois de aplicar todos os overrides.

    `body` None significa "sem corpo" (não é o mesmo que `{}`).
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] | None = None

    @property
    def has_body(self) -> bool:
        return self.body is not None


def _active(entries: list[KeyValuePair]) -> list[KeyValuePair]:
    """Entradas que participam da requisição: habilitadas e com chave."""
    return [e for e in entries if e.enabled and e.key]


def _is_absolute(url: str) -> bool:
    parts = urlsplit(url)
    return bool(parts.scheme) and bool(parts.netloc)


def _set_query_params(url: str, params: list[KeyValuePair]) -> str:
    """
    Aplica params com semântica de "set" na query da URL.

    - chave já existente: o valor da primeira ocorrência é trocado no
      lugar e as ocorrências seguintes são removidas
    - chave nova: vai para o final
    """
    parts = urlsplit(url)
    pairs = parse_qsl(parts.query, keep_blank_values=True)

    for param in params:
        replaced = False
        updated: list[tuple[str, str]] = []
        for key, value in pairs:
            if key != param.key:
                updated.append((key, value))
            elif not replaced:
                updated.append((key, param.value))
                replaced = True
        if not replaced:
            updated.append((param.key, param.value))
        pairs = updated

    return urlunsplit(parts._replace(query=urlencode(pairs)))


def build_url(test_case: TestCase, config: ApiConfig) -> str:
    """
    Monta a URL efetiva.

    ## Exemplo:
        >>> # base "https://api.example.com/v1", endpoint "/users?active=true",
        >>> # query global debug=1
        'https://api.example.com/v1/users?active=true&debug=1'
    """
    base = config.base_url[:-1] if config.base_url.endswith("/") else config.base_url
    endpoint = test_case.endpoint[1:] if test_case.endpoint.startswith("/") else test_case.endpoint
    url = f"{base}/{endpoint}"

    params = _active(config.global_query_params)
    if not params:
        return url

    if _is_absolute(url):
        return _set_query_params(url, params)

    # URL relativa: concatenação manual, sem deduplicar chaves do endpoint
    query = "&".join(
        f"{quote(p.key, safe='')}={quote(p.value, safe='')}" for p in params
    )
    return url + ("&" if "?" in url else "?") + query


def build_headers(test_case: TestCase, config: ApiConfig) -> dict[str, str]:
    """Monta os headers efetivos (auth é sempre aplicado por último)."""
    headers: dict[str, str] = {"Content-Type": DEFAULT_CONTENT_TYPE}
    headers.update(test_case.headers or {})

    for entry in _active(config.global_headers):
        headers[entry.key] = entry.value

    if config.auth_token:
        auth_header = config.auth_header or DEFAULT_AUTH_HEADER
        token = config.auth_token
        if not token.startswith("Bearer ") and config.auth_header == DEFAULT_AUTH_HEADER:
            token = f"Bearer {token}"
        headers[auth_header] = token

    return headers


def build_body(test_case: TestCase, config: ApiConfig) -> dict[str, Any] | None:
    """
    Monta o body efetivo, ou None quando não deve haver corpo.

    Métodos sem corpo (GET) nunca recebem body, mesmo com params globais.
    """
    if test_case.method not in BODY_METHODS:
        return None

    base = test_case.body if isinstance(test_case.body, dict) else {}
    params = _active(config.global_body_params)

    if not params and not base:
        return None

    body = dict(base)
    for entry in params:
        body[entry.key] = entry.value

    return body or None


def compute_effective_request(test_case: TestCase, config: ApiConfig) -> EffectiveRequest:
    """
    Calcula a requisição efetiva de um caso de teste.

    ## Parâmetros:
        test_case: Caso gerado pela IA (imutável)
        config: Snapshot da configuração da sessão

    ## Retorna:
        EffectiveRequest com método, URL, headers e body (ou None)
    """
    return EffectiveRequest(
        method=test_case.method.value,
        url=build_url(test_case, config),
        headers=build_headers(test_case, config),
        body=build_body(test_case, config),
    )
