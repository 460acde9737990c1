"""
# Registro de Provedores de Geração

Resolve qual implementação atende um `AIProvider`.

## Para todos entenderem:

```
AIProvider.GEMINI    → GeminiProvider          (SDK nativo, aceita PDF)
AIProvider.DEEPSEEK  → ChatCompletionProvider  ("deepseek")
AIProvider.TONGYI    → ChatCompletionProvider  ("tongyi")
AIProvider.OPENAI    → ChatCompletionProvider  ("openai")
```

## Ordem de prioridade para decidir o modo:

1. Parâmetro direto (`mode=`)
2. Variável de ambiente (`AUTOAPI_LLM_MODE`)
3. Padrão: "real"

No modo "mock", qualquer provedor vira MockGenerationProvider.
"""

from __future__ import annotations

import os
from functools import partial
from typing import Any, Callable

from ..errors import ConfigurationError
from ..models import AIProvider
from .base import BaseGenerationProvider
from .provider_chat import ChatCompletionProvider
from .provider_gemini import GeminiProvider
from .provider_mock import MockGenerationProvider

LLM_MODE_ENV = "AUTOAPI_LLM_MODE"

ProviderFactory = Callable[..., BaseGenerationProvider]

_REGISTRY: dict[AIProvider, ProviderFactory] = {
    AIProvider.GEMINI: GeminiProvider,
    AIProvider.DEEPSEEK: partial(ChatCompletionProvider, AIProvider.DEEPSEEK.value),
    AIProvider.TONGYI: partial(ChatCompletionProvider, AIProvider.TONGYI.value),
    AIProvider.OPENAI: partial(ChatCompletionProvider, AIProvider.OPENAI.value),
}


def register_provider(provider: AIProvider | str, factory: ProviderFactory) -> None:
    """Registra (ou substitui) a implementação de um provedor."""
    _REGISTRY[AIProvider(provider)] = factory


def list_providers() -> list[AIProvider]:
    """Provedores com implementação registrada."""
    return list(_REGISTRY)


def resolve_mode(mode: str | None = None) -> str:
    """Resolve o modo ("real" ou "mock") pela ordem de prioridade."""
    resolved = (mode or os.environ.get(LLM_MODE_ENV) or "real").strip().lower()
    if resolved not in ("real", "mock"):
        raise ConfigurationError(
            f"Modo de LLM inválido: {resolved!r}",
            suggestion=f"Use 'real' ou 'mock' em {LLM_MODE_ENV}",
        )
    return resolved


def get_generation_provider(
    provider: AIProvider | str,
    mode: str | None = None,
    **kwargs: Any,
) -> BaseGenerationProvider:
    """
    Retorna o provedor de geração apropriado.

    ## Parâmetros:
        provider: Provedor selecionado na configuração
        mode: "real" ou "mock" (sobrescreve o ambiente)
        **kwargs: Parâmetros extras para o provedor (ex: language)

    ## Exemplo:
        >>> get_generation_provider("deepseek").name
        'deepseek'
        >>> get_generation_provider("gemini", mode="mock").name
        'mock'
    """
    try:
        key = AIProvider(provider)
    except ValueError as exc:
        valid = ", ".join(p.value for p in AIProvider)
        raise ConfigurationError(
            f"Provedor desconhecido: {provider!r}",
            suggestion=f"Provedores válidos: {valid}",
        ) from exc

    if resolve_mode(mode) == "mock":
        return MockGenerationProvider(**kwargs)

    return _REGISTRY[key](**kwargs)
