"""
# Módulo LLM - Provedores de IA para Geração de Planos

Padrão Strategy: o gerador não sabe se está falando com Gemini,
DeepSeek, Tongyi, OpenAI ou com o mock. Ele só precisa que o
provedor devolva o texto bruto do plano.

## Como ativar o modo mock:

```bash
AUTOAPI_LLM_MODE=mock autoapi generate docs.md
```
"""

from .base import BaseGenerationProvider
from .provider_chat import ChatCompletionProvider
from .provider_gemini import GeminiProvider
from .provider_mock import MockGenerationProvider
from .providers import get_generation_provider, list_providers, register_provider

__all__ = [
    "BaseGenerationProvider",
    "ChatCompletionProvider",
    "GeminiProvider",
    "MockGenerationProvider",
    "get_generation_provider",
    "list_providers",
    "register_provider",
]
