"""
# Provedor de Chat Completions (compatível com OpenAI)

Atende DeepSeek, Tongyi (DashScope) e OpenAI: todos falam o mesmo
protocolo `/chat/completions`, mudando só a base URL e o modelo.

A chamada passa pelo LiteLLM com o prefixo `openai/`, que usa o
cliente OpenAI genérico apontado para `api_base`.

## Limitação:

Esses endpoints não recebem documentos binários. Se o usuário
importou um PDF, o prompt ganha um aviso pedindo para colar o texto;
o arquivo em si NÃO é enviado.
"""

from __future__ import annotations

import logging
from typing import Any

from litellm import completion  # type: ignore[import-untyped]

from ..errors import ConfigurationError, GenerationError, MissingAPIKeyError
from ..models import AIConfig, ImportedFile
from .base import BaseGenerationProvider
from .prompts import BINARY_FILE_NOTICE, chat_system_prompt, user_prompt

logger = logging.getLogger(__name__)

MAX_ERROR_BODY = 500


class ChatCompletionProvider(BaseGenerationProvider):
    """Provedor para qualquer endpoint compatível com chat completions."""

    def __init__(self, provider_name: str = "openai", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._provider_name = provider_name

    @property
    def name(self) -> str:
        return self._provider_name

    def build_messages(
        self,
        documentation: str,
        imported_file: ImportedFile | None,
    ) -> list[dict[str, str]]:
        """Monta as mensagens system + user enviadas ao modelo."""
        content = user_prompt(documentation, self.language)
        if imported_file is not None and imported_file.is_binary and not self.accepts_binary:
            content += BINARY_FILE_NOTICE.format(mime_type=imported_file.mime_type)
        elif imported_file is not None:
            # Arquivo de texto: o conteúdo vai junto no prompt
            content += f"\n\n{imported_file.name}:\n{imported_file.raw_bytes().decode('utf-8', 'replace')}"
        return [
            {"role": "system", "content": chat_system_prompt(self.language)},
            {"role": "user", "content": content},
        ]

    def generate(
        self,
        documentation: str,
        imported_file: ImportedFile | None,
        ai_config: AIConfig,
    ) -> str:
        if not ai_config.api_key:
            raise MissingAPIKeyError(self.name, ai_config.defaults.api_key_env)
        if not ai_config.base_url:
            raise ConfigurationError(
                f"Base URL não configurada para o provedor {self.name}",
                suggestion="Use --ai-base-url ou AUTOAPI_AI_BASE_URL",
            )

        kwargs: dict[str, Any] = {
            "model": f"openai/{ai_config.model_name}",
            "messages": self.build_messages(documentation, imported_file),
            "api_key": ai_config.api_key,
            "api_base": ai_config.base_url.rstrip("/"),
            "response_format": {"type": "json_object"},
        }

        logger.debug(
            "%s: modelo=%s, base=%s", self.name, ai_config.model_name, ai_config.base_url
        )

        try:
            response: Any = completion(**kwargs)
        except Exception as exc:
            status = getattr(exc, "status_code", None)
            detail = str(exc)[:MAX_ERROR_BODY]
            raise GenerationError(
                f"Falha na geração com {self.name} ({status or 'sem status'}): {detail}",
                status_code=status if isinstance(status, int) else None,
            ) from exc

        return str(response.choices[0].message.content or "")
