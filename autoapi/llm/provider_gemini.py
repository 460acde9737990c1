"""
# Provedor Gemini (SDK nativo do Google)

Único provedor que aceita documentos binários (ex: PDF) junto com o
texto, e que recebe um schema de resposta estruturada.

## Como a chamada é montada:

```
system_instruction  ← instrução fixa (idioma de saída preenchido)
contents            ← [pedido do usuário + documentação, arquivo importado?]
generation_config   ← response_mime_type=application/json + PLAN_RESPONSE_SCHEMA
```
"""

from __future__ import annotations

import logging
from typing import Any

import google.generativeai as genai

from ..errors import GenerationError, MissingAPIKeyError
from ..models import AIConfig, AIProvider, ImportedFile
from .base import BaseGenerationProvider
from .prompts import PLAN_RESPONSE_SCHEMA, system_instruction, user_prompt

logger = logging.getLogger(__name__)

# Trecho máximo do corpo de erro repassado ao usuário
MAX_ERROR_BODY = 500


def _status_code(exc: Exception) -> int | None:
    """Extrai o status HTTP de uma exceção do SDK, quando existir."""
    for attr in ("code", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


class GeminiProvider(BaseGenerationProvider):
    """
    Gera planos de teste com o Gemini via `google-generativeai`.

    ## Exemplo:
        >>> provider = GeminiProvider()
        >>> raw = provider.generate("GET /users lista usuários", None, ai_config)
        >>> raw.startswith("{")
        True
    """

    accepts_binary = True

    @property
    def name(self) -> str:
        return AIProvider.GEMINI.value

    def _build_contents(
        self,
        documentation: str,
        imported_file: ImportedFile | None,
    ) -> list[Any]:
        contents: list[Any] = [user_prompt(documentation, self.language)]
        if imported_file is not None:
            contents.append(
                {"mime_type": imported_file.mime_type, "data": imported_file.raw_bytes()}
            )
        return contents

    def generate(
        self,
        documentation: str,
        imported_file: ImportedFile | None,
        ai_config: AIConfig,
    ) -> str:
        if not ai_config.api_key:
            raise MissingAPIKeyError(self.name, ai_config.defaults.api_key_env)

        genai.configure(api_key=ai_config.api_key)
        model = genai.GenerativeModel(
            ai_config.model_name,
            system_instruction=system_instruction(self.language),
            generation_config={
                "response_mime_type": "application/json",
                "response_schema": PLAN_RESPONSE_SCHEMA,
            },
        )

        logger.debug(
            "Gemini: modelo=%s, doc=%d chars, arquivo=%s",
            ai_config.model_name,
            len(documentation),
            imported_file.name if imported_file else None,
        )

        try:
            response = model.generate_content(
                self._build_contents(documentation, imported_file)
            )
            return response.text or ""
        except Exception as exc:
            status = _status_code(exc)
            detail = str(exc)[:MAX_ERROR_BODY]
            raise GenerationError(
                f"Falha na geração com Gemini ({status or 'sem status'}): {detail}",
                status_code=status,
            ) from exc
