"""
# Mock Generation Provider

Provedor que devolve um plano determinístico, sem rede e sem custo.

## Quando usar:

✅ Testes automatizados e CI
✅ Demonstrações sem API key (`AUTOAPI_LLM_MODE=mock`)

❌ Avaliar a qualidade real dos planos gerados
"""

from __future__ import annotations

import json
from typing import Any

from ..models import AIConfig, ImportedFile
from .base import BaseGenerationProvider


class MockGenerationProvider(BaseGenerationProvider):
    """
    Provedor mock.

    Devolve `DEFAULT_PLAN` no formato de fio (body e headers como
    strings JSON), exatamente como um modelo real faria.

    ## Exemplo:
        >>> provider = MockGenerationProvider(fenced=True)
        >>> raw = provider.generate("docs", None, ai_config)
        >>> raw.startswith("```json")
        True
    """

    accepts_binary = True

    DEFAULT_PLAN: dict[str, Any] = {
        "config": {
            "baseUrl": "https://api.example.com",
            "authHeader": "Authorization",
            "authToken": "Bearer example-token",
        },
        "cases": [
            {
                "id": "TC-001",
                "title": "Listar usuários",
                "description": "GET /users deve retornar 200",
                "method": "GET",
                "endpoint": "/users",
                "headers": "",
                "body": "",
                "expectedStatus": 200,
            },
            {
                "id": "TC-002",
                "title": "Criar usuário",
                "description": "POST /users com payload válido deve retornar 201",
                "method": "POST",
                "endpoint": "/users",
                "headers": '{"X-Request-Source": "autoapi"}',
                "body": '{"name": "Maria", "email": "maria@example.com"}',
                "expectedStatus": 201,
            },
            {
                "id": "TC-003",
                "title": "Criar usuário sem email",
                "description": "POST /users sem campo obrigatório deve retornar 400",
                "method": "POST",
                "endpoint": "/users",
                "headers": "",
                "body": '{"name": "Maria"}',
                "expectedStatus": 400,
            },
        ],
    }

    def __init__(
        self,
        plan: dict[str, Any] | None = None,
        *,
        fenced: bool = False,
        fail_on_next: bool = False,
        **kwargs: Any,
    ) -> None:
        """
        ## Parâmetros:
            plan: Plano a devolver (padrão: DEFAULT_PLAN)
            fenced: Se True, embrulha a resposta em ```json ... ```
            fail_on_next: Se True, a próxima chamada levanta ConnectionError
        """
        super().__init__(**kwargs)
        self._plan = plan if plan is not None else self.DEFAULT_PLAN
        self._fenced = fenced
        self._fail_on_next = fail_on_next
        self._call_count = 0
        self._last_documentation: str | None = None
        self._last_file: ImportedFile | None = None

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_count(self) -> int:
        """Quantas vezes generate() foi chamado."""
        return self._call_count

    @property
    def last_documentation(self) -> str | None:
        return self._last_documentation

    @property
    def last_file(self) -> ImportedFile | None:
        return self._last_file

    def set_fail_on_next(self, fail: bool = True) -> None:
        """Configura para falhar na próxima chamada."""
        self._fail_on_next = fail

    def generate(
        self,
        documentation: str,
        imported_file: ImportedFile | None,
        ai_config: AIConfig,
    ) -> str:
        self._call_count += 1
        self._last_documentation = documentation
        self._last_file = imported_file

        if self._fail_on_next:
            self._fail_on_next = False
            raise ConnectionError("Mock: falha simulada")

        content = json.dumps(self._plan, indent=2, ensure_ascii=False)
        if self._fenced:
            return f"```json\n{content}\n```"
        return content
