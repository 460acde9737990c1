"""
================================================================================
Erros do AutoAPI
================================================================================

Taxonomia de erros usada em todo o pacote.

## Para todos entenderem:

Nem todo problema é igual. Separamos os erros pelo MOMENTO em que acontecem:

| Erro                 | Quando                                | Efeito                          |
|----------------------|---------------------------------------|---------------------------------|
| ConfigurationError   | Antes de qualquer chamada de rede     | Recusa iniciar                  |
| GenerationError      | Durante a geração com a IA            | Aborta aquela geração           |
| RelayError           | Durante a execução via relay          | Vira resultado ERROR do caso    |

Resultados FAIL (status diferente do esperado) NÃO são exceções:
são um desfecho normal da execução.
"""

from __future__ import annotations

from typing import Any


class AutoAPIError(Exception):
    """
    Erro base do AutoAPI.

    ## Atributos:

    - `code`: Código curto e estável (útil para saída JSON do CLI)
    - `message`: Mensagem legível
    - `suggestion`: Dica de correção (opcional)
    """

    code = "AUTOAPI_ERROR"

    def __init__(self, message: str, *, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Converte para dicionário (para JSON)."""
        result: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.suggestion:
            result["suggestion"] = self.suggestion
        return result


class ConfigurationError(AutoAPIError):
    """Configuração ausente ou inválida (sem API key, sem base URL...)."""

    code = "CONFIGURATION_ERROR"


class MissingAPIKeyError(ConfigurationError):
    """API key do provedor de IA não configurada."""

    code = "MISSING_API_KEY"

    def __init__(self, provider: str, env_var: str | None = None) -> None:
        self.provider = provider
        self.env_var = env_var
        suggestion = "Informe --api-key ou defina AUTOAPI_AI_API_KEY"
        if env_var:
            suggestion += f" (ou {env_var})"
        super().__init__(
            f"API key não configurada para o provedor {provider}",
            suggestion=suggestion,
        )


class GenerationError(AutoAPIError):
    """
    Falha ao gerar o plano de testes.

    `stage` indica qual etapa falhou:

    - "request": chamada ao provedor (rede, status não-2xx)
    - "empty": o modelo não retornou conteúdo
    - "parse": a saída não é JSON recuperável
    - "case": um caso de teste não tem os campos mínimos
    """

    code = "GENERATION_ERROR"

    def __init__(
        self,
        message: str,
        *,
        stage: str = "request",
        status_code: int | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.stage = stage
        self.status_code = status_code
        super().__init__(message, suggestion=suggestion)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["stage"] = self.stage
        if self.status_code is not None:
            result["status_code"] = self.status_code
        return result


class RelayError(AutoAPIError):
    """
    O relay respondeu 502/404 ou devolveu um envelope malformado.

    Usado apenas dentro do dispatcher; sempre é convertido em um
    resultado ERROR e nunca chega ao chamador.
    """

    code = "RELAY_ERROR"
