"""
# Base Classes para Provedores de Geração

Define o contrato que todo provedor de IA deve seguir.

## Para todos entenderem:

É como um contrato de trabalho:
- Todo provedor DEVE ter um método `generate()`
- Todo provedor recebe a documentação, o arquivo (opcional) e a config da IA
- Todo provedor devolve o TEXTO BRUTO da resposta do modelo

Quem transforma esse texto em casos de teste é o normalizador
(`autoapi.generator.normalizer`), não o provedor.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .prompts import DEFAULT_LANGUAGE
from ..models import AIConfig, ImportedFile


class BaseGenerationProvider(ABC):
    """
    Interface base para todos os provedores de geração.

    ## Exemplo de implementação:
        >>> class MeuProvider(BaseGenerationProvider):
        ...     @property
        ...     def name(self) -> str:
        ...         return "meu-provider"
        ...
        ...     def generate(self, documentation, imported_file, ai_config) -> str:
        ...         return '{"config": {}, "cases": []}'
    """

    # Se False, arquivos binários não são enviados ao modelo
    accepts_binary: bool = False

    def __init__(self, language: str = DEFAULT_LANGUAGE) -> None:
        self.language = language

    @property
    @abstractmethod
    def name(self) -> str:
        """Nome identificador do provedor."""
        ...

    @abstractmethod
    def generate(
        self,
        documentation: str,
        imported_file: ImportedFile | None,
        ai_config: AIConfig,
    ) -> str:
        """
        Gera o plano de testes e devolve o texto bruto do modelo.

        ## Parâmetros:
            documentation: Texto colado pelo usuário
            imported_file: Arquivo importado (base64), opcional
            ai_config: Provedor, chave, base URL e modelo

        ## Erros:
            GenerationError: falha de rede ou status não-2xx do provedor
        """
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name!r})>"
