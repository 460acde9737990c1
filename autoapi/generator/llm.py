"""
================================================================================
GERAÇÃO DE PLANOS DE TESTE COM IA
================================================================================

Orquestra a geração: valida a configuração, chama o provedor e
normaliza a resposta.

## Para todos entenderem:

```
documentação / arquivo
        │
        ▼  PASSO 1: validar configuração (sem rede)
        ▼  PASSO 2: provedor.generate() → texto bruto
        ▼  PASSO 3: normalizer.normalize() → GeneratedTestPlan
```

Diferente de um gerador com autocorreção, aqui não há retry: se o
modelo devolver algo irrecuperável, o erro sobe com a etapa que falhou
e o usuário decide se tenta de novo.

## Exemplo de uso:
    >>> generator = TestPlanGenerator()
    >>> plan = generator.generate("GET /users lista usuários", None, ai_config)
    >>> len(plan.cases)
    4
"""

from __future__ import annotations

import logging

from ..errors import ConfigurationError, GenerationError, MissingAPIKeyError
from ..llm import BaseGenerationProvider, get_generation_provider
from ..models import AIConfig, AIProvider, GeneratedTestPlan, ImportedFile
from .normalizer import normalize

logger = logging.getLogger(__name__)


class TestPlanGenerator:
    """
    Gerador de planos de teste a partir de documentação de API.

    ## Atributos:
        provider: Provedor fixo (se None, é resolvido pelo `ai_config`
            a cada chamada)
        mode: "real" ou "mock" (None = AUTOAPI_LLM_MODE ou "real")
        language: Idioma dos títulos e descrições gerados
    """

    __test__ = False

    def __init__(
        self,
        provider: BaseGenerationProvider | None = None,
        mode: str | None = None,
        language: str | None = None,
    ) -> None:
        self.provider = provider
        self.mode = mode
        self.language = language
        self._last_provider_used: str | None = None

    @property
    def last_provider_used(self) -> str | None:
        """Nome do provedor usado na última geração bem-sucedida."""
        return self._last_provider_used

    def _resolve_provider(self, ai_config: AIConfig) -> BaseGenerationProvider:
        if self.provider is not None:
            return self.provider
        kwargs = {"language": self.language} if self.language else {}
        return get_generation_provider(ai_config.provider, mode=self.mode, **kwargs)

    def _validate(
        self,
        provider: BaseGenerationProvider,
        documentation: str,
        imported_file: ImportedFile | None,
        ai_config: AIConfig,
    ) -> None:
        if provider.name == "mock":
            if not documentation.strip() and imported_file is None:
                raise ConfigurationError(
                    "Nenhuma documentação informada",
                    suggestion="Cole a documentação ou importe um arquivo",
                )
            return

        if not ai_config.api_key:
            raise MissingAPIKeyError(
                ai_config.provider.value, ai_config.defaults.api_key_env
            )
        if ai_config.provider != AIProvider.GEMINI and not ai_config.base_url:
            raise ConfigurationError(
                f"Base URL não configurada para o provedor {ai_config.provider.value}",
                suggestion="Use --ai-base-url ou AUTOAPI_AI_BASE_URL",
            )
        if not documentation.strip() and imported_file is None:
            raise ConfigurationError(
                "Nenhuma documentação informada",
                suggestion="Cole a documentação ou importe um arquivo",
            )
        if imported_file is not None and imported_file.is_binary and not provider.accepts_binary:
            logger.warning(
                "%s não lê arquivos binários; %s não será enviado ao modelo",
                provider.name,
                imported_file.name,
            )

    def generate(
        self,
        documentation: str,
        imported_file: ImportedFile | None,
        ai_config: AIConfig,
    ) -> GeneratedTestPlan:
        """
        Gera um plano de testes.

        ## Parâmetros:
            documentation: Texto da documentação (pode ser vazio se houver arquivo)
            imported_file: Arquivo importado (opcional)
            ai_config: Provedor, chave, base URL e modelo

        ## Retorna:
            GeneratedTestPlan com dicas de config e casos. Uma lista de
            casos vazia é devolvida como está.

        ## Erros possíveis:
            ConfigurationError: chave, base URL ou documentação ausentes
                (levantado antes de qualquer chamada de rede)
            GenerationError: falha do provedor, resposta vazia ou JSON
                irrecuperável
        """
        # =====================================================================
        # PASSO 1: Validar configuração
        # =====================================================================

        provider = self._resolve_provider(ai_config)
        self._validate(provider, documentation, imported_file, ai_config)

        # =====================================================================
        # PASSO 2: Chamar o provedor
        # =====================================================================

        logger.info(
            "Gerando plano com %s (modelo %s)", provider.name, ai_config.model_name
        )
        try:
            raw_text = provider.generate(documentation, imported_file, ai_config)
        except (GenerationError, ConfigurationError):
            raise
        except Exception as exc:
            raise GenerationError(
                f"Falha na geração com {provider.name}: {exc}",
            ) from exc

        if not raw_text or not raw_text.strip():
            raise GenerationError("modelo não retornou conteúdo", stage="empty")

        # =====================================================================
        # PASSO 3: Normalizar
        # =====================================================================

        plan = normalize(raw_text)
        self._last_provider_used = provider.name
        logger.info("Plano gerado com %d casos", len(plan.cases))
        return plan


def generate_test_plan(
    documentation: str,
    ai_config: AIConfig,
    imported_file: ImportedFile | None = None,
    *,
    mode: str | None = None,
) -> GeneratedTestPlan:
    """Função de conveniência: cria um TestPlanGenerator e gera o plano."""
    return TestPlanGenerator(mode=mode).generate(documentation, imported_file, ai_config)
