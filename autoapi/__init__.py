"""
================================================================================
AUTOAPI TESTER
================================================================================

Gera casos de teste de API a partir de documentação (com IA), aplica
overrides globais de headers, query e body, executa os casos em
sequência e classifica cada resultado como PASS, FAIL ou ERROR.

## Módulos:

| Módulo       | Responsabilidade                                    |
|--------------|-----------------------------------------------------|
| models       | Tipos de domínio (config, casos, resultados)        |
| composer     | Requisição efetiva (URL, headers, body)             |
| dispatcher   | Envio direto ou via relay + classificação           |
| runner       | Execução sequencial da suíte                        |
| generator    | Geração e normalização de planos                    |
| llm          | Provedores de IA (Gemini, chat completions, mock)   |
| report       | Relatório Markdown e pacote JSON/zip                |
| relay        | Servidor relay (FastAPI)                            |
| cli          | Linha de comando `autoapi`                          |
"""

__version__ = "0.1.0"

from .composer import EffectiveRequest, compute_effective_request
from .dispatcher import execute_test_case
from .errors import AutoAPIError, ConfigurationError, GenerationError, MissingAPIKeyError
from .models import (
    AIConfig,
    AIProvider,
    ApiConfig,
    GeneratedTestPlan,
    HttpMethod,
    ImportedFile,
    KeyValuePair,
    OverrideKind,
    ResultStatus,
    SuiteStats,
    TestCase,
    TestResult,
)
from .runner import SuiteRun, SuiteRunner, run_suite

__all__ = [
    "__version__",
    "AIConfig",
    "AIProvider",
    "ApiConfig",
    "AutoAPIError",
    "ConfigurationError",
    "EffectiveRequest",
    "GeneratedTestPlan",
    "GenerationError",
    "HttpMethod",
    "ImportedFile",
    "KeyValuePair",
    "MissingAPIKeyError",
    "OverrideKind",
    "ResultStatus",
    "SuiteRun",
    "SuiteRunner",
    "SuiteStats",
    "TestCase",
    "TestResult",
    "compute_effective_request",
    "execute_test_case",
    "run_suite",
]
