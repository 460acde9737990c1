"""
================================================================================
EXECUÇÃO SEQUENCIAL DA SUÍTE
================================================================================

Executa uma lista de casos de teste, um de cada vez, e agrega os
resultados.

## Para todos entenderem:

A execução é propositalmente simples:

1. Tira um snapshot da configuração (edições feitas depois não afetam
   a execução em andamento)
2. Para cada caso, em ordem: compõe, envia, classifica, registra
3. Entre um caso e outro, verifica se alguém pediu para parar

Não há paralelismo nem retry. Um caso com ERROR não interrompe os
próximos.

## Mapa de resultados:

Os resultados ficam em um dict chaveado pelo id do caso. Reexecutar um
caso substitui o resultado anterior, então o mapa nunca tem mais
entradas do que casos distintos.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

import requests

from .dispatcher import execute_test_case
from .errors import ConfigurationError
from .models import ApiConfig, ResultStatus, SuiteStats, TestCase, TestResult

logger = logging.getLogger(__name__)

ResultCallback = Callable[[TestCase, TestResult], None]
StopCheck = Callable[[], bool]


def compute_stats(test_cases: list[TestCase], results: dict[str, TestResult]) -> SuiteStats:
    """Calcula estatísticas agregadas (total = número de casos da suíte)."""
    values = list(results.values())
    latencies = [r.latency_ms for r in values]
    return SuiteStats(
        total=len(test_cases),
        passed=sum(1 for r in values if r.status == ResultStatus.PASS),
        failed=sum(1 for r in values if r.status == ResultStatus.FAIL),
        errors=sum(1 for r in values if r.status == ResultStatus.ERROR),
        avg_latency_ms=round(sum(latencies) / len(latencies)) if latencies else 0,
    )


@dataclass
class SuiteRun:
    """
    Resultado de uma execução completa (ou interrompida) da suíte.

    ## Atributos:
        results: Resultados por id de caso, em ordem de execução
        stats: Contadores agregados
        stopped: True se a execução foi interrompida antes do fim
    """

    results: dict[str, TestResult] = field(default_factory=dict)
    stats: SuiteStats = field(default_factory=SuiteStats)
    stopped: bool = False

    @property
    def success(self) -> bool:
        """True se todos os casos foram executados e passaram."""
        return (
            not self.stopped
            and self.stats.total > 0
            and self.stats.passed == self.stats.total
        )

    def summary(self) -> str:
        """
        Resumo de uma linha por aspecto, para o terminal:

        ```
        ✓ PASSOU | 5/5 passaram, 0 falharam, 0 erros
        Taxa de sucesso: 100% | Latência média: 120ms
        ```
        """
        status = "✓ PASSOU" if self.success else "✗ FALHOU"
        if self.stopped:
            status += " (interrompido)"
        return (
            f"{status} | {self.stats.passed}/{self.stats.total} passaram, "
            f"{self.stats.failed} falharam, {self.stats.errors} erros\n"
            f"Taxa de sucesso: {self.stats.pass_rate}% | "
            f"Latência média: {self.stats.avg_latency_ms}ms"
        )


class SuiteRunner:
    """
    Executor sequencial de uma suíte de casos de teste.

    ## Exemplo:
        >>> runner = SuiteRunner(cases, config)
        >>> run = runner.run_all(on_result=lambda case, res: print(case.id, res.status))
        >>> run.stats.passed
        3
    """

    def __init__(
        self,
        test_cases: list[TestCase],
        config: ApiConfig,
        *,
        pace_seconds: float = 0.0,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        ## Parâmetros:
            test_cases: Casos a executar, na ordem desejada
            config: Configuração ao vivo (um snapshot é tirado aqui)
            pace_seconds: Pausa entre casos (0 = sem pausa)
            session: Sessão HTTP compartilhada entre os casos (opcional)
            timeout: Timeout por requisição em segundos (None = padrão)
        """
        self.test_cases = list(test_cases)
        self.config = config.snapshot()
        self.pace_seconds = pace_seconds
        self.timeout = timeout
        self._session = session
        self.results: dict[str, TestResult] = {}

    def _require_base_url(self) -> None:
        if not self.config.base_url:
            raise ConfigurationError(
                "Base URL não configurada",
                suggestion="Use --base-url ou AUTOAPI_BASE_URL",
            )

    def _execute(self, test_case: TestCase, session: requests.Session) -> TestResult:
        result = execute_test_case(
            test_case,
            self.config,
            session=session,
            timeout=self.timeout,
        )
        # pop + insert: a ordem do dict acompanha a ordem de execução
        self.results.pop(test_case.id, None)
        self.results[test_case.id] = result
        return result

    def run_one(self, test_case: TestCase) -> TestResult:
        """
        Executa (ou reexecuta) um único caso, substituindo o resultado anterior.

        ## Erros:
            ConfigurationError: base URL vazia
            KeyError: o caso não pertence à suíte
        """
        if all(case.id != test_case.id for case in self.test_cases):
            raise KeyError(test_case.id)
        self._require_base_url()
        session = self._session or requests.Session()
        try:
            return self._execute(test_case, session)
        finally:
            if self._session is None:
                session.close()

    def run_all(
        self,
        on_result: ResultCallback | None = None,
        should_stop: StopCheck | None = None,
    ) -> SuiteRun:
        """
        Executa todos os casos, em sequência.

        ## Parâmetros:
            on_result: Chamado após cada caso com (caso, resultado)
            should_stop: Consultado ENTRE casos; se retornar True, os casos
                restantes não são agendados (o caso em andamento termina)

        ## Retorna:
            SuiteRun com resultados e estatísticas

        ## Erros:
            ConfigurationError: base URL vazia (nada é enviado)
        """
        self._require_base_url()
        self.results = {}
        stopped = False
        session = self._session or requests.Session()

        try:
            for index, test_case in enumerate(self.test_cases):
                if should_stop is not None and should_stop():
                    stopped = True
                    logger.info(
                        "Execução interrompida antes do caso %d/%d",
                        index + 1,
                        len(self.test_cases),
                    )
                    break

                result = self._execute(test_case, session)
                logger.info(
                    "[%d/%d] %s %s → %s (%s, %dms)",
                    index + 1,
                    len(self.test_cases),
                    test_case.method.value,
                    test_case.endpoint,
                    result.status.value,
                    result.actual_status,
                    result.latency_ms,
                )

                if on_result is not None:
                    on_result(test_case, result)

                if self.pace_seconds > 0 and index < len(self.test_cases) - 1:
                    time.sleep(self.pace_seconds)
        finally:
            if self._session is None:
                session.close()

        return SuiteRun(results=dict(self.results), stats=self.stats(), stopped=stopped)

    def stats(self) -> SuiteStats:
        return compute_stats(self.test_cases, self.results)


def run_suite(
    test_cases: list[TestCase],
    config: ApiConfig,
    *,
    on_result: ResultCallback | None = None,
    should_stop: StopCheck | None = None,
    pace_seconds: float = 0.0,
    session: requests.Session | None = None,
    timeout: float | None = None,
) -> SuiteRun:
    """Função de conveniência: cria um SuiteRunner e executa tudo."""
    runner = SuiteRunner(
        test_cases,
        config,
        pace_seconds=pace_seconds,
        session=session,
        timeout=timeout,
    )
    return runner.run_all(on_result=on_result, should_stop=should_stop)
