"""
================================================================================
EXPORTAÇÃO DE RELATÓRIOS
================================================================================

Gera os artefatos de uma execução a partir de (casos, resultados, config):

- `render_markdown()`: relatório legível em Markdown
- `build_bundle()`: pacote JSON com casos, resultados e requisições efetivas
- `write_archive()`: zip com `report.md` e `data.json`

Nada aqui toca a rede: a requisição efetiva é recomposta pelo composer.
A API key do provedor de IA nunca entra nos artefatos.
"""

from __future__ import annotations

import json
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .composer import compute_effective_request
from .models import ApiConfig, ResultStatus, TestCase, TestResult
from .runner import compute_stats

# Respostas maiores que isso são truncadas no relatório
MAX_RESPONSE_CHARS = 3000

STATUS_ICONS = {
    ResultStatus.PASS: "✅",
    ResultStatus.FAIL: "❌",
    ResultStatus.ERROR: "⚠️",
}
NOT_EXECUTED_ICON = "⚪"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _json_block(value: Any) -> str:
    return f"```json\n{json.dumps(value, indent=2, ensure_ascii=False)}\n```"


def _response_snippet(body: Any) -> str:
    text = body if isinstance(body, str) else json.dumps(body, indent=2, ensure_ascii=False)
    if len(text) > MAX_RESPONSE_CHARS:
        return text[:MAX_RESPONSE_CHARS] + "\n... (conteúdo truncado)"
    return text


def render_markdown(
    test_cases: list[TestCase],
    results: dict[str, TestResult],
    config: ApiConfig,
    *,
    generated_at: datetime | None = None,
) -> str:
    """
    Renderiza o relatório Markdown da execução.

    Casos sem resultado aparecem como "não executado".
    """
    stats = compute_stats(test_cases, results)
    timestamp = (generated_at or _now()).strftime("%Y-%m-%d %H:%M:%S UTC")

    lines = [
        "# Relatório de Testes de API",
        "",
        f"**Gerado em**: {timestamp}",
        "",
        "## Resumo",
        "| Total | Passou | Falhou | Erros | Taxa de sucesso |",
        "| :-: | :-: | :-: | :-: | :-: |",
        f"| {stats.total} | {stats.passed} | {stats.failed} | {stats.errors} | {stats.pass_rate}% |",
        "",
        "## Detalhes",
        "",
    ]

    for index, case in enumerate(test_cases, start=1):
        result = results.get(case.id)
        icon = STATUS_ICONS[result.status] if result else NOT_EXECUTED_ICON
        request = compute_effective_request(case, config)

        lines.append(f"### {index}. {icon} {case.title} ({case.id})")
        lines.append("")
        lines.append(f"- **Endpoint**: `{case.method.value} {case.endpoint}`")
        lines.append(f"- **Descrição**: {case.description}")
        lines.append(f"- **Headers**:\n{_json_block(request.headers)}")
        if request.body is not None:
            lines.append(f"- **Body**:\n{_json_block(request.body)}")
        else:
            lines.append("- **Body**: nenhum")

        if result is None:
            lines.append("- **Status**: não executado")
        else:
            lines.append(f"- **Resultado**: **{result.status.value}**")
            lines.append(
                f"- **Status HTTP**: esperado `{case.expected_status}` / "
                f"real `{result.actual_status}`"
            )
            lines.append(f"- **Latência**: {result.latency_ms} ms")
            if result.error_message:
                lines.append(f"- **Erro**: `{result.error_message}`")
            if result.response_body is not None:
                lines.append("- **Resposta**:")
                lines.append(f"```json\n{_response_snippet(result.response_body)}\n```")

        lines.append("")
        lines.append("---")
        lines.append("")

    return "\n".join(lines)


def build_bundle(
    test_cases: list[TestCase],
    results: dict[str, TestResult],
    config: ApiConfig,
    *,
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """
    Monta o pacote JSON completo da execução.

    ```
    {metadata: {generatedAt, stats}, config: {baseUrl, authHeader},
     results: [{case, result, effectiveRequest: {url, headers, body}}]}
    ```
    """
    stats = compute_stats(test_cases, results)
    entries = []
    for case in test_cases:
        request = compute_effective_request(case, config)
        result = results.get(case.id)
        entries.append(
            {
                "case": case.model_dump(mode="json", by_alias=True),
                "result": result.model_dump(mode="json", by_alias=True) if result else None,
                "effectiveRequest": {
                    "url": request.url,
                    "headers": request.headers,
                    "body": request.body,
                },
            }
        )

    return {
        "metadata": {
            "generatedAt": (generated_at or _now()).isoformat(),
            "stats": {
                "total": stats.total,
                "passed": stats.passed,
                "failed": stats.failed,
                "errors": stats.errors,
                "avgLatencyMs": stats.avg_latency_ms,
            },
        },
        "config": {"baseUrl": config.base_url, "authHeader": config.auth_header},
        "results": entries,
    }


def write_archive(
    path: str | Path,
    test_cases: list[TestCase],
    results: dict[str, TestResult],
    config: ApiConfig,
) -> Path:
    """
    Grava um zip com `<pasta>/report.md` e `<pasta>/data.json`.

    A pasta interna tem o nome do arquivo sem extensão.
    """
    target = Path(path)
    generated_at = _now()
    folder = target.stem or f"api-test-report-{generated_at.date().isoformat()}"

    markdown = render_markdown(test_cases, results, config, generated_at=generated_at)
    bundle = build_bundle(test_cases, results, config, generated_at=generated_at)

    target.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(f"{folder}/report.md", markdown)
        archive.writestr(
            f"{folder}/data.json",
            json.dumps(bundle, indent=2, ensure_ascii=False),
        )
    return target
