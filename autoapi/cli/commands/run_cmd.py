"""
================================================================================
Comando: autoapi run — Executa Plano de Testes
================================================================================

Executa, em sequência, os casos de um plano gerado por `autoapi generate`
e classifica cada um como PASS, FAIL ou ERROR.

## Uso:

```bash
autoapi run plan.json
autoapi run plan.json -u https://api.example.com -t meu-token
autoapi run plan.json -H X-Env=staging -Q tenant=acme -B source=ci
autoapi run plan.json --proxy --proxy-url http://localhost:3001/proxy
```

## Opções de saída:

- `--report FILE.md` → Relatório Markdown
- `--export FILE.zip|FILE.json` → Pacote completo (zip ou JSON)

## Exit code:

0 se todos os casos passaram, 1 caso contrário.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from ...errors import AutoAPIError, ConfigurationError
from ...models import ApiConfig, ResultStatus, TestCase, TestResult
from ...report import build_bundle, render_markdown, write_archive
from ...runner import SuiteRun, SuiteRunner
from ..utils import (
    apply_target_options,
    fail,
    format_duration,
    get_settings,
    load_plan,
    target_options,
)

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    ResultStatus.PASS: "[green]✅ PASS[/green]",
    ResultStatus.FAIL: "[red]❌ FAIL[/red]",
    ResultStatus.ERROR: "[yellow]⚠️ ERROR[/yellow]",
}


def _json_result(run: SuiteRun, cases: list[TestCase]) -> dict[str, Any]:
    results = []
    for case in cases:
        result = run.results.get(case.id)
        if result is None:
            continue
        results.append(
            {
                "id": case.id,
                "status": result.status.value,
                "expectedStatus": case.expected_status,
                "actualStatus": result.actual_status,
                "latencyMs": result.latency_ms,
                "error": result.error_message,
            }
        )
    return {
        "success": run.success,
        "stopped": run.stopped,
        "summary": run.summary(),
        "stats": {
            "total": run.stats.total,
            "passed": run.stats.passed,
            "failed": run.stats.failed,
            "errors": run.stats.errors,
            "avgLatencyMs": run.stats.avg_latency_ms,
        },
        "results": results,
    }


def _results_table(run: SuiteRun, cases: list[TestCase]) -> Table:
    table = Table(title="Resultados")
    table.add_column("ID", style="cyan")
    table.add_column("Requisição")
    table.add_column("Esperado", justify="right")
    table.add_column("Real", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("Latência", justify="right")
    table.add_column("Erro", style="dim")

    for case in cases:
        result = run.results.get(case.id)
        if result is None:
            table.add_row(case.id, escape(f"{case.method.value} {case.endpoint}"),
                          str(case.expected_status), "-", "[dim]não executado[/dim]", "-", "")
            continue
        error_msg = result.error_message or ""
        error_msg = error_msg[:50] + "..." if len(error_msg) > 50 else error_msg
        table.add_row(
            case.id,
            escape(f"{case.method.value} {case.endpoint}"),
            str(case.expected_status),
            str(result.actual_status),
            STATUS_LABELS[result.status],
            format_duration(result.latency_ms),
            escape(error_msg),
        )
    return table


def _export(
    console: Console,
    cases: list[TestCase],
    results: dict[str, TestResult],
    config: ApiConfig,
    report: str | None,
    export: str | None,
) -> None:
    if report:
        report_path = Path(report)
        try:
            report_path.parent.mkdir(parents=True, exist_ok=True)
            report_path.write_text(render_markdown(cases, results, config), encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Não foi possível salvar {report_path}: {exc}") from exc
        console.print(f"📊 Relatório salvo em: [cyan]{report_path}[/cyan]")

    if export:
        export_path = Path(export)
        try:
            if export_path.suffix.lower() == ".zip":
                write_archive(export_path, cases, results, config)
            else:
                export_path.parent.mkdir(parents=True, exist_ok=True)
                export_path.write_text(
                    json.dumps(build_bundle(cases, results, config), indent=2, ensure_ascii=False),
                    encoding="utf-8",
                )
        except OSError as exc:
            raise ConfigurationError(f"Não foi possível salvar {export_path}: {exc}") from exc
        console.print(f"📦 Pacote salvo em: [cyan]{export_path}[/cyan]")


@click.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False))
@target_options
@click.option("--proxy/--no-proxy", "use_proxy", default=None, help="Envia via relay")
@click.option("--proxy-url", type=str, help="URL do relay (ex: http://localhost:3001/proxy)")
@click.option("--timeout", type=float, help="Timeout por requisição em segundos")
@click.option("--pace-ms", type=click.IntRange(min=0), help="Pausa entre casos (padrão: 100ms)")
@click.option("--fail-fast", is_flag=True, help="Para no primeiro FAIL ou ERROR")
@click.option("--report", "-r", type=click.Path(dir_okay=False), help="Salva relatório Markdown")
@click.option(
    "--export", "-e",
    type=click.Path(dir_okay=False),
    help="Salva pacote completo (.zip com report.md + data.json, ou .json)",
)
@click.pass_context
def run(
    ctx: click.Context,
    plan_file: str,
    use_proxy: bool | None,
    proxy_url: str | None,
    timeout: float | None,
    pace_ms: int | None,
    fail_fast: bool,
    report: str | None,
    export: str | None,
    **target: Any,
) -> None:
    """
    Executa um plano de testes.

    \b
    Exemplos:
      autoapi run plan.json
      autoapi run plan.json -u https://api.example.com -H X-Env=qa
      autoapi run plan.json --report report.md --export bundle.zip
    """
    console: Console = ctx.obj["console"]
    quiet: bool = ctx.obj.get("quiet", False)
    json_output: bool = ctx.obj.get("json_output", False)

    try:
        plan = load_plan(plan_file)
        settings = apply_target_options(
            get_settings(ctx),
            use_proxy=use_proxy,
            proxy_url=proxy_url,
            timeout=timeout,
            pace_ms=pace_ms,
            **target,
        )
    except AutoAPIError as exc:
        fail(ctx, exc)

    config = settings.to_api_config()
    filled = config.apply_plan_hints(plan.config)
    if filled:
        logger.info("Preenchido a partir do plano: %s", ", ".join(filled))

    if not config.base_url:
        fail(ctx, ConfigurationError(
            "Base URL não configurada",
            suggestion="Use --base-url ou AUTOAPI_BASE_URL",
        ))

    cases = plan.cases
    if not cases:
        console.print("[yellow]⚠️  O plano não tem casos de teste[/yellow]")

    if not quiet and not json_output:
        mode = f"relay ({config.proxy_url or '/api/proxy'})" if config.use_server_proxy else "direto"
        console.print(Panel(
            f"[bold]{Path(plan_file).name}[/bold]\n"
            f"Base URL: {config.base_url or '[dim]não definida[/dim]'}\n\n"
            f"Casos: {len(cases)} | Modo: {mode}",
            title="🚀 Executando Plano",
            border_style="blue",
        ))

    runner = SuiteRunner(
        cases,
        config,
        pace_seconds=settings.pace_seconds,
        timeout=settings.timeout,
    )

    def should_stop() -> bool:
        return fail_fast and any(r.status != ResultStatus.PASS for r in runner.results.values())

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("[cyan]Executando casos...[/cyan]", total=len(cases))
        suite = runner.run_all(
            on_result=lambda case, result: progress.advance(task),
            should_stop=should_stop,
        )

    # =========================================================================
    # RESULTADOS
    # =========================================================================

    if json_output:
        ctx.obj["json_console"].print_json(data=_json_result(suite, cases))
    else:
        console.print(_results_table(suite, cases))
        console.print()
        if suite.success:
            console.print(Panel(
                f"[green]{suite.summary()}[/green]",
                title="✅ Todos os testes passaram",
                border_style="green",
            ))
        else:
            console.print(Panel(
                f"[red]{suite.summary()}[/red]",
                title="❌ Alguns testes falharam",
                border_style="red",
            ))

    try:
        _export(console, cases, suite.results, config, report, export)
    except AutoAPIError as exc:
        fail(ctx, exc)

    raise SystemExit(0 if suite.success else 1)
