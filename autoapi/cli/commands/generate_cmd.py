"""
================================================================================
Comando: autoapi generate — Gera Plano de Testes com IA
================================================================================

Lê a documentação da API (arquivos de texto e/ou um documento como
PDF), chama o provedor de IA e salva o plano normalizado em JSON.

## Uso:

```bash
autoapi generate docs.md
autoapi generate --file api.pdf --provider gemini
autoapi generate docs.md --provider deepseek --model deepseek-chat -o plan.json
AUTOAPI_LLM_MODE=mock autoapi generate docs.md   # sem rede
```

Apenas o Gemini lê documentos binários; nos demais provedores o
modelo é avisado e a geração se baseia no texto.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ...errors import AutoAPIError
from ...generator import TestPlanGenerator
from ...models import AIProvider, GeneratedTestPlan
from ..utils import fail, get_settings, load_imported_file, read_documentation


def _cases_table(plan: GeneratedTestPlan) -> Table:
    table = Table(title=f"Casos gerados ({len(plan.cases)})")
    table.add_column("ID", style="cyan")
    table.add_column("Método", justify="center")
    table.add_column("Endpoint")
    table.add_column("Esperado", justify="right")
    table.add_column("Título", style="dim")
    for case in plan.cases:
        table.add_row(
            case.id,
            case.method.value,
            escape(case.endpoint),
            str(case.expected_status),
            escape(case.title),
        )
    return table


@click.command()
@click.argument("docs", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--file", "-f", "document",
    type=click.Path(exists=True, dir_okay=False),
    help="Documento enviado ao modelo (ex: PDF; só o Gemini lê binários)",
)
@click.option(
    "--provider", "-p",
    type=click.Choice([p.value for p in AIProvider]),
    help="Provedor de IA (padrão: gemini)",
)
@click.option("--model", "-m", type=str, help="Modelo do provedor")
@click.option("--api-key", type=str, help="API key do provedor")
@click.option("--ai-base-url", type=str, help="Base URL do provedor (chat completions)")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default="plan.json",
    show_default=True,
    help="Arquivo onde o plano é salvo",
)
@click.option("--mock", is_flag=True, help="Usa o provedor mock (sem rede)")
@click.option("--language", type=str, help="Idioma dos títulos e descrições gerados")
@click.pass_context
def generate(
    ctx: click.Context,
    docs: tuple[str, ...],
    document: str | None,
    provider: str | None,
    model: str | None,
    api_key: str | None,
    ai_base_url: str | None,
    output: str,
    mock: bool,
    language: str | None,
) -> None:
    """
    Gera um plano de testes a partir da documentação da API.

    \b
    Exemplos:
      autoapi generate docs.md
      autoapi generate --file api.pdf -o plan.json
      autoapi generate docs.md -p openai -m gpt-4o-mini
    """
    console: Console = ctx.obj["console"]
    json_output: bool = ctx.obj.get("json_output", False)

    try:
        settings = get_settings(ctx)

        # Trocar de provedor sempre volta para os padrões do novo provedor
        if provider and AIProvider(provider) != settings.ai_provider:
            settings = settings.model_copy(update={"ai_base_url": None, "ai_model": None})

        settings = settings.override(
            ai_provider=provider,
            ai_api_key=api_key,
            ai_base_url=ai_base_url,
            ai_model=model,
        )

        config = settings.to_api_config(
            documentation=read_documentation(docs),
            imported_file=load_imported_file(document),
        )
        ai_config = config.ai_config

        generator = TestPlanGenerator(mode="mock" if mock else None, language=language)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(
                f"[cyan]🧠 Gerando plano com {ai_config.provider.value} "
                f"({ai_config.model_name})...[/cyan]"
            )
            plan = generator.generate(config.documentation, config.imported_file, ai_config)

    except AutoAPIError as exc:
        fail(ctx, exc)

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(plan.to_json(), encoding="utf-8")

    if json_output:
        result: dict[str, Any] = {
            "success": True,
            "output": str(output_path),
            "provider": generator.last_provider_used,
            "cases": len(plan.cases),
            "config": plan.config.model_dump(by_alias=True, exclude_none=True),
        }
        ctx.obj["json_console"].print_json(data=result)
        return

    if not plan.cases:
        console.print("[yellow]⚠️  O modelo não gerou nenhum caso de teste[/yellow]")
    else:
        console.print(_cases_table(plan))

    hints = plan.config
    if hints.base_url or hints.auth_token:
        console.print(
            f"[dim]Dicas de configuração: base_url={hints.base_url or '-'}, "
            f"auth_header={hints.auth_header or '-'}[/dim]"
        )
    console.print(f"\n📄 Plano salvo em: [cyan]{output_path}[/cyan]")
