"""
================================================================================
Comando: autoapi preview — Requisições Efetivas
================================================================================

Mostra, sem tocar a rede, exatamente o que `autoapi run` enviaria para
cada caso: URL final, headers e body depois dos overrides globais.

```bash
autoapi preview plan.json -H Authorization="Bearer x" -Q page=1
```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.markup import escape

from ...composer import compute_effective_request
from ...errors import AutoAPIError
from ..utils import apply_target_options, fail, format_json, get_settings, load_plan, target_options


@click.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False))
@target_options
@click.pass_context
def preview(ctx: click.Context, plan_file: str, **target: Any) -> None:
    """
    Mostra a requisição efetiva de cada caso (sem executar).
    """
    console: Console = ctx.obj["console"]
    json_output: bool = ctx.obj.get("json_output", False)

    try:
        plan = load_plan(plan_file)
        settings = apply_target_options(get_settings(ctx), **target)
    except AutoAPIError as exc:
        fail(ctx, exc)

    config = settings.to_api_config()
    config.apply_plan_hints(plan.config)

    previews = [(case, compute_effective_request(case, config)) for case in plan.cases]

    if json_output:
        ctx.obj["json_console"].print_json(
            data=[
                {
                    "id": case.id,
                    "method": req.method,
                    "url": req.url,
                    "headers": req.headers,
                    "body": req.body,
                    "expectedStatus": case.expected_status,
                }
                for case, req in previews
            ]
        )
        return

    console.print(f"📄 [cyan]{Path(plan_file).name}[/cyan]: {len(previews)} casos\n")
    for case, req in previews:
        content = f"[bold]{req.method}[/bold] {escape(req.url)}\n\n[dim]Headers[/dim]\n{escape(format_json(req.headers))}"
        if req.body is not None:
            content += f"\n\n[dim]Body[/dim]\n{escape(format_json(req.body))}"
        console.print(Panel(
            content,
            title=f"{case.id} · {case.title}",
            subtitle=f"esperado {case.expected_status}",
            border_style="cyan",
        ))
