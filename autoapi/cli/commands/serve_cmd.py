"""
================================================================================
Comando: autoapi serve — Inicia o Relay
================================================================================

Sobe o relay HTTP que executa requisições do lado do servidor.

## Uso:

```bash
autoapi serve                     # http://127.0.0.1:3001
autoapi serve --port 8080
autoapi serve --host 0.0.0.0 --reload
```

## Endpoints:

- POST /proxy       - Executa a requisição descrita e devolve o envelope
- POST /api/proxy   - Mesmo contrato (caminho padrão do dispatcher)
- GET  /health      - Health check
"""

from __future__ import annotations

import os

import click
import uvicorn
from rich.console import Console
from rich.panel import Panel


@click.command()
@click.option(
    "--host",
    type=str,
    default="127.0.0.1",
    show_default=True,
    help="Host para bind do servidor",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=3001,
    show_default=True,
    help="Porta do servidor",
)
@click.option("--reload", is_flag=True, help="Modo desenvolvimento com auto-reload")
@click.option("--timeout", type=float, help="Timeout da chamada de saída em segundos")
@click.pass_context
def serve(
    ctx: click.Context,
    host: str,
    port: int,
    reload: bool,
    timeout: float | None,
) -> None:
    """
    🚀 Inicia o relay HTTP.

    Use com `autoapi run --proxy --proxy-url http://HOST:PORT/proxy`.
    """
    console: Console = ctx.obj.get("console", Console())
    quiet = ctx.obj.get("quiet", False)
    verbose = ctx.obj.get("verbose", False)

    # A app é criada pela factory no processo do uvicorn; a config vai por ambiente
    os.environ["AUTOAPI_RELAY_HOST"] = host
    os.environ["AUTOAPI_RELAY_PORT"] = str(port)
    if timeout is not None:
        os.environ["AUTOAPI_RELAY_TIMEOUT"] = str(timeout)

    if not quiet:
        _print_banner(console, host, port, reload)

    try:
        uvicorn.run(
            "autoapi.relay.app:get_app",
            host=host,
            port=port,
            reload=reload,
            factory=True,
            log_level="debug" if verbose else "info",
        )
    except OSError as exc:
        console.print(f"[red]Erro ao iniciar o relay:[/red] {exc}")
        raise SystemExit(1)


def _print_banner(console: Console, host: str, port: int, reload: bool) -> None:
    """Imprime banner de início do servidor."""
    mode = "🔧 Development" if reload else "🚀 Production"
    access_url = f"http://localhost:{port}" if host == "0.0.0.0" else f"http://{host}:{port}"

    banner = f"""
[bold cyan]🧪 AutoAPI Relay[/bold cyan]

[bold]Mode:[/bold] {mode}

[bold green]Endpoints:[/bold green]
  • Proxy:    {access_url}/proxy
  • Proxy:    {access_url}/api/proxy
  • Health:   {access_url}/health

[dim]Pressione Ctrl+C para encerrar[/dim]
"""

    console.print(Panel(
        banner.strip(),
        border_style="cyan",
        padding=(0, 2),
    ))
