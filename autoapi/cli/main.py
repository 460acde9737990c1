"""
================================================================================
CLI Principal — Entry Point e Configuração
================================================================================

Este módulo define o comando `autoapi` e registra todos os subcomandos.

## Arquitetura:

```
autoapi (grupo principal)
├── generate  → Gera plano de testes a partir da documentação (IA)
├── preview   → Mostra a requisição efetiva de cada caso (sem rede)
├── run       → Executa o plano e classifica PASS/FAIL/ERROR
└── serve     → Inicia o relay HTTP
```

## Flags Globais:

- `--verbose / -v` → Modo verbose (mais detalhes)
- `--quiet / -q` → Modo silencioso (só erros)
- `--json` → Saída estruturada JSON (para CI/CD)
- `--config` → Arquivo de configuração explícito
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from .. import __version__

# Console global para output formatado
console = Console()
error_console = Console(stderr=True)

# Console silencioso (para modo --quiet)
quiet_console = Console(quiet=True)


def setup_logging(verbose: bool, quiet: bool) -> None:
    """Configura logging baseado em flags."""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
        force=True,
    )
    # Bibliotecas de terceiros só aparecem em modo verbose
    for noisy in ("urllib3", "httpx", "LiteLLM", "litellm"):
        logging.getLogger(noisy).setLevel(logging.DEBUG if verbose else logging.WARNING)


# =============================================================================
# GRUPO PRINCIPAL
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="autoapi")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Modo verbose (mostra mais detalhes)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Modo silencioso (suprime banners, mostra só erros)",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Saída estruturada em JSON (para CI/CD)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Arquivo de configuração (padrão: .autoapi/config.yaml)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    json_output: bool,
    config_path: str | None,
) -> None:
    """
    🧪 AutoAPI — testes de API gerados por IA

    Gera casos de teste a partir da documentação da API, aplica
    overrides globais e executa tudo em sequência.

    \b
    Exemplos:
      autoapi generate docs.md -o plan.json      # Gera o plano
      autoapi preview plan.json -H X-Env=qa      # Confere as requisições
      autoapi run plan.json --report report.md   # Executa
      autoapi serve --port 3001                  # Inicia o relay
    """
    setup_logging(verbose, quiet)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["json_output"] = json_output
    ctx.obj["config_path"] = config_path

    if json_output or quiet:
        ctx.obj["console"] = quiet_console
    else:
        ctx.obj["console"] = console

    # Em modo JSON, o resultado estruturado vai sempre para stdout
    ctx.obj["json_console"] = console
    ctx.obj["error_console"] = error_console


# =============================================================================
# IMPORTA E REGISTRA SUBCOMANDOS
# =============================================================================

# Importamos os comandos aqui para evitar imports circulares
from .commands.generate_cmd import generate
from .commands.preview_cmd import preview
from .commands.run_cmd import run
from .commands.serve_cmd import serve

cli.add_command(generate)
cli.add_command(preview)
cli.add_command(run)
cli.add_command(serve)


# =============================================================================
# PONTO DE ENTRADA
# =============================================================================


def main() -> None:
    """Entry point para o comando `autoapi`."""
    cli()


if __name__ == "__main__":
    main()
