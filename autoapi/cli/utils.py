"""
================================================================================
Utilitários do CLI
================================================================================

Funções auxiliares compartilhadas entre os comandos do CLI.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, NoReturn

import click
from pydantic import ValidationError
from rich.console import Console

from ..config import AutoAPISettings, load_settings
from ..errors import AutoAPIError, ConfigurationError
from ..models import GeneratedTestPlan, ImportedFile


def get_settings(ctx: click.Context) -> AutoAPISettings:
    """
    Carrega a configuração (YAML do workspace ou `--config`, + ambiente).

    `verbose: true` no YAML (ou AUTOAPI_VERBOSE) liga os logs de debug,
    como `-v`, exceto em modo `--quiet`.
    """
    settings = load_settings(ctx.obj.get("config_path"))
    if settings.verbose and not ctx.obj.get("quiet"):
        ctx.obj["verbose"] = True
        logging.getLogger().setLevel(logging.DEBUG)
    return settings


def print_json_error(
    console: Console,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> None:
    """Imprime erro em formato JSON estruturado."""
    error_obj: dict[str, Any] = {
        "success": False,
        "error": {
            "code": code,
            "message": message,
        },
    }
    if details:
        error_obj["error"]["details"] = details
    console.print_json(data=error_obj)


def fail(ctx: click.Context, exc: AutoAPIError) -> NoReturn:
    """Reporta um erro do AutoAPI (rich ou JSON) e encerra com código 1."""
    error_console: Console = ctx.obj["error_console"]
    if ctx.obj.get("json_output"):
        data = exc.to_dict()
        details = {k: v for k, v in data.items() if k not in ("code", "message") and v is not None}
        print_json_error(error_console, exc.code, exc.message, details or None)
    else:
        error_console.print(f"[red]❌ {exc.message}[/red]")
        if exc.suggestion:
            error_console.print(f"[dim]💡 {exc.suggestion}[/dim]")
    raise SystemExit(1)


def parse_key_values(values: Iterable[str], option_name: str) -> dict[str, str]:
    """
    Converte `("K=V", ...)` em dict, preservando a ordem.

    ## Exemplo:
        >>> parse_key_values(["X-Env=staging", "page=1"], "--header")
        {'X-Env': 'staging', 'page': '1'}
    """
    parsed: dict[str, str] = {}
    for raw in values:
        key, sep, value = raw.partition("=")
        key = key.strip()
        if not sep or not key:
            raise click.BadParameter(f"esperado CHAVE=VALOR, recebido {raw!r}", param_hint=option_name)
        parsed[key] = value
    return parsed


def read_documentation(paths: Iterable[str]) -> str:
    """Lê e concatena arquivos de documentação em texto."""
    parts = []
    for path in paths:
        try:
            parts.append(Path(path).read_text(encoding="utf-8"))
        except UnicodeDecodeError as exc:
            raise ConfigurationError(
                f"{path} não é um arquivo de texto UTF-8",
                suggestion="Use --file para documentos binários (ex: PDF)",
            ) from exc
    return "\n\n".join(part.strip() for part in parts if part.strip())


def load_imported_file(path: str | None) -> ImportedFile | None:
    """Carrega um arquivo para envio ao modelo (base64)."""
    if not path:
        return None
    return ImportedFile.from_path(path)


def load_plan(path: str) -> GeneratedTestPlan:
    """
    Carrega um plano salvo por `autoapi generate`.

    ## Erros:
        ConfigurationError: JSON inválido ou estrutura incompatível
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        return GeneratedTestPlan.from_json(text)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Plano inválido em {path}: {exc.error_count()} erro(s)",
            suggestion="Gere o plano novamente com `autoapi generate`",
        ) from exc


def format_duration(ms: int) -> str:
    """
    Formata duração em milissegundos para string legível.

    ## Exemplos:
        - 50 → "50ms"
        - 1500 → "1.5s"
        - 65000 → "1m 5s"
    """
    if ms < 1000:
        return f"{ms}ms"

    seconds = ms / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes = int(seconds // 60)
    remaining_seconds = int(seconds % 60)
    return f"{minutes}m {remaining_seconds}s"


def format_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def target_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Opções compartilhadas por `run` e `preview`: alvo da API, autenticação
    e overrides globais.
    """
    options = [
        click.option("--base-url", "-u", type=str, help="URL base da API testada"),
        click.option("--auth-token", "-t", type=str, help="Token de autenticação"),
        click.option("--auth-header", type=str, help="Header do token (padrão: Authorization)"),
        click.option(
            "--header", "-H", "headers", multiple=True, metavar="K=V",
            help="Header global (repetível; vence o header do caso)",
        ),
        click.option(
            "--query", "-Q", "query_params", multiple=True, metavar="K=V",
            help="Query param global (repetível)",
        ),
        click.option(
            "--body-param", "-B", "body_params", multiple=True, metavar="K=V",
            help="Campo global de body (repetível; só POST/PUT/PATCH/DELETE)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def apply_target_options(
    settings: AutoAPISettings,
    *,
    base_url: str | None,
    auth_token: str | None,
    auth_header: str | None,
    headers: tuple[str, ...],
    query_params: tuple[str, ...],
    body_params: tuple[str, ...],
    **extra: Any,
) -> AutoAPISettings:
    """Sobrepõe as flags da CLI à configuração carregada."""
    return settings.override(
        base_url=base_url,
        auth_token=auth_token,
        auth_header=auth_header,
        global_headers=_merge(settings.global_headers, parse_key_values(headers, "--header")),
        global_query_params=_merge(
            settings.global_query_params, parse_key_values(query_params, "--query")
        ),
        global_body_params=_merge(
            settings.global_body_params, parse_key_values(body_params, "--body-param")
        ),
        **extra,
    )


def _merge(base: dict[str, str], extra: dict[str, str]) -> dict[str, str] | None:
    if not extra:
        return None
    return {**base, **extra}
