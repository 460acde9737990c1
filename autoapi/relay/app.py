"""
================================================================================
Relay HTTP (FastAPI)
================================================================================

Executa, do lado do servidor, a requisição descrita pelo cliente e
devolve o resultado em um envelope JSON. Serve para contornar CORS
quando o cliente roda em um navegador.

## Contrato:

```
POST /proxy  (ou /api/proxy)
  {"targetUrl": "...", "method": "GET", "headers": {...}, "body": ...}

200 → {"status": 404, "statusText": "Not Found", "headers": {...}, "data": ...}
502 → {"status": 0, "statusText": "Proxy Network Error", "error": "...", "data": null}
```

Status 4xx/5xx da API alvo NÃO são erros do relay: voltam com HTTP 200
e o status real dentro do envelope.

## Via CLI:

```bash
autoapi serve --port 3001
```
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

import requests
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .. import __version__
from .config import RelayConfig

logger = logging.getLogger(__name__)

PROXY_NETWORK_ERROR = "Proxy Network Error"


class ProxyRequest(BaseModel):
    """Descrição da requisição a ser executada pelo relay."""

    model_config = ConfigDict(populate_by_name=True)

    target_url: str = Field(alias="targetUrl", min_length=1)
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None


def _encode_body(body: Any) -> str | None:
    if body is None:
        return None
    if isinstance(body, str):
        return body
    return json.dumps(body, ensure_ascii=False)


def _decode_data(response: requests.Response) -> Any:
    """JSON quando o corpo for JSON válido; senão o texto bruto."""
    if not response.content:
        return ""
    try:
        return response.json()
    except ValueError:
        return response.text


def forward(payload: ProxyRequest, timeout: float | None = None) -> JSONResponse:
    """
    Executa a requisição descrita e monta o envelope de resposta.

    Nunca levanta exceção para falhas de rede: elas viram HTTP 502.
    """
    method = payload.method.upper()
    logger.info("[relay] %s -> %s", method, payload.target_url)

    data = _encode_body(payload.body)
    try:
        response = requests.request(
            method,
            payload.target_url,
            headers=payload.headers,
            data=data.encode("utf-8") if data is not None else None,
            timeout=timeout,
        )
    except requests.RequestException as exc:
        logger.warning("[relay] falha de rede em %s: %s", payload.target_url, exc)
        failed = getattr(exc, "response", None)
        return JSONResponse(
            status_code=502,
            content={
                "status": 0,
                "statusText": PROXY_NETWORK_ERROR,
                "error": str(exc),
                "data": _decode_data(failed) if failed is not None else None,
            },
        )

    return JSONResponse(
        status_code=200,
        content={
            "status": response.status_code,
            "statusText": response.reason or "",
            "headers": {k.lower(): v for k, v in response.headers.items()},
            "data": _decode_data(response),
        },
    )


def create_app(config: RelayConfig | None = None) -> FastAPI:
    """
    Cria a aplicação do relay.

    ## Parâmetros:

    - `config`: Configuração do relay. Se None, usa valores de ambiente.
    """
    if config is None:
        config = RelayConfig.from_env()

    app = FastAPI(
        title="AutoAPI Relay",
        description="Relay HTTP para execução de casos de teste sem restrições de CORS.",
        version=__version__,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Handlers síncronos: o FastAPI os executa em threadpool
    @app.post("/proxy", tags=["Relay"])
    def proxy(payload: ProxyRequest) -> JSONResponse:  # pyright: ignore[reportUnusedFunction]
        return forward(payload, timeout=config.timeout)

    @app.post("/api/proxy", tags=["Relay"])
    def api_proxy(payload: ProxyRequest) -> JSONResponse:  # pyright: ignore[reportUnusedFunction]
        return forward(payload, timeout=config.timeout)

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, Any]:  # pyright: ignore[reportUnusedFunction]
        """Health check."""
        return {
            "status": "healthy",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


def get_app() -> FastAPI:
    """
    Retorna instância da app para uso com uvicorn.

    ```bash
    uvicorn autoapi.relay.app:get_app --factory --reload
    ```
    """
    return create_app()
