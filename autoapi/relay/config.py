"""
================================================================================
Configuração do Relay
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class RelayConfig:
    """
    Configuração do servidor relay.

    ## Variáveis de ambiente:

    - `AUTOAPI_RELAY_HOST`: Host (padrão: 127.0.0.1)
    - `AUTOAPI_RELAY_PORT`: Porta (padrão: 3001)
    - `AUTOAPI_RELAY_CORS_ORIGINS`: Origens CORS separadas por vírgula
    - `AUTOAPI_RELAY_TIMEOUT`: Timeout da chamada de saída em segundos
    """

    host: str = "127.0.0.1"
    port: int = 3001
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    timeout: float | None = None

    @classmethod
    def from_env(cls) -> "RelayConfig":
        cors_origins_str = os.environ.get("AUTOAPI_RELAY_CORS_ORIGINS", "*")
        timeout = os.environ.get("AUTOAPI_RELAY_TIMEOUT")
        return cls(
            host=os.environ.get("AUTOAPI_RELAY_HOST", "127.0.0.1"),
            port=int(os.environ.get("AUTOAPI_RELAY_PORT", "3001")),
            cors_origins=[origin.strip() for origin in cors_origins_str.split(",")],
            timeout=float(timeout) if timeout else None,
        )
