"""
Relay HTTP: executa requisições do lado do servidor e devolve um
envelope `{status, statusText, headers, data}`.
"""

from .app import ProxyRequest, create_app, forward, get_app
from .config import RelayConfig

__all__ = ["ProxyRequest", "RelayConfig", "create_app", "forward", "get_app"]
