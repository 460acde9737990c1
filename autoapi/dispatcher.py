"""
================================================================================
DISPATCHER — EXECUTA UM CASO DE TESTE
================================================================================

Envia a requisição efetiva de um caso de teste e classifica o desfecho.

## Para todos entenderem:

Existem dois caminhos para chegar na API testada:

```
  Modo direto:   AutoAPI ───────────────────────────> API alvo

  Modo relay:    AutoAPI ──> Relay (/api/proxy) ────> API alvo
                         <── {status, data, ...} <───
```

O relay existe porque, em um navegador, chamadas diretas para outra
origem esbarram em CORS. O relay faz a chamada do lado do servidor e
devolve um "envelope" com o resultado.

## Classificação:

| Situação                                   | Status | actual_status |
|--------------------------------------------|--------|---------------|
| Resposta com o status esperado             | PASS   | status real   |
| Resposta com outro status                  | FAIL   | status real   |
| Rede, DNS, relay ausente, envelope inválido| ERROR  | 0             |

FAIL é uma falha de assertion. ERROR é uma falha de infraestrutura.

## Garantia:

`execute_test_case()` NUNCA lança exceção: todo caminho devolve um
TestResult bem formado. Uma tentativa por caso, sem retry.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any

import requests

from .composer import EffectiveRequest, compute_effective_request
from .errors import RelayError
from .models import ApiConfig, ResultStatus, TestCase, TestResult

logger = logging.getLogger(__name__)

# Relay "na nuvem" (mesma origem). Um relay local normalmente é
# http://localhost:3001/proxy, iniciado com `autoapi serve`.
DEFAULT_PROXY_URL = "/api/proxy"

# Status do relay que indicam relay ausente ou mal configurado
RELAY_FAILURE_STATUSES = frozenset({502, 404})

GENERIC_NETWORK_ERROR = "Erro de rede (possível problema de CORS ou de conectividade)"


def utc_timestamp() -> str:
    """Instante atual em ISO-8601 UTC com milissegundos (ex: 2024-01-01T12:00:00.000Z)."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _read_body(response: requests.Response) -> Any:
    """JSON quando o content-type indica JSON (com fallback para texto); senão texto."""
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text


def _send_direct(
    request: EffectiveRequest,
    session: requests.Session,
    timeout: float | None,
) -> tuple[int, Any]:
    """Envia a requisição direto para a API alvo."""
    data = None
    if request.body is not None:
        data = json.dumps(request.body, ensure_ascii=False).encode("utf-8")

    response = session.request(
        request.method,
        request.url,
        headers=request.headers,
        data=data,
        timeout=timeout,
    )
    return response.status_code, _read_body(response)


def _send_via_relay(
    request: EffectiveRequest,
    proxy_url: str,
    session: requests.Session,
    timeout: float | None,
) -> tuple[int, Any]:
    """
    Encaminha a descrição da requisição para o relay.

    ## Contrato:
        POST <proxy_url>  {targetUrl, method, headers, body}
        200 → {status, statusText, headers, data}
        502 → {status: 0, statusText, error, data}
    """
    payload: dict[str, Any] = {
        "targetUrl": request.url,
        "method": request.method,
        "headers": request.headers,
    }
    if request.body is not None:
        payload["body"] = request.body

    response = session.post(
        proxy_url,
        json=payload,
        headers={"Content-Type": "application/json"},
        timeout=timeout,
    )

    if response.status_code in RELAY_FAILURE_STATUSES:
        try:
            envelope = response.json()
        except ValueError:
            envelope = None
        error = envelope.get("error") if isinstance(envelope, dict) else None
        raise RelayError(
            str(error)
            if error
            else f"Proxy Error (o agente local está em execução?): {response.reason}"
        )

    try:
        envelope = response.json()
    except ValueError as exc:
        raise RelayError(f"Resposta do relay não é JSON: {exc}") from exc

    if not isinstance(envelope, dict):
        raise RelayError("Envelope do relay malformado: esperado um objeto JSON")

    status = envelope.get("status")
    if not isinstance(status, int) or isinstance(status, bool):
        raise RelayError("Envelope do relay malformado: campo 'status' ausente ou inválido")

    return status, envelope.get("data")


def execute_test_case(
    test_case: TestCase,
    config: ApiConfig,
    *,
    session: requests.Session | None = None,
    timeout: float | None = None,
) -> TestResult:
    """
    Executa UM caso de teste e devolve o resultado.

    ## Parâmetros:
        test_case: Caso de teste a executar
        config: Snapshot da configuração (não é alterado)
        session: Sessão `requests` (opcional; criada e fechada aqui se None)
        timeout: Timeout em segundos (None = padrão do transporte)

    ## Retorna:
        TestResult com PASS, FAIL ou ERROR. Nunca lança exceção.
    """
    start = time.perf_counter()
    own_session = session is None
    http = session or requests.Session()

    try:
        request = compute_effective_request(test_case, config)

        if config.use_server_proxy:
            proxy_url = config.proxy_url or DEFAULT_PROXY_URL
            logger.debug(
                "[relay %s] %s %s", proxy_url, request.method, request.url
            )
            actual_status, response_body = _send_via_relay(request, proxy_url, http, timeout)
        else:
            logger.debug("[direto] %s %s", request.method, request.url)
            actual_status, response_body = _send_direct(request, http, timeout)

        status = (
            ResultStatus.PASS
            if actual_status == test_case.expected_status
            else ResultStatus.FAIL
        )
        return TestResult(
            test_case_id=test_case.id,
            status=status,
            actual_status=actual_status,
            latency_ms=round((time.perf_counter() - start) * 1000),
            response_body=response_body,
            timestamp=utc_timestamp(),
        )

    except Exception as exc:
        message = str(exc) or GENERIC_NETWORK_ERROR
        logger.warning("Caso %s terminou em ERROR: %s", test_case.id, message)
        return TestResult(
            test_case_id=test_case.id,
            status=ResultStatus.ERROR,
            actual_status=0,
            latency_ms=round((time.perf_counter() - start) * 1000),
            response_body=None,
            error_message=message,
            timestamp=utc_timestamp(),
        )

    finally:
        if own_session:
            http.close()
