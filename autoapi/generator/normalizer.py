"""
================================================================================
NORMALIZAÇÃO DA RESPOSTA DA IA
================================================================================

Recupera um GeneratedTestPlan a partir do texto que o modelo devolveu.

## Para todos entenderem:

Mesmo pedindo "só JSON", os modelos às vezes:
- embrulham a resposta em ```json ... ```
- devolvem `body` e `headers` como strings JSON (é o que pedimos!)
  ou como objetos (alguns modelos ignoram o pedido)
- esquecem o `id` de um caso

## Pipeline em duas etapas:

```
texto bruto
   │
   ▼  ETAPA 1: strip_code_fence + parse_plan_json
   │  (falhou? GenerationError; só resta pedir de novo ao modelo)
   ▼
dict
   │
   ▼  ETAPA 2: normalize_case para cada item de "cases"
   │  (body/headers inválidos viram None; caso inválido é descartado)
   ▼
GeneratedTestPlan
```

Separar as etapas deixa claro, no diagnóstico, QUAL delas falhou.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from ..errors import GenerationError
from ..models import GeneratedTestPlan, PlanConfigHints, TestCase, new_entry_id

logger = logging.getLogger(__name__)

# ``` ou ```json (qualquer tag de linguagem) no início; ``` no fim
_FENCE_START = re.compile(r"^```[\w-]*[ \t]*\n?")
_FENCE_END = re.compile(r"\n?```$")

_REQUIRED_CASE_FIELDS = ("method", "endpoint", "expectedStatus")


# =============================================================================
# ETAPA 1: REMOVER CERCAS E PARSEAR
# =============================================================================


def strip_code_fence(text: str) -> str:
    """
    Remove um bloco de código Markdown que envolve a resposta.

    ## Exemplo:
        >>> strip_code_fence('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    if not text:
        return ""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_START.sub("", cleaned, count=1)
        cleaned = _FENCE_END.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_plan_json(raw_text: str) -> dict[str, Any]:
    """
    Etapa 1: remove cercas Markdown e faz o parse do JSON.

    ## Erros:
        GenerationError(stage="parse"): se não for JSON válido ou se o
        topo não for um objeto
    """
    cleaned = strip_code_fence(raw_text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.debug("Saída do modelo não é JSON: %r", raw_text[:500])
        raise GenerationError(
            f"O modelo não retornou um JSON válido: {exc}",
            stage="parse",
            suggestion="Tente gerar novamente",
        ) from exc

    if not isinstance(data, dict):
        raise GenerationError(
            "O modelo retornou JSON, mas o topo não é um objeto {config, cases}",
            stage="parse",
            suggestion="Tente gerar novamente",
        )
    return data


# =============================================================================
# ETAPA 2: NORMALIZAR CADA CASO
# =============================================================================


def soft_decode(value: Any) -> Any:
    """
    Decodifica um campo que pode vir como string JSON ou já estruturado.

    Strings que não são JSON válido lançam ValueError (o chamador decide
    o que fazer); qualquer outro valor passa intacto.
    """
    if isinstance(value, str):
        return json.loads(value)
    return value


def _decode_body(item: dict[str, Any], case_ref: str) -> Any:
    raw = item.get("body")
    if not raw:
        return None
    try:
        body = soft_decode(raw)
    except ValueError:
        logger.warning("Body inválido no caso %s, ignorando: %r", case_ref, raw)
        return None
    if isinstance(body, dict) and not body:
        return None
    return body


def _decode_headers(item: dict[str, Any], case_ref: str) -> dict[str, str] | None:
    raw = item.get("headers")
    if not raw:
        return None
    try:
        headers = soft_decode(raw)
    except ValueError:
        logger.warning("Headers inválidos no caso %s, ignorando: %r", case_ref, raw)
        return None
    if not isinstance(headers, dict):
        logger.warning("Headers do caso %s não são um objeto, ignorando", case_ref)
        return None
    return {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in headers.items()}


def normalize_case(item: Any, index: int) -> TestCase:
    """
    Converte um item de `cases` em TestCase.

    ## Regras:
        - body/headers: string JSON ou valor estruturado; falha → None
        - body `{}` → None
        - id ausente → "TC-" + identificador aleatório
        - method, endpoint e expectedStatus são obrigatórios

    ## Erros:
        GenerationError(stage="case"): item sem os campos mínimos
    """
    if not isinstance(item, dict):
        raise GenerationError(
            f"Caso #{index + 1} não é um objeto JSON",
            stage="case",
        )

    case_ref = str(item.get("id") or f"#{index + 1}")
    missing = [
        name
        for name in _REQUIRED_CASE_FIELDS
        if item.get(name) is None and item.get(_snake(name)) is None
    ]
    if missing:
        raise GenerationError(
            f"Caso {case_ref} sem campos obrigatórios: {', '.join(missing)}",
            stage="case",
        )

    data = {
        "id": item.get("id") or f"TC-{new_entry_id()}",
        "title": _text(item.get("title")),
        "description": _text(item.get("description")),
        "method": item.get("method"),
        "endpoint": item.get("endpoint"),
        "expected_status": item.get("expectedStatus", item.get("expected_status")),
        "headers": _decode_headers(item, case_ref),
        "body": _decode_body(item, case_ref),
    }
    try:
        return TestCase.model_validate(data)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise GenerationError(f"Caso {case_ref} inválido: {errors}", stage="case") from exc


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _hint(raw: dict[str, Any], camel: str) -> str | None:
    value = raw.get(camel)
    if value is None:
        value = raw.get(_snake(camel))
    # Só escalares viram dica; objetos e listas são descartados
    if isinstance(value, (dict, list)) or value is None:
        return None
    return _text(value) or None


def _config_hints(data: dict[str, Any]) -> PlanConfigHints:
    raw = data.get("config")
    if not isinstance(raw, dict):
        return PlanConfigHints()
    return PlanConfigHints(
        base_url=_hint(raw, "baseUrl"),
        auth_header=_hint(raw, "authHeader"),
        auth_token=_hint(raw, "authToken"),
    )


def normalize(raw_text: str) -> GeneratedTestPlan:
    """
    Converte o texto bruto do modelo em um GeneratedTestPlan.

    Um caso inválido é descartado (com aviso no log) e os demais seguem.

    ## Parâmetros:
        raw_text: Texto devolvido pelo provedor de IA

    ## Retorna:
        GeneratedTestPlan com as dicas de config e os casos normalizados

    ## Erros:
        GenerationError: JSON irrecuperável, ou nenhum caso aproveitável
        em uma lista de casos não vazia
    """
    data = parse_plan_json(raw_text)

    raw_cases = data.get("cases") or []
    if not isinstance(raw_cases, list):
        raise GenerationError("Campo 'cases' deveria ser uma lista", stage="parse")

    cases: list[TestCase] = []
    rejected: list[GenerationError] = []
    for i, item in enumerate(raw_cases):
        try:
            cases.append(normalize_case(item, i))
        except GenerationError as exc:
            logger.warning("Caso descartado: %s", exc.message)
            rejected.append(exc)

    if raw_cases and not cases:
        raise GenerationError(
            f"Nenhum dos {len(raw_cases)} casos gerados é válido: {rejected[0].message}",
            stage="case",
            suggestion="Tente gerar novamente",
        )

    return GeneratedTestPlan(config=_config_hints(data), cases=cases)
