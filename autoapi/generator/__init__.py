"""
Geração de planos de teste: orquestração (`llm`) e normalização da
resposta do modelo (`normalizer`).
"""

from .llm import TestPlanGenerator, generate_test_plan
from .normalizer import normalize, normalize_case, parse_plan_json, strip_code_fence

__all__ = [
    "TestPlanGenerator",
    "generate_test_plan",
    "normalize",
    "normalize_case",
    "parse_plan_json",
    "strip_code_fence",
]
