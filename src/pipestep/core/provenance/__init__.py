"""
Proveniência de configuração: persistência, comparação e diff dos
parâmetros usados para produzir os outputs de cada Step.
"""

from .diff import ValueDiff, diff_values, values_equal
from .params import (
    ensure_storable,
    load_params,
    normalize_loaded,
    parameters_match,
    params_diff,
    params_hash,
    parse,
    render,
    save_params,
    to_storable,
)

__all__ = [
    "ValueDiff",
    "diff_values",
    "values_equal",
    "ensure_storable",
    "load_params",
    "normalize_loaded",
    "parameters_match",
    "params_diff",
    "params_hash",
    "parse",
    "render",
    "save_params",
    "to_storable",
]
