# src/pipestep/core/provenance/params.py
"""
Proveniência de parâmetros de Steps.

Cada Step com `params` grava, antes de executar seu trabalho, os
parâmetros usados em `param_file`. Quando um arquivo produzido por esse
Step já existe, o Engine relê o `param_file` e compara com os parâmetros
atuais: assim nenhum output é reaproveitado silenciosamente depois de uma
mudança de parâmetros.

Formato de armazenamento: JSON indentado, chaves ordenadas.

Mapeamento do marcador de ausência (`NOTHING`):
    - ao persistir: `NOTHING` → `{}` (o formato nunca representa NOTHING)
    - ao carregar:  `{}` → `NOTHING`
    - ao comparar:  os dois lados passam pela mesma normalização, de modo
      que `NOTHING` e `{}` nunca geram divergência falsa entre execuções
      com parâmetros default

Steps com `params = None` não persistem nem verificam nada.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pipestep.core.config.hashing import compute_hash
from pipestep.core.exceptions import EngineConfigurationError
from pipestep.core.fs import FileOps
from pipestep.core.pipeline.types import NOTHING

from .diff import ValueDiff, diff_values, values_equal

logger = logging.getLogger(__name__)


def to_storable(value: Any) -> Any:
    """
    Converte um valor de parâmetros para a forma armazenável.

    - `NOTHING` no topo → `{}`
    - entradas `NOTHING` dentro de dicts e listas são descartadas
    - tuplas → listas; sets → listas ordenadas
    - chaves de dict → str
    """
    if value is NOTHING:
        return {}
    if isinstance(value, dict):
        return {str(k): to_storable(v) for k, v in value.items() if v is not NOTHING}
    if isinstance(value, (list, tuple)):
        return [to_storable(v) for v in value if v is not NOTHING]
    if isinstance(value, (set, frozenset)):
        return [to_storable(v) for v in sorted(value, key=repr) if v is not NOTHING]
    return value


def normalize_loaded(value: Any) -> Any:
    """Mapeia um objeto vazio carregado de volta para `NOTHING`."""
    if isinstance(value, dict) and not value:
        return NOTHING
    return value


def render(value: Any) -> str:
    """
    Renderiza parâmetros como JSON indentado e estável.

    Raises:
        ValueError: Floats não finitos (NaN nunca é igual a si mesmo, então
            a verificação falharia em toda reexecução).
        TypeError: Valores sem representação JSON.
    """
    return json.dumps(to_storable(value), indent=2, sort_keys=True, ensure_ascii=False, allow_nan=False) + "\n"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} in stored params")


def parse(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def ensure_storable(step_id: str, label: str, params: Any) -> None:
    """
    Falha cedo quando `params` não pode ser persistido.

    Raises:
        EngineConfigurationError: NaN, infinito ou valor sem forma JSON.
    """
    try:
        render(params)
    except (TypeError, ValueError) as exc:
        raise EngineConfigurationError(
            message=f"Params of step {label} cannot be stored as JSON: {exc}",
            details={"step": step_id, "params": repr(params)},
            hint="Use finite numbers, strings, booleans, lists and dicts in params",
        ) from exc


def _comparable(value: Any) -> Any:
    # mesma forma dos dois lados: render/parse + {} -> NOTHING
    return normalize_loaded(parse(render(value)))


def parameters_match(saved: Any, current: Any) -> bool:
    """
    Compara parâmetros persistidos com os atuais.

    A normalização é aplicada simetricamente: `NOTHING`, `{}` e valores
    equivalentes após serialização (ex.: tuplas vs listas) são iguais.
    """
    a = _comparable(saved)
    b = _comparable(current)
    if a is NOTHING or b is NOTHING:
        return a is b
    return values_equal(a, b)


def params_diff(saved: Any, current: Any) -> ValueDiff:
    """Diff estrutural para diagnóstico (forma armazenável dos dois lados)."""
    return diff_values(parse(render(saved)), parse(render(current)))


def params_hash(value: Any) -> str:
    """SHA-256 da forma armazenável dos parâmetros (rastreabilidade)."""
    return compute_hash(to_storable(value))


def save_params(fs: FileOps, path: str, params: Any) -> None:
    """Persiste `params` em `path`, criando diretórios pais."""
    fs.create_directories(path)
    fs.write_file(path, render(params))
    logger.debug("Saved params to %s", path)


def load_params(fs: FileOps, path: str) -> Any:
    """Carrega parâmetros persistidos, já com `{}` mapeado para `NOTHING`."""
    return normalize_loaded(parse(fs.read_file(path)))
