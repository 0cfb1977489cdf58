# src/pipestep/core/config/merge.py
"""
Deep-merge de configuração do Engine (defaults + override local).

Política de merge (v1):
    - dict → merge recursivo por chave
    - list → sobrescrita total (sem merge elemento a elemento)
    - None no override → sobrescreve (desliga opções como `stale_after_seconds`)
    - escalar → sobrescrita direta, exigindo mesmo tipo (int/float são compatíveis)
    - conflito de tipos → `ConfigTypeConflictError`

O merge é puramente funcional: nenhum input é mutado.
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError

_NUMERIC = (int, float)


def _compatible(base_value: Any, override_value: Any) -> bool:
    if base_value is None or override_value is None:
        return True
    if isinstance(base_value, bool) or isinstance(override_value, bool):
        return type(base_value) is type(override_value)
    if isinstance(base_value, _NUMERIC) and isinstance(override_value, _NUMERIC):
        return True
    return type(base_value) is type(override_value)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any], *, _path: str = "") -> Dict[str, Any]:
    """
    Realiza um deep-merge determinístico entre dois dicionários de configuração.

    Args:
        base (Dict[str, Any]): Configuração base (ex.: defaults).
        override (Dict[str, Any]): Overrides explícitos da configuração.

    Returns:
        Dict[str, Any]: Nova configuração resultante do deep-merge.

    Raises:
        ConfigTypeConflictError: Se ocorrer conflito de tipo entre base e override.
            A mensagem inclui o caminho pontilhado da chave (ex.: `engine.max_workers`).
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep merge requires dicts at the root, got: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        dotted = f"{_path}.{key}" if _path else str(key)

        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value, _path=dotted)
            continue

        if isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        if not _compatible(base_value, override_value):
            raise ConfigTypeConflictError(
                f"Type conflict at key '{dotted}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        result[key] = deepcopy(override_value)

    return result
