# src/pipestep/core/provenance/diff.py
"""
Igualdade e diff estruturais de valores de parâmetros.

Os valores comparados aqui já estão na forma armazenável (árvores de
dict/list/escalares, ver `params.to_storable`).

Regras de igualdade (v1):
    - dict: mesmas chaves e valores estruturalmente iguais
    - list: mesmo tamanho, elementos iguais na mesma posição
    - bool nunca é igual a número (`True` != `1`)
    - int e float são comparados numericamente (`1` == `1.0`)
    - demais escalares: `==`

O diff existe para diagnóstico: ele aparece em `ConfigurationMismatchError`
e nos logs, com caminhos no formato `model.layers[0].units`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

_ROOT = "<root>"


def values_equal(a: Any, b: Any) -> bool:
    if isinstance(a, dict) and isinstance(b, dict):
        if set(a) != set(b):
            return False
        return all(values_equal(a[k], b[k]) for k in a)

    if isinstance(a, list) and isinstance(b, list):
        if len(a) != len(b):
            return False
        return all(values_equal(x, y) for x, y in zip(a, b))

    if isinstance(a, (dict, list)) or isinstance(b, (dict, list)):
        return False

    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b

    return a == b


@dataclass(frozen=True)
class ValueDiff:
    """
    Diferença entre os parâmetros atuais e os persistidos.

    Campos (caminho → valor):
        - changed: presente nos dois lados com valores diferentes
          ({"saved": ..., "current": ...})
        - added: presente apenas nos parâmetros atuais
        - deleted: presente apenas nos parâmetros persistidos
    """

    changed: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    added: Dict[str, Any] = field(default_factory=dict)
    deleted: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.changed or self.added or self.deleted)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "changed": dict(self.changed),
            "added": dict(self.added),
            "deleted": dict(self.deleted),
        }

    def __str__(self) -> str:
        if self.is_empty:
            return "no differences"
        lines = []
        for path, pair in self.changed.items():
            lines.append(f"~ {path}: {pair['saved']!r} -> {pair['current']!r}")
        for path, value in self.added.items():
            lines.append(f"+ {path}: {value!r}")
        for path, value in self.deleted.items():
            lines.append(f"- {path}: {value!r}")
        return "\n".join(lines)


def _child(path: str, key: Any) -> str:
    if isinstance(key, int):
        return f"{'' if path == _ROOT else path}[{key}]"
    return str(key) if path == _ROOT else f"{path}.{key}"


def _walk(saved: Any, current: Any, path: str, out: ValueDiff) -> None:
    if isinstance(saved, dict) and isinstance(current, dict):
        for key in sorted(set(saved) | set(current), key=str):
            sub = _child(path, key)
            if key not in saved:
                out.added[sub] = current[key]
            elif key not in current:
                out.deleted[sub] = saved[key]
            else:
                _walk(saved[key], current[key], sub, out)
        return

    if isinstance(saved, list) and isinstance(current, list):
        for i in range(max(len(saved), len(current))):
            sub = _child(path, i)
            if i >= len(saved):
                out.added[sub] = current[i]
            elif i >= len(current):
                out.deleted[sub] = saved[i]
            else:
                _walk(saved[i], current[i], sub, out)
        return

    if not values_equal(saved, current):
        out.changed[path] = {"saved": saved, "current": current}


def diff_values(saved: Any, current: Any) -> ValueDiff:
    """Diff estrutural de `saved` para `current` (ambos em forma armazenável)."""
    out = ValueDiff()
    _walk(saved, current, _ROOT, out)
    return out
