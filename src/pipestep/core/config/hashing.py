# src/pipestep/core/config/hashing.py
"""
Hashing canônico de valores estruturados do Pipestep.

Usado para dois fins:
    - identidade da configuração resolvida do Engine (registrada no trace)
    - identidade dos parâmetros persistidos de cada Step (`params_sha256`)

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256, string hexadecimal de 64 caracteres

O hash não substitui a comparação estrutural de parâmetros: ele existe
apenas para rastreabilidade. A verificação de proveniência continua sendo
feita por igualdade estrutural em `pipestep.core.provenance`.
"""

import hashlib
import json
from typing import Any, Dict


def canonical_json(value: Any) -> str:
    """Serialização JSON determinística (independente da ordem das chaves)."""
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def compute_hash(value: Any) -> str:
    """
    Gera um SHA-256 determinístico de qualquer valor JSON-serializável.

    Raises:
        TypeError: Se o valor não for serializável em JSON.
    """
    return hashlib.sha256(canonical_json(value).encode("utf-8")).hexdigest()


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera o hash da configuração efetiva do Engine.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )
    return compute_hash(config)
