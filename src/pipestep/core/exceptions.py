# src/pipestep/core/exceptions.py
"""
Pipestep — Canonical Exceptions (v1)

Este módulo define as exceções tipadas levantadas pelo Engine durante
a execução guardada (guarded execution) de Steps.

A taxonomia separa duas famílias:

- `PreconditionError`: falhas de preparação corrigíveis pelo usuário
  (arquivo obrigatório ausente, produtor incorreto, parâmetros divergentes).
  O Engine remove o sentinel antes de propagar essas falhas, para que o
  pipeline possa ser reexecutado depois da correção sem limpeza manual.
- Qualquer outra exceção: opaca, específica do Step. O sentinel permanece
  no filesystem, exigindo inspeção manual de saídas parciais.

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- A mensagem sempre nomeia o Step e o caminho envolvido.
- Nenhuma exceção deste módulo é tratada com retry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True, eq=False)
class PipestepException(Exception):
    """Base class para exceções internas do Pipestep.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta, humana e nomear o Step envolvido
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Pré-condições (sentinel removido antes da propagação)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class PreconditionError(PipestepException):
    """Falha de preparação do pipeline, corrigível pelo usuário."""


@dataclass(frozen=True, eq=False)
class MissingInputError(PreconditionError):
    """Arquivo obrigatório ausente e nenhum Step produtor declarado."""


@dataclass(frozen=True, eq=False)
class ProducerMismatchError(PreconditionError):
    """O produtor declarado não lista o arquivo esperado em `outputs`."""


@dataclass(frozen=True, eq=False)
class ConfigurationMismatchError(PreconditionError):
    """Parâmetros persistidos divergem dos parâmetros em vigor.

    `details` sempre contém `saved`, `current` e `diff`.
    """


@dataclass(frozen=True, eq=False)
class UnknownProducerError(PreconditionError):
    """Um Step referencia um produtor que não está no registry."""


@dataclass(frozen=True, eq=False)
class EngineConfigurationError(PreconditionError):
    """Step declarado de forma inconsistente (ex.: params sem param_file)."""


# ---------------------------------------------------------------------------
# Espera / concorrência
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class StaleSentinelError(PreconditionError):
    """O sentinel de outro executor deixou de ser atualizado.

    Tratada como pré-condição: os Steps a jusante ainda não escreveram
    nada, então seus sentinels são removidos e apenas o sentinel morto
    permanece para inspeção.

    Levantada apenas quando `stale_after_seconds` está configurado; sem
    esse limite o waiter bloqueia indefinidamente.
    """


__all__ = [
    "PipestepException",
    "PreconditionError",
    "MissingInputError",
    "ProducerMismatchError",
    "ConfigurationMismatchError",
    "UnknownProducerError",
    "EngineConfigurationError",
    "StaleSentinelError",
]
