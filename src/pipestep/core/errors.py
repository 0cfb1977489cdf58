"""
Pipestep — Canonical Error Structures (v1)

Este módulo define o payload canônico de erro do Pipestep e o mapeamento
de exceções para esse payload. O payload é o que fica registrado no
ExecutionTrace quando um Step falha, de modo que a proveniência de cada
arquivo de saída seja depurável apenas a partir do registro de erro.

Erros devem ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .exceptions import (
    ConfigurationMismatchError,
    EngineConfigurationError,
    MissingInputError,
    PipestepException,
    PreconditionError,
    ProducerMismatchError,
    StaleSentinelError,
    UnknownProducerError,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do Pipestep.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - sentinel_cleared: indica se o Engine removeu o sentinel do Step
      (False significa que saídas parciais exigem inspeção manual)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    sentinel_cleared: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

MISSING_INPUT = "MISSING_INPUT"
PRODUCER_MISMATCH = "PRODUCER_MISMATCH"
CONFIGURATION_MISMATCH = "CONFIGURATION_MISMATCH"
UNKNOWN_PRODUCER = "UNKNOWN_PRODUCER"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"
STALE_SENTINEL = "STALE_SENTINEL"
STEP_EXECUTION_ERROR = "STEP_EXECUTION_ERROR"

_CATALOG = {
    MissingInputError: MISSING_INPUT,
    ProducerMismatchError: PRODUCER_MISMATCH,
    ConfigurationMismatchError: CONFIGURATION_MISMATCH,
    UnknownProducerError: UNKNOWN_PRODUCER,
    EngineConfigurationError: ENGINE_CONFIGURATION_ERROR,
    StaleSentinelError: STALE_SENTINEL,
}


def is_precondition(exc: BaseException) -> bool:
    """True quando a falha é corrigível pelo usuário (sentinel deve ser removido)."""
    return isinstance(exc, PreconditionError)


def exception_to_error(exc: BaseException) -> ErrorPayload:
    """Converte exceções em ErrorPayload (serializável, acionável).

    Regras:
    - PipestepException: já vem com message/details/hint; o código é
      resolvido pelo catálogo a partir da classe.
    - Outras exceções: encapsuladas como STEP_EXECUTION_ERROR, sem stack
      trace, preservando apenas classe e mensagem.
    """
    if isinstance(exc, PipestepException):
        code = next(
            (c for cls, c in _CATALOG.items() if isinstance(exc, cls)),
            exc.__class__.__name__,
        )
        return ErrorPayload(
            type=code,
            message=exc.message,
            details=dict(exc.details or {}),
            hint=exc.hint,
            sentinel_cleared=is_precondition(exc),
        )

    return ErrorPayload(
        type=STEP_EXECUTION_ERROR,
        message=str(exc) or f"Step failed with {exc.__class__.__name__}",
        details={"exception_class": exc.__class__.__name__},
        hint="Inspect partial outputs and delete the sentinel manually before re-running",
        sentinel_cleared=False,
    )


__all__ = [
    "ErrorPayload",
    "exception_to_error",
    "is_precondition",
    "MISSING_INPUT",
    "PRODUCER_MISMATCH",
    "CONFIGURATION_MISMATCH",
    "UNKNOWN_PRODUCER",
    "ENGINE_CONFIGURATION_ERROR",
    "STALE_SENTINEL",
    "STEP_EXECUTION_ERROR",
]
