# src/pipestep/core/pipeline/types.py
"""
Tipos canônicos do pipeline do Pipestep.

Componentes principais:
    - NOTHING     → marcador de "parâmetros presentes, todos com default"
    - Input       → requisito de arquivo de um Step (caminho + produtor opcional)
    - StepOutcome → como a execução guardada de um Step terminou

Sobre parâmetros de Steps há três estados distintos:
    - `params = None`    → o Step não tem parâmetros configuráveis; nada é
                           persistido nem verificado
    - `params = NOTHING` → o Step tem parâmetros, mas usa todos os defaults
    - `params = {...}`   → valores explícitos

A diferença entre `None` e `NOTHING` precisa sobreviver à persistência
(ver `pipestep.core.provenance`).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class _Nothing:
    """Singleton do marcador de ausência (falsy, comparável por identidade)."""

    _instance: Optional["_Nothing"] = None

    def __new__(cls) -> "_Nothing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOTHING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Nothing":
        return self

    def __deepcopy__(self, memo) -> "_Nothing":
        return self

    def __reduce__(self):
        return (_Nothing, ())


NOTHING = _Nothing()


@dataclass(frozen=True)
class Input:
    """
    Requisito de arquivo declarado por um Step.

    Campos:
        - path: caminho do arquivo exigido (absoluto ou relativo; decisão do chamador)
        - producer: `id` do Step que sabe produzir o arquivo, ou None quando o
          arquivo deve vir de fora do pipeline
    """

    path: str
    producer: Optional[str] = None


class StepOutcome(str, Enum):
    """
    Resultado da execução guardada de um Step.

    - EXECUTED: este chamador adquiriu o sentinel e executou o Step
    - WAITED: outro chamador já detinha o sentinel; este apenas aguardou
    - UP_TO_DATE: todos os outputs e inputs já existiam com parâmetros conferidos;
      nenhum trabalho foi executado
    """

    EXECUTED = "executed"
    WAITED = "waited"
    UP_TO_DATE = "up_to_date"
