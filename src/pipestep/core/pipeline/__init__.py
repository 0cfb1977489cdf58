"""
# Pipeline Core — Pipestep

Este pacote define os contratos e estruturas que compõem um pipeline:

- **types**: `NOTHING`, `Input`, `StepOutcome`
- **step**: `Step` (Protocol) e `StepView` (defaults de atributos opcionais)
- **context**: `RunContext` (filesystem, config, log estruturado)
- **registry**: `StepRegistry` (arena de Steps indexada por `id`)

## Princípios Fundamentais

- Steps são identificados pelos arquivos que produzem
- Produtores são referenciados por `id`, resolvidos no registry
- Steps não controlam a ordem de execução; o Engine a descobre a partir
  de `inputs` no momento da execução
"""

from .context import RunContext
from .registry import DuplicateStepIdError, StepRegistry
from .step import DEFAULT_STEP_NAME, Step, StepView
from .types import NOTHING, Input, StepOutcome

__all__ = [
    "RunContext",
    "DuplicateStepIdError",
    "StepRegistry",
    "DEFAULT_STEP_NAME",
    "Step",
    "StepView",
    "NOTHING",
    "Input",
    "StepOutcome",
]
