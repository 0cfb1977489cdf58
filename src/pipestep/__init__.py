# src/pipestep/__init__.py
"""
Pipestep — engine incremental de pipelines baseados em arquivos.

Steps são unidades de trabalho identificadas pelos arquivos que produzem.
Cada Step declara os arquivos que exige e, para cada um, qual Step sabe
produzi-lo. A execução guardada de um Step resolve recursivamente as
dependências ausentes, memoizando pelo filesystem: uma reexecução não faz
nada quando os outputs já existem com os mesmos parâmetros.

Arquitetura em alto nível:
    - core.config       → carregamento, merge e hashing de configuração
    - core.fs           → colaborador de filesystem (injetável)
    - core.pipeline     → protocolo de Step, registry e contexto de execução
    - core.engine       → sentinel e execução guardada
    - core.provenance   → proveniência de parâmetros
    - core.traceability → ExecutionTrace e Event Log

Limites explícitos:
    - Não define Steps concretos de domínio
    - Não compara conteúdo de outputs (apenas existência e parâmetros)
"""

from ._version import __version__
from .core.config import EngineSettings, load_settings
from .core.engine import Engine
from .core.exceptions import (
    ConfigurationMismatchError,
    EngineConfigurationError,
    MissingInputError,
    PipestepException,
    PreconditionError,
    ProducerMismatchError,
    StaleSentinelError,
    UnknownProducerError,
)
from .core.fs import FileOps, LocalFileOps, MemoryFileOps
from .core.logs import configure_logging
from .core.pipeline import NOTHING, Input, RunContext, Step, StepOutcome, StepRegistry

__all__ = [
    "__version__",
    "EngineSettings",
    "load_settings",
    "Engine",
    "ConfigurationMismatchError",
    "EngineConfigurationError",
    "MissingInputError",
    "PipestepException",
    "PreconditionError",
    "ProducerMismatchError",
    "StaleSentinelError",
    "UnknownProducerError",
    "FileOps",
    "LocalFileOps",
    "MemoryFileOps",
    "configure_logging",
    "NOTHING",
    "Input",
    "RunContext",
    "Step",
    "StepOutcome",
    "StepRegistry",
]
