# src/pipestep/core/fs/__init__.py
"""
Colaborador de filesystem do Pipestep.

O Engine nunca toca o filesystem diretamente: toda operação passa por uma
implementação de `FileOps`, o que torna o protocolo de sentinel testável
com um store atômico falso.
"""

from .base import FileOps, poll_until_deleted
from .local import LocalFileOps
from .memory import MemoryFileOps

__all__ = ["FileOps", "LocalFileOps", "MemoryFileOps", "poll_until_deleted"]
