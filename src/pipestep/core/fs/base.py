# src/pipestep/core/fs/base.py
"""
Contrato de operações de arquivo usado pelo Engine.

O filesystem é o único recurso mutável compartilhado entre processos.
Toda a coordenação entre execuções concorrentes repousa sobre
`create_empty_file_if_absent`, que deve ser atômico no filesystem alvo
(create-if-absent). Em filesystems sem essa garantia (ex.: alguns NFS)
a exclusão mútua é best-effort.

Implementações:
    - `LocalFileOps`  → filesystem real (O_CREAT | O_EXCL)
    - `MemoryFileOps` → store em memória, atômico, para testes
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol, runtime_checkable

from pipestep.core.exceptions import StaleSentinelError

logger = logging.getLogger(__name__)


@runtime_checkable
class FileOps(Protocol):
    """Operações mínimas de arquivo exigidas pelo Engine."""

    def exists(self, path: str) -> bool:
        ...

    def create_directories(self, for_file: str) -> None:
        """Cria os diretórios pais de `for_file`."""
        ...

    def create_empty_file_if_absent(self, path: str) -> bool:
        """Cria `path` vazio de forma atômica. True se este chamador o criou."""
        ...

    def delete_file(self, path: str) -> None:
        ...

    def block_until_deleted(
        self,
        path: str,
        *,
        poll_interval: float,
        wait_log_interval: float = 60.0,
        stale_after: Optional[float] = None,
    ) -> None:
        """Suspende o chamador até que `path` não exista mais."""
        ...

    def read_file(self, path: str) -> str:
        ...

    def write_file(self, path: str, text: str) -> None:
        ...

    def mtime(self, path: str) -> float:
        ...

    def touch(self, path: str) -> None:
        ...


def poll_until_deleted(
    path: str,
    *,
    exists: Callable[[str], bool],
    mtime: Callable[[str], float],
    poll_interval: float,
    wait_log_interval: float,
    stale_after: Optional[float],
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.time,
) -> None:
    """
    Laço de espera compartilhado pelas implementações de `FileOps`.

    - Sem `stale_after`: espera indefinidamente, emitindo um warning a cada
      `wait_log_interval` segundos com o tempo total de espera.
    - Com `stale_after`: se o mtime do sentinel não avançar por mais de
      `stale_after` segundos, levanta `StaleSentinelError`.

    Raises:
        StaleSentinelError: Sentinel abandonado por um executor morto.
    """
    started = clock()
    last_report = started

    while exists(path):
        now = clock()

        if stale_after is not None:
            try:
                age = now - mtime(path)
            except FileNotFoundError:
                return
            if age > stale_after:
                raise StaleSentinelError(
                    message=(
                        f"Sentinel {path} has not been refreshed for {age:.1f}s "
                        f"(limit {stale_after}s); the executing process probably died"
                    ),
                    details={"path": path, "age_seconds": age, "stale_after_seconds": stale_after},
                    hint="Inspect partial outputs of the step, then delete the sentinel file",
                )

        if now - last_report >= wait_log_interval:
            logger.warning("Still waiting for %s to be deleted (%.0fs)", path, now - started)
            last_report = now

        sleep(poll_interval)
