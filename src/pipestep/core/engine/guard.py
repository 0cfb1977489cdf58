# src/pipestep/core/engine/guard.py
"""
Protocolo de sentinel (exclusão mútua por Step entre processos).

Cada Step tem um arquivo `in_progress_file`. Quem consegue criá-lo
(create-if-absent atômico) é o executor; quem o encontra já criado vira
waiter e bloqueia até que o arquivo seja removido, sem executar nada.

O sentinel existe no máximo durante a execução do próprio Step (a
resolução de dependências acontece dentro dessa janela). A única exceção
é uma falha opaca do trabalho de um Step: o sentinel fica no filesystem
para forçar inspeção manual de saídas parciais.

Heartbeat (opcional): com `heartbeat_interval_seconds` configurado, uma
thread daemon atualiza o mtime do sentinel enquanto o executor trabalha.
Combinado com `stale_after_seconds` nos waiters, isso distingue um
executor vivo de um processo morto que deixou o sentinel para trás.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from pipestep.core.config.settings import EngineSettings
from pipestep.core.fs import FileOps

logger = logging.getLogger(__name__)


class SentinelGuard:
    def __init__(self, fs: FileOps, path: str, settings: EngineSettings):
        self.fs = fs
        self.path = path
        self.settings = settings

    def try_acquire(self) -> bool:
        """True se este chamador criou o sentinel e deve executar o Step."""
        self.fs.create_directories(self.path)
        return self.fs.create_empty_file_if_absent(self.path)

    def wait(self) -> None:
        """Bloqueia até o executor remover o sentinel."""
        self.fs.block_until_deleted(
            self.path,
            poll_interval=self.settings.poll_interval_seconds,
            wait_log_interval=self.settings.wait_log_interval_seconds,
            stale_after=self.settings.stale_after_seconds,
        )

    def release(self) -> None:
        self.fs.delete_file(self.path)

    def heartbeat(self) -> "Heartbeat":
        """Context manager que mantém o sentinel fresco enquanto o bloco executa."""
        return Heartbeat(self.fs, self.path, self.settings.heartbeat_interval_seconds)


class Heartbeat:
    """
    Thread daemon que faz `touch` no sentinel a cada `interval` segundos.

    Implementado como classe (e não com `@contextmanager`): as exceções do
    Pipestep são dataclasses congeladas e `contextlib` tenta reatribuir
    `__traceback__` nelas ao propagar pelo gerador.
    """

    def __init__(self, fs: FileOps, path: str, interval: Optional[float]):
        self.fs = fs
        self.path = path
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _beat(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.fs.touch(self.path)
            except FileNotFoundError:
                logger.warning("Sentinel %s disappeared while its step was running", self.path)
                return

    def __enter__(self) -> "Heartbeat":
        if self.interval is not None:
            self._thread = threading.Thread(target=self._beat, name=f"pipestep-heartbeat:{self.path}", daemon=True)
            self._thread.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
        return False
