# src/pipestep/core/fs/memory.py
"""
Store de arquivos em memória, atômico e thread-safe.

Usado para exercitar o protocolo de sentinel sem depender da semântica
do filesystem do host: todas as operações acontecem sob um único
`threading.Condition`, e `block_until_deleted` é acordado assim que o
arquivo é removido. O relógio é injetável para simular sentinels antigos.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from .base import poll_until_deleted


class MemoryFileOps:
    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._files: Dict[str, Tuple[str, float]] = {}
        self._cond = threading.Condition()
        self._clock = clock
        self.created: List[str] = []
        self.deleted: List[str] = []

    def exists(self, path: str) -> bool:
        with self._cond:
            return path in self._files

    def create_directories(self, for_file: str) -> None:
        # diretórios são implícitos no store
        return None

    def create_empty_file_if_absent(self, path: str) -> bool:
        with self._cond:
            if path in self._files:
                return False
            self._files[path] = ("", self._clock())
            self.created.append(path)
            return True

    def delete_file(self, path: str) -> None:
        with self._cond:
            self._files.pop(path, None)
            self.deleted.append(path)
            self._cond.notify_all()

    def block_until_deleted(
        self,
        path: str,
        *,
        poll_interval: float,
        wait_log_interval: float = 60.0,
        stale_after: Optional[float] = None,
    ) -> None:
        def _sleep(seconds: float) -> None:
            with self._cond:
                if path in self._files:
                    self._cond.wait(timeout=seconds)

        poll_until_deleted(
            path,
            exists=self.exists,
            mtime=self.mtime,
            poll_interval=poll_interval,
            wait_log_interval=wait_log_interval,
            stale_after=stale_after,
            sleep=_sleep,
            clock=self._clock,
        )

    def read_file(self, path: str) -> str:
        with self._cond:
            if path not in self._files:
                raise FileNotFoundError(path)
            return self._files[path][0]

    def write_file(self, path: str, text: str) -> None:
        with self._cond:
            self._files[path] = (text, self._clock())
            self._cond.notify_all()

    def mtime(self, path: str) -> float:
        with self._cond:
            if path not in self._files:
                raise FileNotFoundError(path)
            return self._files[path][1]

    def touch(self, path: str) -> None:
        with self._cond:
            if path not in self._files:
                raise FileNotFoundError(path)
            self._files[path] = (self._files[path][0], self._clock())

    def paths(self) -> List[str]:
        with self._cond:
            return sorted(self._files)
