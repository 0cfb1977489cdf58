# src/pipestep/core/fs/local.py
"""Implementação de `FileOps` sobre o filesystem local."""

from __future__ import annotations

import logging
import os
import threading
import time
from pathlib import Path
from typing import Optional

from .base import poll_until_deleted

logger = logging.getLogger(__name__)


class LocalFileOps:
    """
    Operações de arquivo no filesystem real.

    O lock interno só impede que threads do mesmo processo disputem o mesmo
    sentinel; a exclusão entre processos depende de `O_CREAT | O_EXCL`.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def create_directories(self, for_file: str) -> None:
        parent = Path(for_file).parent
        parent.mkdir(parents=True, exist_ok=True)

    def create_empty_file_if_absent(self, path: str) -> bool:
        with self._lock:
            try:
                fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
            except FileExistsError:
                return False
            os.close(fd)
            return True

    def delete_file(self, path: str) -> None:
        with self._lock:
            try:
                os.remove(path)
            except FileNotFoundError:
                logger.warning("Tried to delete %s but it no longer exists", path)

    def block_until_deleted(
        self,
        path: str,
        *,
        poll_interval: float,
        wait_log_interval: float = 60.0,
        stale_after: Optional[float] = None,
    ) -> None:
        poll_until_deleted(
            path,
            exists=self.exists,
            mtime=self.mtime,
            poll_interval=poll_interval,
            wait_log_interval=wait_log_interval,
            stale_after=stale_after,
        )

    def read_file(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_file(self, path: str, text: str) -> None:
        # tmp + replace: leitores nunca veem um arquivo de parâmetros pela metade
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(f"{target.name}.tmp-{os.getpid()}-{time.time_ns()}")
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, target)

    def mtime(self, path: str) -> float:
        return os.stat(path).st_mtime

    def touch(self, path: str) -> None:
        os.utime(path, None)
