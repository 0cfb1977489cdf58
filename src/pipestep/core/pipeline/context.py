# src/pipestep/core/pipeline/context.py
"""
Contexto de execução compartilhado do pipeline.

O `RunContext` é passado a `step.run(ctx)` e é o único canal entre o
trabalho de um Step e o Engine:
    - identidade da execução (run_id, created_at)
    - configuração resolvida do Engine
    - colaborador de filesystem (`fs`), o mesmo usado pelo Engine
    - log estruturado de eventos e warnings por Step

Os dados do pipeline em si trafegam pelo filesystem (arquivos de saída de
um Step são os inputs de outro), não pelo contexto.

Invariantes:
    - Eventos de log sempre incluem `run_id` e `step_id`
    - Warnings são agrupados por `step_id`
    - O contexto é seguro para Steps executados em paralelo
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pipestep.core.fs import FileOps, LocalFileOps


@dataclass
class RunContext:
    """Contexto canônico de uma execução guardada do pipeline."""

    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    fs: FileOps = field(default_factory=LocalFileOps)
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @classmethod
    def create(
        cls,
        *,
        config: Optional[Dict[str, Any]] = None,
        fs: Optional[FileOps] = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> "RunContext":
        """Cria um contexto novo com `run_id` aleatório e timestamp UTC."""
        return cls(
            run_id=uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc),
            config=dict(config or {}),
            fs=fs if fs is not None else LocalFileOps(),
            meta=dict(meta or {}),
        )

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        with self._lock:
            self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        with self._lock:
            self.warnings.setdefault(step_id, []).append(message)
