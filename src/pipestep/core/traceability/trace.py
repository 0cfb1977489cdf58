# src/pipestep/core/traceability/trace.py
"""
ExecutionTrace v1 — registro forense de uma execução guardada.

O trace consolida, de forma ordenada e serializável:
    - metadados da execução (run_id, started_at, versão do Pipestep)
    - hash da configuração resolvida do Engine
    - estado de cada Step tocado pela execução (executed, up_to_date, waited, failed)
    - Event Log ordenado (step_started, params_verified, step_finished, ...)

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente: o Engine chama a API explícita
    - A ordem do Event Log reflete a ordem real das chamadas
    - O trace é serializável e reconstruível (round-trip JSON)
    - Mutações são thread-safe (inputs resolvidos em paralelo)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - Falhas guardam o `ErrorPayload` completo, incluindo `sentinel_cleared`

Limites explícitos:
    - Não decide políticas de execução
    - Não é consultado para memoização (apenas o filesystem é)
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps timezone-naive são assumidos como UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start_iso: str, end: datetime) -> int:
    s = _ensure_tzaware_utc(datetime.fromisoformat(start_iso))
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class ExecutionTrace:
    """
    Trace v1 de uma execução.

    Campos principais:
        - run: metadados (run_id, started_at, pipestep_version)
        - inputs: `config_hash` da configuração resolvida do Engine
        - steps: estado por step_id
        - events: Event Log ordenado
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável e independente do estado interno."""
        with self._lock:
            return {
                "run": dict(self.run),
                "inputs": dict(self.inputs),
                "steps": {k: dict(v) for k, v in self.steps.items()},
                "events": [dict(e) for e in self.events],
            }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionTrace":
        """Reconstrução permissiva: campos ausentes viram coleções vazias."""
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            steps={k: dict(v) for k, v in (data.get("steps", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )

    def step_status(self, step_id: str) -> Optional[str]:
        with self._lock:
            return (self.steps.get(step_id) or {}).get("status")

    def events_of(self, event_type: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(e) for e in self.events if e.get("event_type") == event_type]


def create_trace(
    *,
    run_id: str,
    started_at: datetime,
    pipestep_version: str,
    config_hash: str,
) -> ExecutionTrace:
    """
    Cria o trace inicial de uma execução, com `steps` e `events` vazios.

    Nenhum evento é registrado aqui (nem mesmo `run_started`).
    """
    return ExecutionTrace(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "pipestep_version": pipestep_version,
        },
        inputs={"config_hash": config_hash},
    )


def add_event(
    trace: ExecutionTrace,
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """Adiciona exatamente um evento ao Event Log, preservando a ordem de chamada."""
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if step_id is not None:
        ev["step_id"] = step_id
    if payload is not None:
        ev["payload"] = payload
    with trace._lock:
        trace.events.append(ev)


def step_started(trace: ExecutionTrace, *, step_id: str, name: str, ts: datetime) -> None:
    """Marca o Step como `running` e registra `step_started`."""
    with trace._lock:
        trace.steps.setdefault(step_id, {}).update(
            {
                "step_id": step_id,
                "name": name,
                "status": "running",
                "started_at": _iso(ts),
            }
        )
        add_event(trace, event_type="step_started", ts=ts, step_id=step_id, payload={"name": name})


def step_finished(
    trace: ExecutionTrace,
    *,
    step_id: str,
    ts: datetime,
    params_sha256: Optional[str] = None,
) -> None:
    """Marca o Step como `executed`, com duração e hash dos parâmetros persistidos."""
    with trace._lock:
        s = trace.steps.setdefault(step_id, {"step_id": step_id})
        s.update({"status": "executed", "finished_at": _iso(ts)})
        if "started_at" in s:
            s["duration_ms"] = _ms_between(s["started_at"], ts)
        if params_sha256 is not None:
            s["params_sha256"] = params_sha256
        add_event(
            trace,
            event_type="step_finished",
            ts=ts,
            step_id=step_id,
            payload={"params_sha256": params_sha256},
        )


def step_failed(trace: ExecutionTrace, *, step_id: str, ts: datetime, error: Dict[str, Any]) -> None:
    """Marca o Step como `failed` e guarda o payload de erro."""
    with trace._lock:
        s = trace.steps.setdefault(step_id, {"step_id": step_id})
        s.update({"status": "failed", "finished_at": _iso(ts), "error": dict(error)})
        add_event(trace, event_type="step_failed", ts=ts, step_id=step_id, payload={"error": dict(error)})


def step_waited(trace: ExecutionTrace, *, step_id: str, ts: datetime, sentinel: str) -> None:
    """Registra que outro chamador detinha o sentinel e este apenas aguardou."""
    with trace._lock:
        s = trace.steps.setdefault(step_id, {"step_id": step_id})
        s.update({"status": "waited", "finished_at": _iso(ts)})
        add_event(trace, event_type="step_waited", ts=ts, step_id=step_id, payload={"sentinel": sentinel})


def step_up_to_date(trace: ExecutionTrace, *, step_id: str, ts: datetime) -> None:
    """Registra que os outputs do Step já existiam e nenhum trabalho foi executado."""
    with trace._lock:
        s = trace.steps.setdefault(step_id, {"step_id": step_id})
        s.update({"status": "up_to_date", "finished_at": _iso(ts)})
        add_event(trace, event_type="step_up_to_date", ts=ts, step_id=step_id)


def params_verified(
    trace: ExecutionTrace,
    *,
    step_id: str,
    producer: str,
    path: str,
    ts: datetime,
) -> None:
    """Registra que `path` já existia e os parâmetros de `producer` conferem."""
    add_event(
        trace,
        event_type="params_verified",
        ts=ts,
        step_id=step_id,
        payload={"producer": producer, "path": path},
    )


def save_trace(trace: ExecutionTrace, path: Path) -> None:
    """Persiste o trace em JSON determinístico."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(trace.to_dict(), ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def load_trace(path: Path) -> ExecutionTrace:
    """
    Raises:
        FileNotFoundError: Se o arquivo não existir.
        json.JSONDecodeError: Em caso de JSON inválido.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return ExecutionTrace.from_dict(data)
