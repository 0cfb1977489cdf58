# tests/core/traceability/test_trace.py
"""
Testes do ExecutionTrace (traceability).

Os testes garantem que:
- `create_trace` registra metadados sem emitir eventos
- o Event Log preserva a ordem de chamada da API
- transições de Step atualizam `status`, `finished_at` e `duration_ms`
- o trace sobrevive a um round-trip JSON em disco
- o Engine alimenta o trace com a ordem real da execução guardada

Limites explícitos:
    - Não valida a semântica de memoização (ver tests/core/engine)
"""

from datetime import datetime, timedelta, timezone

import pytest

try:
    from pipestep.core.traceability import (
        ExecutionTrace,
        add_event,
        create_trace,
        load_trace,
        params_verified,
        save_trace,
        step_failed,
        step_finished,
        step_started,
        step_up_to_date,
        step_waited,
    )
except Exception as e:
    create_trace = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Falha ao importar pipestep.core.traceability: {_IMPORT_ERR}")


T0 = datetime(2026, 1, 16, 12, 0, 0, tzinfo=timezone.utc)


def _trace():
    _require_imports()
    return create_trace(run_id="run-1", started_at=T0, pipestep_version="0.1.0", config_hash="abc")


def test_create_trace_has_metadata_and_no_events():
    trace = _trace()

    assert trace.run == {"run_id": "run-1", "started_at": T0.isoformat(), "pipestep_version": "0.1.0"}
    assert trace.inputs == {"config_hash": "abc"}
    assert trace.steps == {}
    assert trace.events == []


def test_naive_timestamps_are_treated_as_utc():
    _require_imports()
    trace = create_trace(
        run_id="run-1",
        started_at=datetime(2026, 1, 16, 12, 0, 0),
        pipestep_version="0.1.0",
        config_hash="abc",
    )
    assert trace.run["started_at"] == "2026-01-16T12:00:00+00:00"


def test_event_log_preserves_call_order():
    trace = _trace()
    add_event(trace, event_type="b", ts=T0 + timedelta(seconds=5))
    add_event(trace, event_type="a", ts=T0, step_id="raw", payload={"k": 1})

    assert [e["event_type"] for e in trace.events] == ["b", "a"]
    assert "step_id" not in trace.events[0]
    assert trace.events[1]["step_id"] == "raw"
    assert trace.events[1]["payload"] == {"k": 1}


def test_step_lifecycle_executed():
    trace = _trace()
    step_started(trace, step_id="train", name="Train", ts=T0)
    assert trace.step_status("train") == "running"

    step_finished(trace, step_id="train", ts=T0 + timedelta(milliseconds=1500), params_sha256="f00")

    state = trace.steps["train"]
    assert state["status"] == "executed"
    assert state["duration_ms"] == 1500
    assert state["params_sha256"] == "f00"
    assert [e["event_type"] for e in trace.events] == ["step_started", "step_finished"]


def test_step_failed_keeps_error_payload():
    trace = _trace()
    step_started(trace, step_id="train", name="Train", ts=T0)
    error = {"type": "MISSING_INPUT", "message": "boom", "details": {}, "hint": None, "sentinel_cleared": True}
    step_failed(trace, step_id="train", ts=T0, error=error)

    assert trace.step_status("train") == "failed"
    assert trace.steps["train"]["error"] == error
    assert trace.events_of("step_failed")[0]["payload"] == {"error": error}


def test_waited_and_up_to_date_statuses():
    trace = _trace()
    step_waited(trace, step_id="raw", ts=T0, sentinel="work/raw.in_progress")
    step_up_to_date(trace, step_id="train", ts=T0)

    assert trace.step_status("raw") == "waited"
    assert trace.step_status("train") == "up_to_date"
    assert trace.events_of("step_waited")[0]["payload"] == {"sentinel": "work/raw.in_progress"}
    assert "payload" not in trace.events_of("step_up_to_date")[0]
    assert trace.step_status("unknown") is None


def test_round_trip_json(tmp_path):
    trace = _trace()
    step_started(trace, step_id="train", name="Train", ts=T0)
    params_verified(trace, step_id="report", producer="train", path="model.bin", ts=T0)

    target = tmp_path / "traces" / "run-1.json"
    save_trace(trace, target)
    restored = load_trace(target)

    assert restored.to_dict() == trace.to_dict()


def test_from_dict_is_permissive():
    _require_imports()
    restored = ExecutionTrace.from_dict({"run": {"run_id": "x"}, "steps": None})

    assert restored.inputs == {}
    assert restored.steps == {}
    assert restored.events == []


def test_load_trace_missing_file(tmp_path):
    _require_imports()
    with pytest.raises(FileNotFoundError):
        load_trace(tmp_path / "absent.json")


def test_engine_feeds_the_trace(FileStep, make_engine):
    _require_imports()
    raw = FileStep("raw", outputs={"data.csv"})
    train = FileStep("train", outputs={"model.bin"}, inputs={("data.csv", "raw")}, params={"lr": 0.1})
    report = FileStep("report", inputs={("model.bin", "train"), ("data.csv", "raw")})

    engine = make_engine(raw, train, report)
    trace = engine.start_trace()
    engine.run_pipeline("report")

    assert [(e["event_type"], e.get("step_id")) for e in trace.events] == [
        ("step_started", "report"),
        ("step_started", "raw"),
        ("step_finished", "raw"),
        ("step_started", "train"),
        ("step_finished", "train"),
        ("step_finished", "report"),
    ]
    assert trace.steps["train"]["params_sha256"]
    assert trace.run["run_id"] == engine.ctx.run_id

    second = make_engine(raw, train, report)
    trace = second.start_trace()
    second.run_pipeline("report")

    verified = trace.events_of("params_verified")
    assert [e["payload"] for e in verified] == [{"producer": "train", "path": "model.bin"}]
    assert trace.step_status("report") == "executed"
