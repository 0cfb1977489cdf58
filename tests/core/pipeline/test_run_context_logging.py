# tests/core/pipeline/test_run_context_logging.py
"""
Testes de logging estruturado e coleta de warnings no RunContext.

Os testes asseguram que:
- eventos de log são estruturados e carregam `run_id` e `step_id`
- campos adicionais são preservados
- warnings são agrupados por Step, preservando a ordem
- `RunContext.create` gera identidade nova e usa o `fs` informado

Invariantes:
    - A coleção de eventos cresce de forma incremental
    - `run_id` está presente em todos os eventos de log
"""

import threading

import pytest

try:
    from pipestep.core.fs import LocalFileOps, MemoryFileOps
    from pipestep.core.pipeline.context import RunContext
except Exception as e:  # noqa: BLE001
    RunContext = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing RunContext logging/warnings API. Implement:"
            "- src/pipestep/core/pipeline/context.py (log, add_warning, events, warnings)"
            f"Import error: {_IMPORT_ERR}"
        )


def test_structured_log_event(fixed_ctx):
    """
    Cada chamada a `log` adiciona um evento com nível, mensagem,
    identidade da execução e campos extras.
    """
    _require_imports()
    fixed_ctx.log(step_id="train", level="INFO", message="epoch done", epoch=3)
    ev = fixed_ctx.events[-1]
    assert ev["run_id"] == "run-test-001"
    assert ev["step_id"] == "train"
    assert ev["level"] == "INFO"
    assert ev["message"] == "epoch done"
    assert ev["epoch"] == 3
    assert "timestamp" in ev


def test_warning_collection(fixed_ctx):
    _require_imports()
    fixed_ctx.add_warning(step_id="raw", message="3 rows dropped")
    fixed_ctx.add_warning(step_id="raw", message="encoding guessed")
    assert fixed_ctx.warnings == {"raw": ["3 rows dropped", "encoding guessed"]}


def test_logging_is_thread_safe(fixed_ctx):
    _require_imports()

    def _worker(i):
        for j in range(100):
            fixed_ctx.log(step_id=f"s{i}", level="DEBUG", message=str(j))

    threads = [threading.Thread(target=_worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(fixed_ctx.events) == 800


def test_create_generates_identity():
    _require_imports()
    fs = MemoryFileOps()
    a = RunContext.create(config={"engine": {}}, fs=fs)
    b = RunContext.create()
    assert a.run_id != b.run_id
    assert a.fs is fs
    assert isinstance(b.fs, LocalFileOps)
    assert a.created_at.tzinfo is not None
