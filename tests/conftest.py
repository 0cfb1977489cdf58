# tests/conftest.py
"""
Fixtures compartilhados para testes do Pipestep.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas (YAML como string)
- um filesystem em memória (`MemoryFileOps`) para exercitar o protocolo
  de sentinel sem depender do host
- `EngineSettings` com polling curto
- uma classe de Step duck-typed que escreve seus outputs via `ctx.fs`
  e registra cada execução em uma lista compartilhada

Decisões arquiteturais:
    - Steps de teste usam duck typing, sem herança
    - Imports do core são realizados de forma lazy para melhorar a
      clareza de erros durante falhas de import
    - A lista `calls` é compartilhada entre Steps de um mesmo teste, o
      que permite verificar a ordem real de execução

Limites explícitos:
    - Não substituir testes de integração com filesystem real
      (esses usam `tmp_path` + `LocalFileOps`)
"""

import threading
from datetime import datetime, timezone

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def engine_defaults_yaml() -> str:
    """
    Conteúdo típico de um `pipestep.defaults.yaml`.

    Returns:
        str: YAML com a seção `engine` completa e uma seção livre de projeto.
    """
    return """\
engine:
  poll_interval_seconds: 0.5
  wait_log_interval_seconds: 60
  stale_after_seconds: null
  heartbeat_interval_seconds: null
  max_workers: null
  log_level: INFO
project:
  name: experiments
  seeds: [1, 2, 3]
"""


@pytest.fixture
def engine_local_yaml() -> str:
    """Overrides locais: espera com limite de staleness e heartbeat."""
    return """\
engine:
  stale_after_seconds: 30
  heartbeat_interval_seconds: 5
  log_level: DEBUG
project:
  seeds: [7]
"""


# =====================================================
# Engine fixtures
# =====================================================

@pytest.fixture
def memory_fs():
    from pipestep.core.fs import MemoryFileOps

    return MemoryFileOps()


@pytest.fixture
def fast_settings():
    """
    `EngineSettings` com polling curto, para que waiters reajam rápido.

    Returns:
        EngineSettings: poll de 10ms, sem staleness e sem heartbeat.
    """
    from pipestep.core.config.settings import EngineSettings

    return EngineSettings(poll_interval_seconds=0.01)


@pytest.fixture
def fixed_ctx(memory_fs):
    """RunContext determinístico (run_id e created_at fixos) sobre `memory_fs`."""
    from pipestep.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config={"engine": {"log_level": "INFO"}},
        fs=memory_fs,
        meta={"source": "pytest"},
    )


@pytest.fixture
def calls():
    """Log compartilhado de execuções (`step.id` na ordem em que `run` foi chamado)."""
    return []


@pytest.fixture
def FileStep(calls):
    """
    Fixture factory que fornece uma implementação duck-typed de Step.

    A classe retornada:
    - declara `outputs`, `inputs` e `in_progress_file` (`work/<id>.in_progress`)
    - quando recebe `params`, usa `work/<id>.params.json` como `param_file`
      (a menos que outro caminho seja informado)
    - em `run(ctx)`, registra o id em `calls` e escreve cada output via `ctx.fs`
    - pode falhar deliberadamente (`fail_with`) ou bloquear em um evento
      (`block_on`) para testes de concorrência

    Returns:
        type: Classe `_FileStep` a ser instanciada pelos testes.
    """

    class _FileStep:
        def __init__(
            self,
            step_id: str,
            *,
            outputs=(),
            inputs=(),
            params=None,
            param_file=None,
            name=None,
            in_progress_file=None,
            run_substeps_in_parallel=False,
            fail_with=None,
            block_on=None,
            started=None,
        ):
            self.id = step_id
            self.outputs = set(outputs)
            self.inputs = set(inputs)
            self.in_progress_file = in_progress_file or f"work/{step_id}.in_progress"
            self.params = params
            if param_file is not None:
                self.param_file = param_file
            elif params is not None:
                self.param_file = f"work/{step_id}.params.json"
            if name is not None:
                self.name = name
            self.run_substeps_in_parallel = run_substeps_in_parallel
            self.fail_with = fail_with
            self.block_on = block_on
            self.started = started
            self.sentinel_seen = []

        def run(self, ctx):
            calls.append(self.id)
            self.sentinel_seen.append(ctx.fs.exists(self.in_progress_file))
            if self.started is not None:
                self.started.set()
            if self.block_on is not None:
                assert self.block_on.wait(timeout=5), "test event was never set"
            if self.fail_with is not None:
                raise self.fail_with
            for path in sorted(self.outputs):
                ctx.fs.create_directories(path)
                ctx.fs.write_file(path, f"{self.id}\n")

    return _FileStep


@pytest.fixture
def make_engine(memory_fs, fast_settings):
    """Constrói um `Engine` sobre `memory_fs` a partir de Steps soltos."""
    from pipestep.core.engine import Engine

    def _make(*steps, settings=None, fs=None, **kwargs):
        return Engine.from_steps(
            steps,
            fs=fs if fs is not None else memory_fs,
            settings=settings or fast_settings,
            **kwargs,
        )

    return _make


@pytest.fixture
def gate():
    """Evento usado para segurar a execução de um Step até o teste liberá-lo."""
    return threading.Event()
