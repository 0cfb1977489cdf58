# src/pipestep/core/engine/engine.py
"""
Engine de execução guardada do Pipestep.

`Engine.run_pipeline(step_id)` garante que, ao retornar, todo input
declarado pelo Step existe no filesystem com parâmetros verificados, e
que o trabalho do Step foi executado no máximo uma vez entre todos os
chamadores concorrentes (na granularidade do sentinel).

Algoritmo (por Step):
    1. Tenta criar o sentinel. Se já existe, aguarda sua remoção e retorna
       `StepOutcome.WAITED` sem executar nada.
    2. Executor: se todos os outputs e todos os inputs do Step já existem
       (e os parâmetros conferem), nada é executado → `StepOutcome.UP_TO_DATE`.
    3. Caso contrário resolve os inputs (recursivamente, depth-first) e
       executa o Step → `StepOutcome.EXECUTED`.
    4. Falha de pré-condição (`PreconditionError`) → remove o sentinel e
       propaga. Qualquer outra falha → mantém o sentinel e propaga.

Resolução de cada input:
    - arquivo ausente, sem produtor          → MissingInputError
    - arquivo ausente, produtor não o lista  → ProducerMismatchError (antes de executá-lo)
    - arquivo ausente, produtor correto      → run_pipeline(produtor)
    - arquivo presente, produtor com params  → compara param_file com params atuais
                                               (divergência → ConfigurationMismatchError)

Steps sem outputs declarados (ex.: relatórios finais) sempre executam.
`run_pipeline(step_id, force=True)` ignora a checagem de outputs do
próprio Step; as dependências continuam memoizadas.

Limites explícitos:
    - Sem retry, sem detecção de ciclos, sem cancelamento
    - Paralelismo apenas entre inputs irmãos de um Step que o habilite
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Tuple

from pipestep._version import __version__
from pipestep.core.config.hashing import compute_config_hash
from pipestep.core.config.settings import EngineSettings
from pipestep.core.errors import exception_to_error, is_precondition
from pipestep.core.exceptions import (
    ConfigurationMismatchError,
    EngineConfigurationError,
    MissingInputError,
    ProducerMismatchError,
    UnknownProducerError,
)
from pipestep.core.fs import FileOps
from pipestep.core.pipeline.context import RunContext
from pipestep.core.pipeline.registry import StepRegistry
from pipestep.core.pipeline.step import Step, StepView
from pipestep.core.pipeline.types import Input, StepOutcome
from pipestep.core.provenance import (
    ensure_storable,
    load_params,
    params_diff,
    params_hash,
    render,
    save_params,
    to_storable,
)
from pipestep.core.traceability import trace as tr

from .guard import SentinelGuard

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Engine:
    """Engine canônico do Pipestep (resolução recursiva + sentinel + proveniência)."""

    def __init__(
        self,
        registry: StepRegistry,
        *,
        fs: Optional[FileOps] = None,
        settings: Optional[EngineSettings] = None,
        ctx: Optional[RunContext] = None,
        trace: Optional[tr.ExecutionTrace] = None,
    ):
        self.registry = registry
        self.settings = settings or EngineSettings()
        if ctx is None:
            ctx = RunContext.create(config={"engine": self.settings.to_dict()}, fs=fs)
        elif fs is not None and fs is not ctx.fs:
            # Steps (via ctx) e Engine precisam enxergar o mesmo filesystem
            raise EngineConfigurationError(
                message="Engine was given both ctx and fs, but ctx.fs is a different filesystem",
                details={"ctx_fs": type(ctx.fs).__name__, "fs": type(fs).__name__},
                hint="Pass only ctx (built with the desired fs), or only fs",
            )
        self.ctx = ctx
        self.fs: FileOps = ctx.fs
        self.trace = trace

    @classmethod
    def from_steps(cls, steps: Iterable[Step], **kwargs: Any) -> "Engine":
        registry = StepRegistry()
        registry.extend(steps)
        return cls(registry, **kwargs)

    def start_trace(self) -> tr.ExecutionTrace:
        """Cria (e passa a alimentar) um trace para o contexto atual."""
        self.trace = tr.create_trace(
            run_id=self.ctx.run_id,
            started_at=self.ctx.created_at,
            pipestep_version=__version__,
            config_hash=compute_config_hash(self.ctx.config),
        )
        return self.trace

    # ------------------------------------------------------------------
    # Execução guardada
    # ------------------------------------------------------------------
    def run_pipeline(self, step_id: str, *, force: bool = False) -> StepOutcome:
        """
        Executa o pipeline até este Step, inclusive.

        Args:
            step_id: Step terminal desta invocação.
            force: Executa o Step mesmo que todos os seus outputs já existam.
                Vale apenas para este Step; produtores continuam memoizados.

        Returns:
            StepOutcome: EXECUTED se este chamador executou o Step,
            UP_TO_DATE se os outputs já existiam com parâmetros conferidos,
            WAITED se outro chamador detinha o sentinel.

        Raises:
            PreconditionError: Setup inválido (sentinel removido).
            Exception: Falha opaca do trabalho de algum Step (sentinel mantido).
        """
        step = self.registry.get(step_id)
        guard = SentinelGuard(self.fs, step.in_progress_file, self.settings)

        if not guard.try_acquire():
            logger.info(
                "Step %s is already in progress (%s exists); waiting for it to finish",
                step.label,
                guard.path,
            )
            guard.wait()
            if self.trace is not None:
                tr.step_waited(self.trace, step_id=step.id, ts=_now(), sentinel=guard.path)
            return StepOutcome.WAITED

        try:
            with guard.heartbeat():
                outcome, params_sha256 = self._run_pipeline(step, force=force)
        except Exception as exc:
            if is_precondition(exc):
                guard.release()
            else:
                logger.error(
                    "Step %s failed with %s; leaving %s in place. Inspect partial outputs "
                    "and delete it manually before re-running",
                    step.label,
                    exc.__class__.__name__,
                    guard.path,
                )
            if self.trace is not None:
                tr.step_failed(self.trace, step_id=step.id, ts=_now(), error=exception_to_error(exc).to_dict())
            raise

        guard.release()
        if self.trace is not None:
            if outcome is StepOutcome.UP_TO_DATE:
                tr.step_up_to_date(self.trace, step_id=step.id, ts=_now())
            else:
                tr.step_finished(self.trace, step_id=step.id, ts=_now(), params_sha256=params_sha256)
        return outcome

    def _run_pipeline(self, step: StepView, *, force: bool = False) -> Tuple[StepOutcome, Optional[str]]:
        logger.info("Running pipeline for step: %s", step.label)
        if self.trace is not None:
            tr.step_started(self.trace, step_id=step.id, name=step.name, ts=_now())

        if step.has_params:
            # falha cedo, antes de executar qualquer produtor
            _ = step.param_file
            ensure_storable(step.id, step.label, step.params)

        if not force and self.is_up_to_date(step):
            self._verify_up_to_date(step)
            logger.info("All outputs of step %s already exist; nothing to do", step.label)
            return StepOutcome.UP_TO_DATE, None

        inputs = step.inputs
        if step.run_substeps_in_parallel and len(inputs) > 1:
            self._resolve_parallel(step, inputs)
        else:
            for item in inputs:
                self._resolve_input(step, item)

        logger.info("All prerequisites are present. Running step: %s", step.label)
        return StepOutcome.EXECUTED, self.run_step(step)

    def is_up_to_date(self, step: StepView) -> bool:
        """
        True quando o Step declara outputs e todos eles, assim como todos
        os inputs declarados, já existem no filesystem.

        Um input ausente força a resolução completa: o produtor é
        reexecutado (ou `MissingInputError` é levantada) e o Step executa
        de novo sobre o input reconstruído.
        """
        outputs = step.outputs
        if not outputs or not all(self.fs.exists(path) for path in outputs):
            return False
        return all(self.fs.exists(item.path) for item in step.inputs)

    def _verify_up_to_date(self, step: StepView) -> None:
        if step.has_params:
            self.verify_params(step, sorted(step.outputs)[0], required_by=step)
        for item in step.inputs:
            producer = self._producer_for(step, item)
            if producer is not None and producer.has_params:
                self.verify_params(producer, item.path, required_by=step)

    def _resolve_parallel(self, step: StepView, inputs: tuple) -> None:
        workers = self.settings.max_workers or len(inputs)
        with ThreadPoolExecutor(max_workers=min(workers, len(inputs))) as executor:
            futures = [executor.submit(self._resolve_input, step, item) for item in inputs]
        # o executor só sai do bloco depois de todos os irmãos terminarem
        for future in futures:
            future.result()

    def _resolve_input(self, step: StepView, item: Input) -> None:
        producer = self._producer_for(step, item)

        if not self.fs.exists(item.path):
            logger.info("Missing required file %s; trying to create it", item.path)
            if producer is None:
                raise MissingInputError(
                    message=f"No step given to produce required file {item.path} (required for step {step.label})",
                    details={"step": step.id, "path": item.path},
                    hint="Create the file outside the pipeline or declare the step that produces it",
                )
            if item.path not in producer.outputs:
                raise ProducerMismatchError(
                    message=(
                        f"Given substep ({producer.label}) does not produce correct file: "
                        f"{item.path} not in {sorted(producer.outputs)} (required for step {step.label})"
                    ),
                    details={
                        "step": step.id,
                        "path": item.path,
                        "producer": producer.id,
                        "producer_outputs": sorted(producer.outputs),
                    },
                    hint="Add the path to the producer's outputs or fix the input declaration",
                )
            self.run_pipeline(producer.id)
            return

        logger.info("Required file %s already exists, checking parameters", item.path)
        if producer is None or not producer.has_params:
            return
        self.verify_params(producer, item.path, required_by=step)

    def _producer_for(self, step: StepView, item: Input) -> Optional[StepView]:
        if item.producer is None:
            return None
        if item.producer not in self.registry:
            raise UnknownProducerError(
                message=(
                    f"Step {step.label} names unknown producer {item.producer!r} for {item.path}"
                ),
                details={"step": step.id, "path": item.path, "producer": item.producer},
                hint="Register the producer step or fix its id",
            )
        return self.registry.get(item.producer)

    # ------------------------------------------------------------------
    # Proveniência de parâmetros
    # ------------------------------------------------------------------
    def verify_params(self, producer: StepView, path: str, *, required_by: StepView) -> None:
        """
        Verifica que os parâmetros persistidos de `producer` conferem com os atuais.

        Args:
            producer: Step dono de `path` e do `param_file` verificado.
            path: Output existente que motivou a verificação.
            required_by: Step que exige `path` (o próprio `producer` quando
                a verificação é dos outputs do Step terminal).

        Raises:
            ConfigurationMismatchError: Parâmetros divergentes, `param_file`
                ausente ou ilegível enquanto o output já existe.
            EngineConfigurationError: Params atuais sem forma JSON (ex.: NaN).
        """
        param_file = producer.param_file
        current = producer.params
        ensure_storable(producer.id, producer.label, current)
        base_details = {
            "step": producer.id,
            "required_by": required_by.id,
            "path": path,
            "param_file": param_file,
            "current": to_storable(current),
        }

        if not self.fs.exists(param_file):
            raise ConfigurationMismatchError(
                message=(
                    f"Output {path} of step {producer.label} exists but its parameter file "
                    f"{param_file} is missing; cannot verify which parameters produced it"
                ),
                details={**base_details, "saved": None, "diff": None},
                hint="Delete the stale outputs or restore the parameter file",
            )

        try:
            saved = load_params(self.fs, param_file)
        except ValueError as exc:
            # JSONDecodeError e UnicodeDecodeError
            raise ConfigurationMismatchError(
                message=f"Parameter file {param_file} of step {producer.label} is not readable JSON: {exc}",
                details={**base_details, "saved": None, "diff": None},
                hint="Delete the stale outputs or restore the parameter file",
            ) from exc

        if not producer.parameters_match(saved, current):
            diff = params_diff(saved, current)
            logger.error("saved params: %s", render(saved))
            logger.error("params: %s", render(current))
            logger.error("diff: %s", diff)
            raise ConfigurationMismatchError(
                message=(
                    f"Saved parameters for step {producer.label} don't match "
                    f"(file {path}, required for step {required_by.label}):\n{diff}"
                ),
                details={**base_details, "saved": to_storable(saved), "diff": diff.to_dict()},
                hint="Restore the previous parameters or change the output paths for the new ones",
            )

        if self.trace is not None:
            tr.params_verified(self.trace, step_id=required_by.id, producer=producer.id, path=path, ts=_now())

    def run_step(self, step: StepView) -> Optional[str]:
        """
        Persiste os parâmetros do Step (se houver) e executa seu trabalho.

        Returns:
            Optional[str]: SHA-256 dos parâmetros persistidos, ou None.
        """
        sha = None
        if step.has_params:
            save_params(self.fs, step.param_file, step.params)
            sha = params_hash(step.params)
        step.run(self.ctx)
        return sha
