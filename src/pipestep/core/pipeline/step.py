# src/pipestep/core/pipeline/step.py
"""
Contrato canônico de Step do Pipestep.

Um Step é uma unidade de trabalho identificada pelos arquivos que produz.
Ele declara:
    - os arquivos que exige (`inputs`) e, para cada um, qual Step sabe
      produzi-lo (por `id`) ou None se o arquivo vem de fora do pipeline
    - os arquivos pelos quais é responsável (`outputs`)
    - opcionalmente, parâmetros (`params`) persistidos em `param_file`
    - o arquivo sentinel (`in_progress_file`) que marca execução em andamento
    - o trabalho propriamente dito (`run(ctx)`)

Conformidade é verificada por duck typing (`@runtime_checkable`): não há
classe base obrigatória. Atributos opcionais recebem defaults através de
`StepView`, que é a única forma pela qual o Engine lê um Step.

Construtores de Steps devem ser leves: nada de carregar dados no
`__init__`. O trabalho pesado pertence a `run(ctx)`.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol, Tuple, runtime_checkable

from pipestep.core.exceptions import EngineConfigurationError

from .context import RunContext
from .types import Input

DEFAULT_STEP_NAME = "no name"


@runtime_checkable
class Step(Protocol):
    """
    Interface mínima que qualquer Step deve implementar.

    Atributos obrigatórios:
        - id: chave estável e única no registry
        - outputs: caminhos que este Step produz
        - inputs: requisitos (`Input` ou tuplas `(path, producer_id)`)
        - in_progress_file: caminho do sentinel de exclusão mútua

    Atributos opcionais (defaults em `StepView`):
        - name: nome de exibição, usado apenas em logs ("no name")
        - params: parâmetros do Step (None = sem parâmetros)
        - param_file: onde os parâmetros são persistidos (obrigatório se há params)
        - run_substeps_in_parallel: resolve inputs em paralelo (False)
        - parameters_match(saved, current): comparação customizada de parâmetros
    """

    id: str
    outputs: Iterable[str]
    inputs: Iterable[Any]
    in_progress_file: str

    def run(self, ctx: RunContext) -> None:
        """Executa o trabalho do Step. Chamado no máximo uma vez por execução guardada."""
        ...


def _normalize_input(step_id: str, raw: Any) -> Input:
    if isinstance(raw, Input):
        item = raw
    elif isinstance(raw, (tuple, list)) and len(raw) == 2:
        item = Input(path=raw[0], producer=raw[1])
    else:
        raise EngineConfigurationError(
            message=f"Step {step_id} declares an invalid input: {raw!r}",
            details={"step": step_id, "input": repr(raw)},
            hint="Declare inputs as Input(path, producer_id) or (path, producer_id)",
        )

    if not isinstance(item.path, str) or not item.path:
        raise EngineConfigurationError(
            message=f"Step {step_id} declares an input with an invalid path: {item.path!r}",
            details={"step": step_id, "path": repr(item.path)},
        )
    if item.producer is not None and not isinstance(item.producer, str):
        raise EngineConfigurationError(
            message=(
                f"Step {step_id} references producer {item.producer!r} for {item.path}; "
                "producers are referenced by step id"
            ),
            details={"step": step_id, "path": item.path, "producer": repr(item.producer)},
            hint="Register the producer in the StepRegistry and reference it by its id",
        )
    return item


class StepView:
    """
    Visão com defaults de um Step registrado.

    Os `params` são capturados na construção da visão: presença ou ausência
    de parâmetros não muda durante a vida do Step.
    """

    def __init__(self, step: Step):
        self.step = step
        self.id: str = step.id
        self.name: str = getattr(step, "name", None) or DEFAULT_STEP_NAME
        self.params: Any = getattr(step, "params", None)
        self.run_substeps_in_parallel: bool = bool(getattr(step, "run_substeps_in_parallel", False))

    def __repr__(self) -> str:
        return f"StepView(id={self.id!r}, name={self.name!r})"

    @property
    def label(self) -> str:
        """Identificação usada em mensagens de erro: nome e id."""
        if self.name == DEFAULT_STEP_NAME or self.name == self.id:
            return self.id
        return f"{self.name} ({self.id})"

    @property
    def has_params(self) -> bool:
        return self.params is not None

    @property
    def outputs(self) -> frozenset:
        return frozenset(self.step.outputs or ())

    @property
    def inputs(self) -> Tuple[Input, ...]:
        items = {_normalize_input(self.id, raw) for raw in (self.step.inputs or ())}
        return tuple(sorted(items, key=lambda i: (i.path, i.producer or "")))

    @property
    def in_progress_file(self) -> str:
        path = getattr(self.step, "in_progress_file", None)
        if not path:
            raise EngineConfigurationError(
                message=f"Step {self.label} does not define in_progress_file",
                details={"step": self.id},
            )
        return path

    @property
    def param_file(self) -> str:
        path: Optional[str] = getattr(self.step, "param_file", None)
        if not path:
            raise EngineConfigurationError(
                message=f"Step {self.label} has params but no param_file",
                details={"step": self.id},
                hint="Define param_file, or set params to None if the step has nothing to configure",
            )
        return path

    def parameters_match(self, saved: Any, current: Any) -> bool:
        custom = getattr(self.step, "parameters_match", None)
        if callable(custom):
            return bool(custom(saved, current))
        from pipestep.core.provenance.params import parameters_match

        return parameters_match(saved, current)

    def run(self, ctx: RunContext) -> None:
        self.step.run(ctx)
