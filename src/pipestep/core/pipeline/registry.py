# src/pipestep/core/pipeline/registry.py
"""
Registro de Steps do pipeline (arena + índice por `id`).

O grafo de dependências é implícito na relação `inputs` entre Steps, mas
as referências a produtores são resolvidas por lookup no registry, nunca
por posse direta de objetos. Isso permite construir e testar Steps de
forma independente e evita ciclos de referência acidentais.

Responsabilidades do módulo:
    - Validar unicidade e formato de `step.id`
    - Validar que o objeto registrado satisfaz o protocolo de Step
    - Resolver `id` → `StepView`
    - Verificar que todo produtor referenciado está registrado

Limites explícitos:
    - Não detecta ciclos de dependência
    - Não executa Steps
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List

from pipestep.core.exceptions import EngineConfigurationError, UnknownProducerError

from .step import Step, StepView


class DuplicateStepIdError(ValueError):
    """
    Dois Steps registrados com o mesmo `id`.

    A duplicidade é tratada como erro fatal de definição do pipeline e é
    detectada no momento do registro.
    """


@dataclass
class StepRegistry:
    """
    Registro canônico de Steps, indexado por `id`.

    Invariantes:
        - Cada `step.id` é único no registry
        - `list()` reflete exatamente a ordem de registro
    """

    _steps: Dict[str, StepView] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, step: Step) -> StepView:
        step_id = getattr(step, "id", None)
        if not isinstance(step_id, str) or not step_id.strip():
            raise ValueError("step.id must be a non-empty string")

        if step_id in self._steps:
            raise DuplicateStepIdError(f"Duplicate step id: {step_id}")

        if not isinstance(step, Step):
            raise EngineConfigurationError(
                message=(
                    f"Step {step_id} does not satisfy the Step protocol "
                    "(id, outputs, inputs, in_progress_file, run)"
                ),
                details={"step": step_id, "class": type(step).__name__},
            )

        view = StepView(step)
        self._steps[step_id] = view
        self._order.append(step_id)
        return view

    def extend(self, steps) -> None:
        for step in steps:
            self.add(step)

    def get(self, step_id: str) -> StepView:
        try:
            return self._steps[step_id]
        except KeyError:
            raise UnknownProducerError(
                message=f"Unknown step id: {step_id}",
                details={"step": step_id, "registered": list(self._order)},
                hint="Register every producer step before running the pipeline",
            ) from None

    def list(self) -> List[StepView]:
        return [self._steps[sid] for sid in self._order]

    def validate(self) -> None:
        """
        Verifica que todo produtor referenciado em `inputs` está registrado.

        Raises:
            UnknownProducerError: Na primeira referência não resolvível,
                nomeando o Step consumidor e o caminho.
        """
        for view in self.list():
            for item in view.inputs:
                if item.producer is not None and item.producer not in self._steps:
                    raise UnknownProducerError(
                        message=(
                            f"Step {view.label} names unknown producer "
                            f"{item.producer!r} for {item.path}"
                        ),
                        details={"step": view.id, "path": item.path, "producer": item.producer},
                        hint="Register the producer step or fix its id",
                    )

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._steps

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[StepView]:
        return iter(self.list())
