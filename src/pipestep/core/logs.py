# src/pipestep/core/logs.py
"""
Configuração de logging do Pipestep.

Os módulos usam `logging.getLogger(__name__)` e nunca configuram handlers.
Aplicações (ou scripts de pipeline) chamam `configure_logging` uma vez,
normalmente com o `log_level` resolvido em `EngineSettings`.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from pipestep.core.config.settings import EngineSettings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(
    level: Union[int, str, None] = None,
    *,
    settings: Optional[EngineSettings] = None,
    force: bool = False,
) -> None:
    """
    Configura o logging raiz com o formato padrão do Pipestep.

    Args:
        level: Nível explícito (nome ou valor numérico). Tem precedência
            sobre `settings`.
        settings: `EngineSettings` de onde ler `log_level` quando `level`
            não é informado.
        force: Substitui handlers já instalados no logger raiz.
    """
    if level is None:
        level = settings.log_level_value if settings is not None else logging.INFO
    elif isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(level=level, format=LOG_FORMAT, force=force)
