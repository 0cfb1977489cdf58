# src/pipestep/core/config/settings.py
"""
Settings tipados do Engine, derivados da seção `engine` da configuração.

Exemplo de arquivo de defaults:

    engine:
      poll_interval_seconds: 0.5
      wait_log_interval_seconds: 60
      stale_after_seconds: null
      heartbeat_interval_seconds: null
      max_workers: null
      log_level: INFO

Sem `stale_after_seconds`, um waiter bloqueia indefinidamente enquanto o
sentinel existir; o único sinal é o warning periódico de espera.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

from .errors import InvalidEngineSettingsError
from .loader import load_config

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class EngineSettings:
    """Parâmetros operacionais do Engine (não confundir com `params` de Steps)."""

    poll_interval_seconds: float = 0.5
    """Intervalo de polling do waiter sobre o sentinel"""

    wait_log_interval_seconds: float = 60.0
    """Intervalo entre warnings de 'ainda aguardando' durante a espera"""

    stale_after_seconds: Optional[float] = None
    """Idade máxima do sentinel sem heartbeat antes de StaleSentinelError (None = sem limite)"""

    heartbeat_interval_seconds: Optional[float] = None
    """Intervalo de atualização do mtime do sentinel pelo executor (None = sem heartbeat)"""

    max_workers: Optional[int] = None
    """Limite de threads por Step com run_substeps_in_parallel (None = uma por input)"""

    log_level: str = "INFO"
    """Nível de log usado por configure_logging"""

    def __post_init__(self):
        for name in (
            "poll_interval_seconds",
            "wait_log_interval_seconds",
            "stale_after_seconds",
            "heartbeat_interval_seconds",
            "max_workers",
        ):
            value = getattr(self, name)
            if value is None and name in ("poll_interval_seconds", "wait_log_interval_seconds"):
                raise InvalidEngineSettingsError(f"{name} is required")
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise InvalidEngineSettingsError(f"{name} must be a number, got {value!r}")
        if self.poll_interval_seconds <= 0:
            raise InvalidEngineSettingsError(
                f"poll_interval_seconds must be positive, got {self.poll_interval_seconds}"
            )
        if self.wait_log_interval_seconds <= 0:
            raise InvalidEngineSettingsError(
                f"wait_log_interval_seconds must be positive, got {self.wait_log_interval_seconds}"
            )
        if self.stale_after_seconds is not None and self.stale_after_seconds <= 0:
            raise InvalidEngineSettingsError(
                f"stale_after_seconds must be positive or null, got {self.stale_after_seconds}"
            )
        if self.heartbeat_interval_seconds is not None and self.heartbeat_interval_seconds <= 0:
            raise InvalidEngineSettingsError(
                f"heartbeat_interval_seconds must be positive or null, got {self.heartbeat_interval_seconds}"
            )
        if (
            self.stale_after_seconds is not None
            and self.heartbeat_interval_seconds is not None
            and self.heartbeat_interval_seconds >= self.stale_after_seconds
        ):
            raise InvalidEngineSettingsError(
                "heartbeat_interval_seconds must be smaller than stale_after_seconds"
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise InvalidEngineSettingsError(f"max_workers must be >= 1, got {self.max_workers}")
        if str(self.log_level).upper() not in _LOG_LEVELS:
            raise InvalidEngineSettingsError(f"Unknown log_level: {self.log_level}")

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(str(self.log_level).upper())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "EngineSettings":
        """Constrói settings a partir da configuração resolvida (seção `engine`).

        Chaves desconhecidas na seção são rejeitadas para que erros de
        digitação não passem silenciosamente.
        """
        engine_cfg = (config or {}).get("engine", {}) or {}
        if not isinstance(engine_cfg, dict):
            raise InvalidEngineSettingsError(
                f"'engine' section must be a mapping, got {type(engine_cfg).__name__}"
            )
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(engine_cfg) - known)
        if unknown:
            raise InvalidEngineSettingsError(f"Unknown engine settings: {unknown}")
        return cls(**engine_cfg)


def load_settings(*, defaults_path: str, local_path: Optional[str] = None) -> EngineSettings:
    """Atalho: `load_config` + `EngineSettings.from_config`."""
    return EngineSettings.from_config(
        load_config(defaults_path=defaults_path, local_path=local_path)
    )
