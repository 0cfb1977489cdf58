# src/pipestep/core/config/__init__.py
"""
Camada de configuração do Engine do Pipestep.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Hashing canônico para rastreabilidade
    - Settings tipados do Engine (`EngineSettings`)

Limites explícitos:
    - Não trata `params` de Steps (ver `pipestep.core.provenance`)
    - Não executa pipeline
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidEngineSettingsError,
    UnsupportedConfigFormatError,
)
from .hashing import canonical_json, compute_config_hash, compute_hash
from .loader import load_config
from .merge import deep_merge
from .settings import EngineSettings, load_settings

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidEngineSettingsError",
    "UnsupportedConfigFormatError",
    "canonical_json",
    "compute_config_hash",
    "compute_hash",
    "load_config",
    "deep_merge",
    "EngineSettings",
    "load_settings",
]
