# src/pipestep/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Pipestep.

Estas exceções cobrem a configuração *do Engine* (arquivos YAML/JSON com
intervalos de polling, limites de espera, logging). Divergência entre os
parâmetros de um Step e os parâmetros persistidos não é erro de
configuração do Engine: ela é sinalizada por `ConfigurationMismatchError`
em `pipestep.core.exceptions`.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa erro de execução de Step
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do Engine.

    Permite captura genérica de falhas de carregamento, merge e validação
    de settings, distinta das falhas de execução do pipeline.
    """


class DefaultsNotFoundError(ConfigError):
    """O arquivo de defaults é obrigatório e não foi encontrado."""


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato de arquivo não suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz da configuração não é um dicionário."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"engine": {"poll_interval_seconds": 0.5}}
        - override: {"engine": "fast"}

    Nenhum merge parcial é produzido em caso de conflito.
    """


class InvalidEngineSettingsError(ConfigError):
    """
    Valor inválido na seção `engine` da configuração resolvida.

    Exemplos:
        - `poll_interval_seconds` não positivo
        - `max_workers` menor que 1
        - `log_level` desconhecido
    """
