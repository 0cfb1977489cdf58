# tests/core/config/test_loader.py
"""
Testes do carregador de configuração do Engine (load_config).

Os testes asseguram que:
- o arquivo defaults é obrigatório
- o arquivo local é opcional
- YAML e JSON são aceitos; outros formatos são rejeitados
- a raiz da configuração precisa ser um dicionário
- o merge defaults + local preserva chaves não sobrescritas

Limites explícitos:
    - Não valida a semântica da seção `engine` (ver test_settings.py)
    - Não valida hashing
"""

import json
from pathlib import Path

import pytest

try:
    from pipestep.core.config.loader import load_config
    from pipestep.core.config.errors import (
        DefaultsNotFoundError,
        InvalidConfigRootTypeError,
        UnsupportedConfigFormatError,
    )
except Exception as e:  # noqa: BLE001
    load_config = None
    DefaultsNotFoundError = None
    InvalidConfigRootTypeError = None
    UnsupportedConfigFormatError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """
    Garante que o loader de configuração e suas exceções tipadas estejam disponíveis.

    Falha imediatamente, com uma mensagem que lista os módulos esperados,
    em vez de deixar o teste quebrar com um NameError indireto.
    """
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing loader/errors modules. Implement:\n"
            "- src/pipestep/core/config/loader.py (load_config)\n"
            "- src/pipestep/core/config/errors.py (typed exceptions)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_missing_defaults_raises(tmp_path: Path):
    """
    A ausência do arquivo defaults é erro fatal (`DefaultsNotFoundError`).

    Nenhuma configuração parcial é retornada.
    """
    _require_imports()
    with pytest.raises(DefaultsNotFoundError):
        load_config(defaults_path=str(tmp_path / "defaults.yaml"), local_path=None)


def test_missing_local_is_ok(tmp_path: Path, engine_defaults_yaml):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(engine_defaults_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(tmp_path / "local.yaml"))
    assert out["engine"]["poll_interval_seconds"] == 0.5
    assert out["engine"]["stale_after_seconds"] is None
    assert out["project"]["seeds"] == [1, 2, 3]


def test_load_defaults_and_local(tmp_path: Path, engine_defaults_yaml, engine_local_yaml):
    """
    Verifica o merge defaults + local.

    Invariantes:
        - Overrides locais têm precedência (inclusive sobre `null`)
        - Chaves não sobrescritas permanecem inalteradas
        - Listas são substituídas por inteiro
    """
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    local = tmp_path / "local.yaml"
    defaults.write_text(engine_defaults_yaml, encoding="utf-8")
    local.write_text(engine_local_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(local))
    assert out["engine"]["stale_after_seconds"] == 30
    assert out["engine"]["heartbeat_interval_seconds"] == 5
    assert out["engine"]["log_level"] == "DEBUG"
    assert out["engine"]["poll_interval_seconds"] == 0.5
    assert out["project"] == {"name": "experiments", "seeds": [7]}


def test_json_defaults_are_supported(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.json"
    defaults.write_text(json.dumps({"engine": {"max_workers": 4}}), encoding="utf-8")

    out = load_config(defaults_path=str(defaults))
    assert out == {"engine": {"max_workers": 4}}


def test_empty_file_is_empty_dict(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("", encoding="utf-8")
    assert load_config(defaults_path=str(defaults)) == {}


def test_invalid_root_type_raises(tmp_path: Path):
    """Uma lista na raiz do YAML é erro estrutural (`InvalidConfigRootTypeError`)."""
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("- just\n- a\n- list\n", encoding="utf-8")
    with pytest.raises(InvalidConfigRootTypeError):
        load_config(defaults_path=str(defaults), local_path=None)


def test_unsupported_extension_raises(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.toml"
    defaults.write_text("engine = { max_workers = 2 }\n", encoding="utf-8")
    with pytest.raises(UnsupportedConfigFormatError):
        load_config(defaults_path=str(defaults), local_path=None)
