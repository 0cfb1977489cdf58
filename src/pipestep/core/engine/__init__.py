# src/pipestep/core/engine/__init__.py
"""
Engine do Pipestep.

Este pacote contém a execução guardada de Steps: exclusão mútua por
sentinel e resolução recursiva de dependências a partir dos `inputs`
declarados.

Componentes principais:
    - guard  → protocolo de sentinel (executor vs. waiter, heartbeat)
    - engine → `Engine.run_pipeline(step_id)`, resolução e proveniência

Invariantes:
    - O trabalho de um Step é executado no máximo uma vez entre chamadores
      concorrentes (na granularidade do sentinel)
    - Produtores sempre terminam antes dos Steps que consomem seus outputs
    - Falhas de pré-condição nunca deixam sentinels para trás

Limites explícitos:
    - Não planeja a ordem antecipadamente (não há DAG materializado)
    - Não detecta ciclos de dependência
    - Não faz retry
"""

from .engine import Engine
from .guard import SentinelGuard

__all__ = ["Engine", "SentinelGuard"]
