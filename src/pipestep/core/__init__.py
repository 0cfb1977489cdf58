# src/pipestep/core/__init__.py
"""
Core do Pipestep.

Este pacote reúne a implementação canônica do engine incremental:
execução guardada de Steps, resolução de dependências pelo filesystem e
proveniência dos parâmetros usados para produzir cada output.

Componentes principais:
    - config       → carregamento, merge e hashing de configuração; `EngineSettings`
    - fs           → colaborador de filesystem (`FileOps`, local e em memória)
    - pipeline     → protocolo de Step, `StepView`, registry e contexto de execução
    - engine       → sentinel e `Engine.run_pipeline`
    - provenance   → persistência, comparação e diff de parâmetros
    - traceability → `ExecutionTrace` e Event Log

Princípios fundamentais:
    - O filesystem é a única memória entre execuções
    - Nenhum output é reaproveitado silenciosamente após mudança de parâmetros
    - Erros de setup são tipados e limpam o próprio sentinel

Limites explícitos:
    - Não define Steps concretos de domínio
    - Não faz agendamento entre máquinas
    - Não compara conteúdo de arquivos de saída
"""
