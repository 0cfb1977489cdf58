"""
Rastreabilidade de execuções: `ExecutionTrace` e Event Log.
"""

from .trace import (
    ExecutionTrace,
    add_event,
    create_trace,
    load_trace,
    params_verified,
    save_trace,
    step_failed,
    step_finished,
    step_started,
    step_up_to_date,
    step_waited,
)

__all__ = [
    "ExecutionTrace",
    "add_event",
    "create_trace",
    "load_trace",
    "params_verified",
    "save_trace",
    "step_failed",
    "step_finished",
    "step_started",
    "step_up_to_date",
    "step_waited",
]
