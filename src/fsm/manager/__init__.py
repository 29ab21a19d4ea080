"""
Exports públicos do módulo fsm/manager.

FSMStateMachine das operações CSRF.
"""

from fsm.manager.machine import (
    INITIAL_STATES,
    FSMStateMachine,
    create_fsm,
)

__all__ = [
    "INITIAL_STATES",
    "FSMStateMachine",
    "create_fsm",
]
