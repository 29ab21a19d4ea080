"""
Exports públicos do módulo fsm/states.

Estados de operações protegidas por token CSRF.
"""

from fsm.states.csrf import (
    CANCELLABLE_STATES,
    DEFAULT_INITIAL_STATE,
    TERMINAL_STATES,
    CSRFOperationState,
    is_terminal,
    is_valid_state,
)

__all__ = [
    "CANCELLABLE_STATES",
    "DEFAULT_INITIAL_STATE",
    "TERMINAL_STATES",
    "CSRFOperationState",
    "is_terminal",
    "is_valid_state",
]
