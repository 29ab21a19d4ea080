"""
Módulo FSM — máquina de estados das operações protegidas por CSRF.

Estrutura:
    - states/: CSRFOperationState e conjuntos terminal/cancelável
    - transitions/: Grafo de transições (VALID_TRANSITIONS)
    - rules/: Guards (token obrigatório antes do envio, retry único)
    - manager/: FSMStateMachine
    - types/: StateTransition, TransitionResult
"""

from fsm.manager import (
    INITIAL_STATES,
    FSMStateMachine,
    create_fsm,
)
from fsm.rules import (
    GuardResult,
    TransitionContext,
    evaluate_guards,
)
from fsm.states import (
    CANCELLABLE_STATES,
    DEFAULT_INITIAL_STATE,
    TERMINAL_STATES,
    CSRFOperationState,
    is_terminal,
    is_valid_state,
)
from fsm.transitions import (
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)
from fsm.types import (
    StateTransition,
    TransitionResult,
)

__all__ = [
    "CANCELLABLE_STATES",
    "DEFAULT_INITIAL_STATE",
    "INITIAL_STATES",
    "TERMINAL_STATES",
    "VALID_TRANSITIONS",
    "CSRFOperationState",
    "FSMStateMachine",
    "GuardResult",
    "StateTransition",
    "TransitionContext",
    "TransitionResult",
    "create_fsm",
    "evaluate_guards",
    "get_valid_targets",
    "is_terminal",
    "is_transition_valid",
    "is_valid_state",
    "validate_transition_map",
]
