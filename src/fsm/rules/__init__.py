"""
Exports públicos do módulo fsm/rules.

Guards avaliados antes de cada transição de uma operação CSRF.
"""

from fsm.rules.guards import (
    DEFAULT_GUARDS,
    Guard,
    GuardResult,
    TransitionContext,
    evaluate_guards,
    guard_send_requires_token,
    guard_single_token_retry,
    guard_terminal_state,
    guard_valid_state,
)

__all__ = [
    "DEFAULT_GUARDS",
    "Guard",
    "GuardResult",
    "TransitionContext",
    "evaluate_guards",
    "guard_send_requires_token",
    "guard_single_token_retry",
    "guard_terminal_state",
    "guard_valid_state",
]
