"""
Guards para transições de operações CSRF.

Guards bloqueiam transições válidas no grafo quando o contexto da
operação não as permite. O principal: nenhuma operação entra em
SENDING sem token obtido (ou dispensado explicitamente).
"""

from collections.abc import Callable
from dataclasses import dataclass

from fsm.states.csrf import TERMINAL_STATES, CSRFOperationState


@dataclass(frozen=True, slots=True)
class TransitionContext:
    """
    Contexto da operação avaliado pelos guards.

    Attributes:
        token_ready: Token presente ou dispensado pelo fetcher
        token_retries_remaining: Retries de token ainda disponíveis
    """

    token_ready: bool = False
    token_retries_remaining: int = 0


class GuardResult:
    """
    Resultado da avaliação de um guard.

    Attributes:
        allowed: Se a transição é permitida
        reason: Motivo do bloqueio (se allowed=False)
    """

    __slots__ = ("allowed", "reason")

    def __init__(self, allowed: bool, reason: str | None = None) -> None:
        self.allowed = allowed
        self.reason = reason

    @classmethod
    def allow(cls) -> "GuardResult":
        """Cria resultado permitindo a transição."""
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "GuardResult":
        """Cria resultado negando a transição."""
        return cls(allowed=False, reason=reason)


Guard = Callable[[CSRFOperationState, CSRFOperationState, TransitionContext], GuardResult]


def guard_valid_state(
    from_state: CSRFOperationState,
    to_state: CSRFOperationState,
    context: TransitionContext,
) -> GuardResult:
    """Guard: ambos os estados pertencem ao enum."""
    if not isinstance(from_state, CSRFOperationState):
        return GuardResult.deny(f"Estado de origem inválido: {from_state}")
    if not isinstance(to_state, CSRFOperationState):
        return GuardResult.deny(f"Estado de destino inválido: {to_state}")
    return GuardResult.allow()


def guard_terminal_state(
    from_state: CSRFOperationState,
    to_state: CSRFOperationState,
    context: TransitionContext,
) -> GuardResult:
    """Guard: estados terminais não permitem saída."""
    if from_state in TERMINAL_STATES:
        return GuardResult.deny(
            f"Estado {from_state.name} é terminal, não permite transição"
        )
    return GuardResult.allow()


def guard_send_requires_token(
    from_state: CSRFOperationState,
    to_state: CSRFOperationState,
    context: TransitionContext,
) -> GuardResult:
    """Guard: SENDING exige token obtido ou dispensado."""
    if to_state == CSRFOperationState.SENDING and not context.token_ready:
        return GuardResult.deny("Envio bloqueado: token CSRF ausente")
    return GuardResult.allow()


def guard_single_token_retry(
    from_state: CSRFOperationState,
    to_state: CSRFOperationState,
    context: TransitionContext,
) -> GuardResult:
    """Guard: SENDING → FETCHING_TOKEN só enquanto houver retry disponível."""
    if (
        from_state == CSRFOperationState.SENDING
        and to_state == CSRFOperationState.FETCHING_TOKEN
        and context.token_retries_remaining <= 0
    ):
        return GuardResult.deny("Retry de token esgotado")
    return GuardResult.allow()


# Aplicados em ordem; todos devem permitir
DEFAULT_GUARDS: list[Guard] = [
    guard_valid_state,
    guard_terminal_state,
    guard_send_requires_token,
    guard_single_token_retry,
]


def evaluate_guards(
    from_state: CSRFOperationState,
    to_state: CSRFOperationState,
    context: TransitionContext | None = None,
    guards: list[Guard] | None = None,
) -> GuardResult:
    """
    Avalia todos os guards para uma transição.

    Args:
        from_state: Estado de origem
        to_state: Estado de destino
        context: Contexto da operação (default: sem token, sem retry)
        guards: Lista de guards a aplicar (usa DEFAULT_GUARDS se None)

    Returns:
        GuardResult do primeiro guard que negar, ou allow() se todos passarem
    """
    ctx = context or TransitionContext()
    guards_to_apply = guards if guards is not None else DEFAULT_GUARDS

    for guard in guards_to_apply:
        result = guard(from_state, to_state, ctx)
        if not result.allowed:
            return result

    return GuardResult.allow()
