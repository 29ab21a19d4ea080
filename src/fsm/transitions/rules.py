"""
Regras de transição válidas entre estados de uma operação CSRF.

Define o grafo da máquina de estados. A única aresta "para trás" é
SENDING → FETCHING_TOKEN, usada no retry único após token expirado;
o limite de uma tentativa é imposto por guard (fsm/rules).
"""

from fsm.states.csrf import TERMINAL_STATES, CSRFOperationState

TransitionMap = dict[CSRFOperationState, frozenset[CSRFOperationState]]

VALID_TRANSITIONS: TransitionMap = {
    CSRFOperationState.IDLE: frozenset({
        CSRFOperationState.FETCHING_TOKEN,
        CSRFOperationState.CANCELLED,
    }),

    CSRFOperationState.FETCHING_TOKEN: frozenset({
        CSRFOperationState.TOKEN_OBTAINED,
        CSRFOperationState.TOKEN_FETCH_FAILED,
        CSRFOperationState.CANCELLED,
    }),

    # FAILED: token obtido mas inutilizável (guard de envio negou)
    CSRFOperationState.TOKEN_OBTAINED: frozenset({
        CSRFOperationState.SENDING,
        CSRFOperationState.FAILED,
        CSRFOperationState.CANCELLED,
    }),

    # SENDING não aceita CANCELLED: a requisição já saiu
    CSRFOperationState.SENDING: frozenset({
        CSRFOperationState.SUCCEEDED,
        CSRFOperationState.FAILED,
        CSRFOperationState.FETCHING_TOKEN,
    }),

    CSRFOperationState.TOKEN_FETCH_FAILED: frozenset(),
    CSRFOperationState.SUCCEEDED: frozenset(),
    CSRFOperationState.FAILED: frozenset(),
    CSRFOperationState.CANCELLED: frozenset(),
}


def get_valid_targets(state: CSRFOperationState) -> frozenset[CSRFOperationState]:
    """Retorna os estados de destino válidos (vazio se terminal)."""
    return VALID_TRANSITIONS.get(state, frozenset())


def is_transition_valid(
    from_state: CSRFOperationState,
    to_state: CSRFOperationState,
) -> bool:
    """Verifica se uma transição existe no grafo."""
    if from_state in TERMINAL_STATES:
        return False
    return to_state in get_valid_targets(from_state)


def validate_transition_map() -> list[str]:
    """
    Valida a consistência do mapa de transições.

    Returns:
        Lista de erros encontrados (vazia se OK)
    """
    errors: list[str] = []

    for state in CSRFOperationState:
        if state not in VALID_TRANSITIONS:
            errors.append(f"Estado {state.name} ausente em VALID_TRANSITIONS")

    for state in TERMINAL_STATES:
        targets = VALID_TRANSITIONS.get(state, frozenset())
        if targets:
            errors.append(
                f"Estado terminal {state.name} não deveria ter transições: {targets}"
            )

    for from_state, targets in VALID_TRANSITIONS.items():
        for target in targets:
            if not isinstance(target, CSRFOperationState):
                errors.append(
                    f"Transição {from_state.name} → {target}: destino inválido"
                )

    return errors
