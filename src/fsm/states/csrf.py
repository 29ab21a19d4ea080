"""
Estados de uma operação protegida por token CSRF.

Fluxo feliz:
    IDLE → FETCHING_TOKEN → TOKEN_OBTAINED → SENDING → SUCCEEDED

Uma operação nunca é reaproveitada após atingir estado terminal.
"""

from enum import StrEnum


class CSRFOperationState(StrEnum):
    """
    Estados de uma CSRFTokenOperation.

    Estados não-terminais:
        - IDLE: Operação criada, ainda não iniciada pela fila
        - FETCHING_TOKEN: Buscando token (cache ou endpoint dedicado)
        - TOKEN_OBTAINED: Token disponível (ou explicitamente dispensado)
        - SENDING: Requisição mutável em trânsito

    Estados terminais:
        - TOKEN_FETCH_FAILED: Falha ao obter token (transporte ou erro do fetcher)
        - SUCCEEDED: Resposta decodificada sem erro
        - FAILED: Erro de transporte, decode, erro de domínio ou token vazio
        - CANCELLED: Cancelada antes de SENDING
    """

    # Estados não-terminais
    IDLE = "IDLE"
    FETCHING_TOKEN = "FETCHING_TOKEN"
    TOKEN_OBTAINED = "TOKEN_OBTAINED"
    SENDING = "SENDING"

    # Estados terminais
    TOKEN_FETCH_FAILED = "TOKEN_FETCH_FAILED"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    def __str__(self) -> str:
        return self.value


TERMINAL_STATES: frozenset[CSRFOperationState] = frozenset({
    CSRFOperationState.TOKEN_FETCH_FAILED,
    CSRFOperationState.SUCCEEDED,
    CSRFOperationState.FAILED,
    CSRFOperationState.CANCELLED,
})

# Estados a partir dos quais o cancelamento ainda impede a chamada de rede
CANCELLABLE_STATES: frozenset[CSRFOperationState] = frozenset({
    CSRFOperationState.IDLE,
    CSRFOperationState.FETCHING_TOKEN,
    CSRFOperationState.TOKEN_OBTAINED,
})

DEFAULT_INITIAL_STATE: CSRFOperationState = CSRFOperationState.IDLE


def is_terminal(state: CSRFOperationState) -> bool:
    """Verifica se o estado é terminal."""
    return state in TERMINAL_STATES


def is_valid_state(state: object) -> bool:
    """Verifica se o valor é um CSRFOperationState."""
    return isinstance(state, CSRFOperationState)
