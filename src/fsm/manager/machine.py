"""
Máquina de estados (FSMStateMachine) de uma operação CSRF.

Controla transições, aplica guards com o contexto da operação e mantém
histórico para logs.
"""

from typing import Any

from fsm.rules.guards import GuardResult, TransitionContext, evaluate_guards
from fsm.states.csrf import (
    CANCELLABLE_STATES,
    DEFAULT_INITIAL_STATE,
    CSRFOperationState,
    is_terminal,
)
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import StateTransition, TransitionResult


class FSMStateMachine:
    """
    Máquina de estados de uma CSRFTokenOperation.

    Attributes:
        current_state: Estado atual da máquina
        history: Histórico de transições realizadas
    """

    __slots__ = ("_current_state", "_history", "_operation_id")

    def __init__(
        self,
        initial_state: CSRFOperationState | None = None,
        operation_id: str = "",
    ) -> None:
        self._current_state = initial_state or DEFAULT_INITIAL_STATE
        self._history: list[StateTransition] = []
        self._operation_id = operation_id

    @property
    def current_state(self) -> CSRFOperationState:
        """Estado atual da máquina."""
        return self._current_state

    @property
    def history(self) -> list[StateTransition]:
        """Histórico de transições (cópia para evitar mutação externa)."""
        return list(self._history)

    @property
    def operation_id(self) -> str:
        return self._operation_id

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self._current_state)

    @property
    def is_cancellable(self) -> bool:
        """True enquanto o cancelamento ainda impede a chamada de rede."""
        return self._current_state in CANCELLABLE_STATES

    def visited(self, state: CSRFOperationState) -> bool:
        """Verifica se a máquina já passou (ou está) no estado."""
        if self._current_state == state:
            return True
        return any(t.to_state == state for t in self._history)

    def can_transition_to(
        self,
        target: CSRFOperationState,
        context: TransitionContext | None = None,
    ) -> bool:
        if not is_transition_valid(self._current_state, target):
            return False
        return evaluate_guards(self._current_state, target, context).allowed

    def get_valid_targets(self) -> frozenset[CSRFOperationState]:
        return get_valid_targets(self._current_state)

    def transition(
        self,
        target: CSRFOperationState,
        trigger: str,
        context: TransitionContext | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transição de estado.

        Args:
            target: Estado de destino
            trigger: Identificador do gatilho
            context: Contexto avaliado pelos guards
            metadata: Dados adicionais para auditoria (nunca o token)

        Returns:
            TransitionResult com sucesso/falha e dados da transição
        """
        if not is_transition_valid(self._current_state, target):
            return TransitionResult(
                success=False,
                error_reason=(
                    f"Transição inválida: {self._current_state.name} → {target.name}"
                ),
            )

        guard_result: GuardResult = evaluate_guards(self._current_state, target, context)
        if not guard_result.allowed:
            return TransitionResult(success=False, error_reason=guard_result.reason)

        transition = StateTransition(
            from_state=self._current_state,
            to_state=target,
            trigger=trigger,
            metadata=metadata or {},
        )
        self._current_state = target
        self._history.append(transition)

        return TransitionResult(success=True, transition=transition)

    def get_state_summary(self) -> dict[str, Any]:
        """Resumo do estado atual para observability."""
        return {
            "operation_id": self._operation_id,
            "current_state": self._current_state.name,
            "is_terminal": self.is_terminal,
            "transition_count": len(self._history),
        }

    def get_history_summary(self) -> list[dict[str, Any]]:
        return [t.to_log_dict() for t in self._history]


def create_fsm(operation_id: str) -> FSMStateMachine:
    """Cria uma FSM em IDLE para a operação."""
    return FSMStateMachine(operation_id=operation_id)


INITIAL_STATES = frozenset({DEFAULT_INITIAL_STATE})
