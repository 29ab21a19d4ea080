"""Operação mutante protegida por token CSRF.

Fluxo (FSM em `fsm`):
    IDLE → FETCHING_TOKEN → TOKEN_OBTAINED → SENDING → SUCCEEDED | FAILED
    FETCHING_TOKEN → TOKEN_FETCH_FAILED (qualquer falha do fetcher)
    TOKEN_OBTAINED → FAILED (token vazio: guard de envio nega)
    SENDING → FETCHING_TOKEN (uma vez, token expirado)
    IDLE | FETCHING_TOKEN | TOKEN_OBTAINED → CANCELLED

O resultado é resolvido exatamente uma vez. A operação ocupa uma vaga da
fila; as trocas internas (token e envio) não são reenfileiradas.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Generator, Mapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from api.connectors.wiki.components import BodyEncoding, HttpMethod, URLComponents
from api.connectors.wiki.csrf.models import CSRFToken, TokenContext, TokenPlacement
from api.connectors.wiki.models import TOKEN_EXPIRED_ERROR_CODES
from api.connectors.wiki.results import CodableResult, CSRFOperationResult
from app.observability import record_csrf_outcome
from fsm import CSRFOperationState, FSMStateMachine, TransitionContext, create_fsm
from utils.errors import (
    CSRFOperationCancelledError,
    InvalidRequestParametersError,
    SessionError,
    TokenFetchError,
)

if TYPE_CHECKING:
    from api.connectors.wiki.session import Session
    from api.connectors.wiki.task_queue import TaskQueue
    from app.protocols import NotificationPublisherProtocol, TokenFetcherProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E")

MAX_TOKEN_RETRIES = 1


class _TransitionDenied(SessionError):
    """Transição negada pela FSM (cancelamento concorrente ou guard)."""


def is_token_expired_error(error_result: Any) -> bool:
    """True se o erro de domínio indica token expirado (badtoken/notoken)."""
    error = getattr(error_result, "error", None)
    return getattr(error, "code", None) in TOKEN_EXPIRED_ERROR_CODES


class CSRFTokenOperation(Generic[T, E]):
    """Handle aguardável e cancelável de uma operação CSRF.

    Uso:
        operation = session.request_with_csrf(Model, components, ...)
        result = await operation
    """

    def __init__(
        self,
        session: Session,
        token_fetcher: TokenFetcherProtocol,
        *,
        model: type[T],
        error_model: type[E],
        components: URLComponents,
        method: HttpMethod = HttpMethod.POST,
        body: Mapping[str, Any] | Any = None,
        encoding: BodyEncoding = BodyEncoding.JSON,
        token_context: TokenContext | None = None,
        success_notification: str | None = None,
        notification_center: NotificationPublisherProtocol | None = None,
    ) -> None:
        self._token_context = token_context or TokenContext()
        if (
            self._token_context.token_placement == TokenPlacement.BODY
            and body is not None
            and not isinstance(body, Mapping)
        ):
            raise InvalidRequestParametersError("Token no corpo exige corpo do tipo mapping")

        self._session = session
        self._token_fetcher = token_fetcher
        self._model = model
        self._error_model = error_model
        self._components = components
        self._method = method
        self._body = body
        self._encoding = encoding
        self._success_notification = success_notification
        self._notification_center = notification_center

        self._fsm: FSMStateMachine = create_fsm(operation_id=uuid.uuid4().hex[:12])
        self._outcome: asyncio.Future[CSRFOperationResult[T, E]] = (
            asyncio.get_running_loop().create_future()
        )
        self._task: asyncio.Task[None] | None = None
        self._token_attempts = 0

    # ──────────────────────────────────────────────────────────────────────
    # Estado
    # ──────────────────────────────────────────────────────────────────────

    @property
    def operation_id(self) -> str:
        return self._fsm.operation_id

    @property
    def state(self) -> CSRFOperationState:
        return self._fsm.current_state

    @property
    def fsm(self) -> FSMStateMachine:
        return self._fsm

    @property
    def token_attempts(self) -> int:
        """Quantidade de tokens obtidos (2 após retry por token expirado)."""
        return self._token_attempts

    def done(self) -> bool:
        return self._outcome.done()

    # ──────────────────────────────────────────────────────────────────────
    # Ciclo de vida
    # ──────────────────────────────────────────────────────────────────────

    def start(self, queue: TaskQueue) -> None:
        """Enfileira a execução. Chamado uma única vez pela Session."""
        if self._task is not None:
            raise RuntimeError("Operação CSRF já iniciada")
        self._task = queue.submit(self._run(), name=f"csrf-{self.operation_id}")
        self._task.add_done_callback(self._on_task_done)

    def cancel(self) -> bool:
        """Cancela a operação se ainda não houve envio.

        Returns:
            True se cancelou; False se já está enviando ou concluída.
        """
        if self._outcome.done() or not self._fsm.is_cancellable:
            return False

        from_state = self._fsm.current_state
        transition = self._fsm.transition(CSRFOperationState.CANCELLED, trigger="cancel")
        if not transition.success:
            return False

        logger.info(
            "csrf_operation_cancelled",
            extra={"operation_id": self.operation_id, "from_state": from_state.name},
        )
        self._resolve(self._result(error=CSRFOperationCancelledError("Operação CSRF cancelada")))
        if self._task is not None:
            self._task.cancel()
        return True

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        # Cancelada por fora (ex: aclose da sessão) sem passar por cancel()
        if task.cancelled() and not self._outcome.done():
            self._advance_if_possible(CSRFOperationState.CANCELLED, "task_cancelled")
            interrupted = CSRFOperationCancelledError("Operação CSRF interrompida")
            self._resolve(self._result(error=interrupted))

    async def result(self) -> CSRFOperationResult[T, E]:
        """Aguarda o desfecho da operação."""
        return await asyncio.shield(self._outcome)

    def __await__(self) -> Generator[Any, None, CSRFOperationResult[T, E]]:
        return self.result().__await__()

    # ──────────────────────────────────────────────────────────────────────
    # Execução
    # ──────────────────────────────────────────────────────────────────────

    async def _run(self) -> None:
        try:
            result = await self._execute()
        except _TransitionDenied as exc:
            if self._outcome.done():
                return
            logger.warning(
                "csrf_transition_denied",
                extra={"operation_id": self.operation_id, "reason": str(exc)},
            )
            result = self._result(error=exc)
        except Exception as exc:
            logger.exception(
                "csrf_operation_error",
                extra={"operation_id": self.operation_id, "error_type": type(exc).__name__},
            )
            self._advance_if_possible(CSRFOperationState.FAILED, "unexpected_error")
            result = self._result(error=exc)
        self._resolve(result)

    async def _execute(self) -> CSRFOperationResult[T, E]:
        host = self._components.host
        scheme = self._components.scheme or "https"
        retries_remaining = MAX_TOKEN_RETRIES

        self._advance(CSRFOperationState.FETCHING_TOKEN, "token_requested")
        while True:
            try:
                token = await self._token_fetcher.fetch_token(host, scheme=scheme)
            except Exception as exc:
                error = exc
                if not isinstance(exc, TokenFetchError):
                    error = TokenFetchError(
                        f"Fetcher de token falhou: {type(exc).__name__}",
                        is_retryable=False,
                    )
                    error.__cause__ = exc
                self._advance(CSRFOperationState.TOKEN_FETCH_FAILED, "token_fetch_failed")
                logger.warning(
                    "csrf_token_fetch_failed",
                    extra={
                        "operation_id": self.operation_id,
                        "host": host,
                        "error_type": type(exc).__name__,
                    },
                )
                return self._result(error=error)

            self._token_attempts += 1
            self._advance(
                CSRFOperationState.TOKEN_OBTAINED,
                "token_obtained",
                metadata={"token_required": token is not None},
            )
            # None: fetcher dispensou o token para o host
            send_context = TransitionContext(token_ready=token is None or bool(token.value))
            if not self._fsm.can_transition_to(CSRFOperationState.SENDING, send_context):
                self._advance(CSRFOperationState.FAILED, "token_missing")
                logger.warning(
                    "csrf_token_missing",
                    extra={"operation_id": self.operation_id, "host": host},
                )
                missing = TokenFetchError(f"Token CSRF vazio para {host}", is_retryable=False)
                return self._result(error=missing)

            components, body = self._inject_token(token)
            self._advance(CSRFOperationState.SENDING, "request_sent", context=send_context)

            codable: CodableResult[T, E] = await self._session.perform_codable_request(
                self._model,
                self._error_model,
                components,
                method=self._method,
                body=body,
                encoding=self._encoding,
            )
            authorized = token.is_authenticated if token is not None else None

            if (
                codable.error is None
                and is_token_expired_error(codable.error_result)
                and retries_remaining > 0
            ):
                self._token_fetcher.invalidate(host)
                self._advance(
                    CSRFOperationState.FETCHING_TOKEN,
                    "token_expired",
                    context=TransitionContext(token_retries_remaining=retries_remaining),
                )
                retries_remaining -= 1
                logger.info(
                    "csrf_token_expired_retry",
                    extra={"operation_id": self.operation_id, "host": host},
                )
                continue

            succeeded = (
                codable.error is None
                and codable.error_result is None
                and codable.result is not None
            )
            self._advance(
                CSRFOperationState.SUCCEEDED if succeeded else CSRFOperationState.FAILED,
                "response_received",
            )
            if succeeded and authorized:
                self._post_success_notification()
            return CSRFOperationResult(
                result=codable.result,
                error_result=codable.error_result,
                response=codable.response,
                authorized=authorized,
                error=codable.error,
            )

    def _inject_token(self, token: CSRFToken | None) -> tuple[URLComponents, Any]:
        if token is None:
            return self._components, self._body

        name = self._token_context.token_name
        if self._token_context.token_placement == TokenPlacement.QUERY:
            return self._components.adding_query_item(name, token.value), self._body

        body = dict(self._body or {})
        body[name] = token.value
        return self._components, body

    def _post_success_notification(self) -> None:
        if not self._success_notification or self._notification_center is None:
            return
        try:
            self._notification_center.post(self._success_notification)
        except Exception as exc:
            logger.warning(
                "csrf_notification_failed",
                extra={
                    "operation_id": self.operation_id,
                    "notification": self._success_notification,
                    "error_type": type(exc).__name__,
                },
            )

    # ──────────────────────────────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────────────────────────────

    def _advance(
        self,
        target: CSRFOperationState,
        trigger: str,
        *,
        context: TransitionContext | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        result = self._fsm.transition(target, trigger, context=context, metadata=metadata)
        if not result.success:
            raise _TransitionDenied(result.error_reason or "transição negada")

    def _advance_if_possible(self, target: CSRFOperationState, trigger: str) -> None:
        if self._fsm.can_transition_to(target):
            self._fsm.transition(target, trigger)

    def _result(self, *, error: Exception) -> CSRFOperationResult[T, E]:
        return CSRFOperationResult(
            result=None,
            error_result=None,
            response=None,
            authorized=None,
            error=error,
        )

    def _resolve(self, result: CSRFOperationResult[T, E]) -> None:
        if self._outcome.done():
            return
        self._outcome.set_result(result)
        logger.debug(
            "csrf_operation_resolved",
            extra={
                **self._fsm.get_state_summary(),
                "transitions": self._fsm.get_history_summary(),
            },
        )
        record_csrf_outcome(
            state=self._fsm.current_state.value,
            authorized=result.authorized,
            token_attempts=self._token_attempts,
        )
