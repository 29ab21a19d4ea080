"""Testes do pipeline de token CSRF.

Testa:
    - Token presente no local indicado pelo TokenContext (corpo/query)
    - Cancelamento antes do envio não chama a rede
    - Falha ao obter token é terminal (inclusive erro inesperado do fetcher)
    - Token vazio nunca é enviado
    - Token expirado: novo token e um único reenvio
    - Token dispensado pelo fetcher
    - Notificação de sucesso apenas com token autenticado
    - Busca de token em voo compartilhada por host
"""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest
from pydantic import BaseModel

from api.connectors.wiki import (
    BodyEncoding,
    HttpMethod,
    Session,
    TokenContext,
    TokenPlacement,
    URLComponents,
)
from api.connectors.wiki.csrf import ANONYMOUS_TOKEN, CSRFToken
from app.infra.notifications import NotificationCenter
from config.settings import WikiSettings
from fsm import CSRFOperationState
from tests.fakes.fake_wiki_server import (
    DEFAULT_CSRF_TOKEN,
    FakeWikiServer,
    form_body,
    json_body,
    json_response,
)
from utils.errors import (
    CSRFOperationCancelledError,
    InvalidRequestParametersError,
    TokenFetchError,
)

SUCCESS_NOTIFICATION = "TestDidEdit"


class EditResult(BaseModel):
    success: int


class NoTokenFetcher:
    """Fetcher de um wiki que dispensa token."""

    async def fetch_token(self, host: str, *, scheme: str = "https") -> CSRFToken | None:
        return None

    def invalidate(self, host: str) -> None:
        pass

    def clear(self) -> None:
        pass


class BrokenFetcher:
    """Fetcher que falha com erro fora da hierarquia de TokenFetchError."""

    async def fetch_token(self, host: str, *, scheme: str = "https") -> CSRFToken | None:
        raise ValueError("falha")

    def invalidate(self, host: str) -> None:
        pass

    def clear(self) -> None:
        pass


class EmptyTokenFetcher:
    """Fetcher que devolve token sem valor."""

    async def fetch_token(self, host: str, *, scheme: str = "https") -> CSRFToken | None:
        return CSRFToken(value="", is_authenticated=False)

    def invalidate(self, host: str) -> None:
        pass

    def clear(self) -> None:
        pass


@pytest.fixture
def server() -> FakeWikiServer:
    fake = FakeWikiServer()
    fake.respond("/w/api.php", 200, {"success": 1})
    return fake


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture
def session(server: FakeWikiServer, notifications: NotificationCenter) -> Session:
    return Session(WikiSettings(), transport=server.transport(), notification_center=notifications)


@pytest.fixture
def components() -> URLComponents:
    return URLComponents(scheme="https", host="en.wikipedia.org", path="/w/api.php").with_query_parameters(
        {"action": "edit", "format": "json"}
    )


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Posição do token
# ──────────────────────────────────────────────────────────────────────────────


class TestTokenPlacement:
    """Token sempre presente onde o TokenContext indica."""

    @pytest.mark.asyncio
    async def test_token_in_form_body(
        self,
        session: Session,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Placement BODY com form: token entre os parâmetros do corpo."""
        operation = session.request_with_csrf(
            EditResult,
            components,
            HttpMethod.POST,
            {"title": "Dog", "text": "Woof"},
            BodyEncoding.FORM,
            TokenContext(token_name="token", token_placement=TokenPlacement.BODY),
        )
        result = await operation

        assert result.result == EditResult(success=1)
        assert result.authorized is True
        assert operation.state == CSRFOperationState.SUCCEEDED
        assert len(server.token_requests) == 1
        sent = server.mutating_requests[0]
        assert form_body(sent) == {"title": "Dog", "text": "Woof", "token": DEFAULT_CSRF_TOKEN}
        assert "token" not in sent.url.params

    @pytest.mark.asyncio
    async def test_token_in_json_body(
        self,
        session: Session,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Placement BODY com JSON: token como campo do objeto."""
        await session.request_with_csrf(
            EditResult,
            components,
            HttpMethod.POST,
            {"title": "Dog"},
            BodyEncoding.JSON,
            TokenContext(token_name="csrf", token_placement=TokenPlacement.BODY),
        )
        assert json_body(server.mutating_requests[0]) == {"title": "Dog", "csrf": DEFAULT_CSRF_TOKEN}

    @pytest.mark.asyncio
    async def test_token_in_query(
        self,
        session: Session,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Placement QUERY: token como item de query, corpo intacto."""
        await session.request_with_csrf(
            EditResult,
            components,
            HttpMethod.POST,
            {"title": "Dog"},
            BodyEncoding.FORM,
            TokenContext(token_name="token", token_placement=TokenPlacement.QUERY),
        )
        sent = server.mutating_requests[0]
        assert sent.url.params["token"] == DEFAULT_CSRF_TOKEN
        assert sent.url.params["action"] == "edit"
        assert form_body(sent) == {"title": "Dog"}

    @pytest.mark.asyncio
    async def test_token_is_cached_per_host(
        self,
        session: Session,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Operações seguidas reaproveitam o token; limpar cookies descarta o cache."""
        await session.request_with_csrf(EditResult, components, body={"n": 1})
        await session.request_with_csrf(EditResult, components, body={"n": 2})
        assert len(server.token_requests) == 1

        session.remove_all_cookies()
        await session.request_with_csrf(EditResult, components, body={"n": 3})
        assert len(server.token_requests) == 2

    @pytest.mark.asyncio
    async def test_body_placement_requires_mapping(
        self,
        session: Session,
        components: URLComponents,
    ) -> None:
        """Corpo não-mapping com token no corpo é rejeitado na criação."""
        with pytest.raises(InvalidRequestParametersError):
            session.request_with_csrf(EditResult, components, HttpMethod.POST, ["not", "a", "dict"])


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Cancelamento e falhas de token
# ──────────────────────────────────────────────────────────────────────────────


class TestCancellationAndTokenFailure:
    """Cancelamento antes do envio e falhas ao obter token."""

    @pytest.mark.asyncio
    async def test_cancel_before_sending(
        self,
        session: Session,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Cancelar antes de SENDING impede qualquer chamada de rede."""
        operation = session.request_with_csrf(EditResult, components, body={"title": "Dog"})

        assert operation.cancel() is True
        result = await operation
        await asyncio.sleep(0.01)

        assert isinstance(result.error, CSRFOperationCancelledError)
        assert result.result is None
        assert operation.state == CSRFOperationState.CANCELLED
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_cancel_during_token_fetch(
        self,
        session: Session,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Cancelar enquanto o token é buscado impede o envio mutante."""
        server.latency = 0.05
        operation = session.request_with_csrf(EditResult, components, body={"title": "Dog"})
        await asyncio.sleep(0.01)
        assert operation.state == CSRFOperationState.FETCHING_TOKEN

        assert operation.cancel() is True
        result = await operation
        await asyncio.sleep(0.1)

        assert isinstance(result.error, CSRFOperationCancelledError)
        assert server.mutating_requests == []

    @pytest.mark.asyncio
    async def test_cancel_after_completion_is_noop(
        self,
        session: Session,
        components: URLComponents,
    ) -> None:
        """Operação concluída não pode ser cancelada."""
        operation = session.request_with_csrf(EditResult, components, body={})
        result = await operation
        assert operation.cancel() is False
        assert (await operation) is result

    @pytest.mark.asyncio
    async def test_token_fetch_failure_is_terminal(
        self,
        session: Session,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Falha no endpoint de token: TokenFetchError e nenhum envio."""
        server.token_status = 503
        operation = session.request_with_csrf(EditResult, components, body={"title": "Dog"})
        result = await operation

        assert isinstance(result.error, TokenFetchError)
        assert result.error.is_retryable is True
        assert operation.state == CSRFOperationState.TOKEN_FETCH_FAILED
        assert server.mutating_requests == []

    @pytest.mark.asyncio
    async def test_unexpected_fetcher_error_is_terminal(
        self,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Erro qualquer do fetcher: estado terminal e cancel() sem efeito."""
        session = Session(WikiSettings(), transport=server.transport(), token_fetcher=BrokenFetcher())
        operation = session.request_with_csrf(EditResult, components, body={"title": "Dog"})
        result = await operation

        assert isinstance(result.error, TokenFetchError)
        assert isinstance(result.error.__cause__, ValueError)
        assert result.error.is_retryable is False
        assert operation.state == CSRFOperationState.TOKEN_FETCH_FAILED
        assert operation.done()

        assert operation.cancel() is False
        assert operation.state == CSRFOperationState.TOKEN_FETCH_FAILED
        assert (await operation) is result
        assert server.mutating_requests == []

    @pytest.mark.asyncio
    async def test_empty_token_is_not_sent(
        self,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Token vazio: guard de envio nega, FAILED sem requisição mutante."""
        session = Session(WikiSettings(), transport=server.transport(), token_fetcher=EmptyTokenFetcher())
        operation = session.request_with_csrf(EditResult, components, body={"title": "Dog"})
        result = await operation

        assert isinstance(result.error, TokenFetchError)
        assert operation.state == CSRFOperationState.FAILED
        assert operation.cancel() is False
        assert server.mutating_requests == []
        states = [t.to_state for t in operation.fsm.history]
        assert states == [
            CSRFOperationState.FETCHING_TOKEN,
            CSRFOperationState.TOKEN_OBTAINED,
            CSRFOperationState.FAILED,
        ]


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Retry por token expirado
# ──────────────────────────────────────────────────────────────────────────────


class TestTokenExpiredRetry:
    """badtoken/notoken: novo token e um único reenvio."""

    @pytest.mark.asyncio
    async def test_retries_once_with_fresh_token(
        self,
        session: Session,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Primeiro envio rejeitado por token; segundo usa token novo."""
        server.csrf_tokens = ["stale+\\", "fresh+\\"]
        responses = iter(
            [
                json_response(200, {"error": {"code": "badtoken", "info": "Invalid CSRF token."}}),
                json_response(200, {"success": 1}),
            ]
        )
        server.route("/w/api.php", lambda request: next(responses))

        operation = session.request_with_csrf(
            EditResult, components, HttpMethod.POST, {"title": "Dog"}, BodyEncoding.FORM
        )
        result = await operation

        assert result.result == EditResult(success=1)
        assert operation.state == CSRFOperationState.SUCCEEDED
        assert operation.token_attempts == 2
        sent_tokens = [form_body(r)["token"] for r in server.mutating_requests]
        assert sent_tokens == ["stale+\\", "fresh+\\"]

    @pytest.mark.asyncio
    async def test_second_expiry_is_returned(
        self,
        session: Session,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Após o único retry, o erro de domínio é entregue."""
        server.respond("/w/api.php", 200, {"error": {"code": "notoken", "info": "Missing token"}})

        operation = session.request_with_csrf(EditResult, components, body={"title": "Dog"})
        result = await operation

        assert result.result is None
        assert result.error_result.error.code == "notoken"
        assert operation.state == CSRFOperationState.FAILED
        assert len(server.mutating_requests) == 2
        assert len(server.token_requests) == 2

    @pytest.mark.asyncio
    async def test_other_domain_error_is_not_retried(
        self,
        session: Session,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Erros de domínio comuns não disparam retry."""
        server.respond("/w/api.php", 200, {"error": {"code": "protectedpage", "info": "Protegida"}})
        operation = session.request_with_csrf(EditResult, components, body={})
        result = await operation

        assert result.error_result.error.code == "protectedpage"
        assert len(server.mutating_requests) == 1


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Token dispensado e notificação
# ──────────────────────────────────────────────────────────────────────────────


class TestTokenNotRequiredAndNotification:
    """Token dispensado e notificação de sucesso."""

    @pytest.mark.asyncio
    async def test_not_required_sends_without_token(
        self,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Fetcher que dispensa token: envio sem token, authorized None."""
        session = Session(WikiSettings(), transport=server.transport(), token_fetcher=NoTokenFetcher())
        operation = session.request_with_csrf(
            EditResult, components, HttpMethod.POST, {"title": "Dog"}, BodyEncoding.FORM
        )
        result = await operation

        assert result.result == EditResult(success=1)
        assert result.authorized is None
        assert form_body(server.requests[0]) == {"title": "Dog"}
        assert operation.state == CSRFOperationState.SUCCEEDED

    @pytest.mark.asyncio
    async def test_authorized_success_posts_notification(
        self,
        session: Session,
        notifications: NotificationCenter,
        components: URLComponents,
    ) -> None:
        """Sucesso com token autenticado publica a notificação."""
        observer = MagicMock()
        notifications.subscribe(SUCCESS_NOTIFICATION, observer)

        await session.request_with_csrf(
            EditResult, components, body={}, success_notification=SUCCESS_NOTIFICATION
        )

        observer.assert_called_once_with(SUCCESS_NOTIFICATION)

    @pytest.mark.asyncio
    async def test_anonymous_token_does_not_notify(
        self,
        session: Session,
        server: FakeWikiServer,
        notifications: NotificationCenter,
        components: URLComponents,
    ) -> None:
        """Token anônimo: authorized False e nenhuma notificação."""
        server.csrf_tokens = [ANONYMOUS_TOKEN]
        observer = MagicMock()
        notifications.subscribe(SUCCESS_NOTIFICATION, observer)

        result = await session.request_with_csrf(
            EditResult, components, body={}, success_notification=SUCCESS_NOTIFICATION
        )

        assert result.authorized is False
        assert result.result == EditResult(success=1)
        observer.assert_not_called()

    @pytest.mark.asyncio
    async def test_history_records_flow(
        self,
        session: Session,
        components: URLComponents,
    ) -> None:
        """Histórico da FSM registra o fluxo completo."""
        operation = session.request_with_csrf(EditResult, components, body={})
        await operation

        states = [t.to_state for t in operation.fsm.history]
        assert states == [
            CSRFOperationState.FETCHING_TOKEN,
            CSRFOperationState.TOKEN_OBTAINED,
            CSRFOperationState.SENDING,
            CSRFOperationState.SUCCEEDED,
        ]


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Busca de token compartilhada
# ──────────────────────────────────────────────────────────────────────────────


class TestSharedTokenFetch:
    """Buscas concorrentes do mesmo host compartilham uma requisição."""

    @pytest.mark.asyncio
    async def test_concurrent_operations_share_one_token_request(
        self,
        session: Session,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Várias operações no mesmo host: um único GET de token."""
        server.latency = 0.02
        operations = [
            session.request_with_csrf(EditResult, components, body={"n": n}) for n in range(5)
        ]
        results = await asyncio.gather(*(operation.result() for operation in operations))

        assert all(result.result == EditResult(success=1) for result in results)
        assert len(server.token_requests) == 1
        assert [form_body(r)["token"] for r in server.mutating_requests] == [DEFAULT_CSRF_TOKEN] * 5
        assert session.token_fetcher.pending_hosts == frozenset()

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_abort_shared_fetch(
        self,
        session: Session,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Cancelar uma operação não interrompe a busca das demais."""
        server.latency = 0.03
        first = session.request_with_csrf(EditResult, components, body={"n": 1})
        second = session.request_with_csrf(EditResult, components, body={"n": 2})
        await asyncio.sleep(0.01)

        assert first.cancel() is True
        result = await second

        assert result.result == EditResult(success=1)
        assert len(server.token_requests) == 1
        assert len(server.mutating_requests) == 1

    @pytest.mark.asyncio
    async def test_clear_during_fetch_skips_cache(
        self,
        session: Session,
        server: FakeWikiServer,
    ) -> None:
        """clear() com busca em voo: o token chega, mas não fica no cache."""
        server.latency = 0.02
        fetcher = session.token_fetcher
        pending = asyncio.create_task(fetcher.fetch_token("en.wikipedia.org"))
        await asyncio.sleep(0.005)
        assert fetcher.pending_hosts == frozenset({"en.wikipedia.org"})

        fetcher.clear()
        token = await pending

        assert token.value == DEFAULT_CSRF_TOKEN
        assert fetcher.cached_token("en.wikipedia.org") is None
        assert fetcher.pending_hosts == frozenset()

    @pytest.mark.asyncio
    async def test_shared_failure_reaches_every_caller(
        self,
        session: Session,
        server: FakeWikiServer,
        components: URLComponents,
    ) -> None:
        """Falha da busca compartilhada chega a todas as operações."""
        server.latency = 0.02
        server.token_status = 503
        operations = [session.request_with_csrf(EditResult, components, body={}) for _ in range(3)]
        results = await asyncio.gather(*(operation.result() for operation in operations))

        assert all(isinstance(result.error, TokenFetchError) for result in results)
        assert all(op.state == CSRFOperationState.TOKEN_FETCH_FAILED for op in operations)
        assert len(server.token_requests) == 1
        assert server.mutating_requests == []
