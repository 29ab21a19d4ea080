"""Session — ponto único de saída HTTP para o wiki.

Responsabilidades:
- Construir requisições (Accept JSON, User-Agent versionado)
- Multiplexar cliente padrão e cliente de rede restrita (mesmo cookie jar)
- Limitar concorrência via TaskQueue
- Cachear o flag de autenticação (cookies centralauth_)
- Invalidar o flag de autenticação ao receber Set-Cookie (hook httpx)
- Encaminhar toda resposta ao ResponseHandler (401 → logout + limpeza)
- Decodificar respostas (bytes, dict, tipado, sucesso/erro)
- Enfileirar operações mutantes protegidas por token CSRF

Construída uma vez pelo bootstrap e injetada onde for necessária.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from api.connectors.wiki.article_api import ArticleAPIMixin
from api.connectors.wiki.auth_cache import AuthStateCache
from api.connectors.wiki.components import BodyEncoding, HttpMethod, URLComponents
from api.connectors.wiki.cookies import CENTRAL_AUTH_COOKIE_PREFIX, CookieStore
from api.connectors.wiki.csrf import AuthTokenFetcher, CSRFTokenOperation, TokenContext
from api.connectors.wiki.decoding import decode_json_dictionary, decode_model
from api.connectors.wiki.models import APIErrorResponse
from api.connectors.wiki.request_builder import ACCEPT_JSON, build_request
from api.connectors.wiki.response_handling import ResponseHandler
from api.connectors.wiki.results import (
    CodableResult,
    DataTaskResult,
    DecodableResult,
    JSONDictionaryResult,
)
from api.connectors.wiki.task_queue import TaskQueue
from app.observability import record_request_latency
from config.logging import log_auth_event
from config.settings import WikiSettings, get_wiki_settings
from utils.errors import DecodeError, InvalidRequestParametersError, TransportError

if TYPE_CHECKING:
    from http.cookiejar import CookieJar

    from app.protocols import (
        AuthenticationManagerProtocol,
        NotificationPublisherProtocol,
        TokenFetcherProtocol,
    )

logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E")

USAGE_REPORTS_HEADER = "X-WMF-UUID"


class Session(ArticleAPIMixin):
    """Fachada de sessão HTTP compartilhada.

    Args:
        settings: Configuração do wiki (default: env)
        transport: Transporte httpx do cliente padrão (testes usam MockTransport)
        restricted_transport: Transporte do cliente de rede restrita
        cookie_jar: Jar compartilhado (default: novo CookieJar)
        authentication_manager: Colaborador de logout em 401
        notification_center: Publicador das notificações de sucesso CSRF
        token_fetcher: Fetcher de token CSRF (default: AuthTokenFetcher)
    """

    def __init__(
        self,
        settings: WikiSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        restricted_transport: httpx.AsyncBaseTransport | None = None,
        cookie_jar: CookieJar | None = None,
        authentication_manager: AuthenticationManagerProtocol | None = None,
        notification_center: NotificationPublisherProtocol | None = None,
        token_fetcher: TokenFetcherProtocol | None = None,
    ) -> None:
        self._settings = settings or get_wiki_settings()
        self._cookie_store = CookieStore(cookie_jar)
        self._auth_state = AuthStateCache(self._compute_is_authenticated)
        self._queue = TaskQueue(self._settings.max_concurrent_operations)
        self._token_fetcher: TokenFetcherProtocol = token_fetcher or AuthTokenFetcher(self)
        self._notification_center = notification_center
        self._should_send_usage_reports = False

        self._response_handler = ResponseHandler(
            remove_all_cookies=self.remove_all_cookies,
            invalidate_auth_state=self._auth_state.invalidate,
            authentication_manager=authentication_manager,
        )

        timeout = httpx.Timeout(self._settings.request_timeout_seconds)
        # Invalida o flag assim que o jar recebe Set-Cookie, antes do corpo
        event_hooks = {"response": [self._response_handler.on_response_headers]}
        self._client = httpx.AsyncClient(
            cookies=self._cookie_store.jar,
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
            event_hooks=event_hooks,
        )
        restricted_limits = httpx.Limits(
            max_connections=self._settings.restricted_network_max_connections,
        )
        self._restricted_client = httpx.AsyncClient(
            cookies=self._cookie_store.jar,
            timeout=timeout,
            transport=restricted_transport or transport,
            limits=restricted_limits,
            follow_redirects=True,
            event_hooks=event_hooks,
        )

    # ──────────────────────────────────────────────────────────────────────
    # Colaboradores e estado
    # ──────────────────────────────────────────────────────────────────────

    @property
    def settings(self) -> WikiSettings:
        return self._settings

    @property
    def queue(self) -> TaskQueue:
        return self._queue

    @property
    def cookie_store(self) -> CookieStore:
        return self._cookie_store

    @property
    def token_fetcher(self) -> TokenFetcherProtocol:
        return self._token_fetcher

    @property
    def response_handler(self) -> ResponseHandler:
        return self._response_handler

    @property
    def authentication_manager(self) -> AuthenticationManagerProtocol | None:
        return self._response_handler.authentication_manager

    @authentication_manager.setter
    def authentication_manager(self, manager: AuthenticationManagerProtocol | None) -> None:
        self._response_handler.authentication_manager = manager

    @property
    def notification_center(self) -> NotificationPublisherProtocol | None:
        return self._notification_center

    @notification_center.setter
    def notification_center(self, center: NotificationPublisherProtocol | None) -> None:
        self._notification_center = center

    @property
    def should_send_usage_reports(self) -> bool:
        return self._should_send_usage_reports

    @should_send_usage_reports.setter
    def should_send_usage_reports(self, enabled: bool) -> None:
        self._should_send_usage_reports = enabled

    def _default_headers(self) -> dict[str, str]:
        install_id = self._settings.app_install_id
        if self._should_send_usage_reports and install_id:
            return {USAGE_REPORTS_HEADER: install_id}
        return {}

    # ──────────────────────────────────────────────────────────────────────
    # Autenticação e cookies
    # ──────────────────────────────────────────────────────────────────────

    @property
    def is_authenticated(self) -> bool:
        """Flag de autenticação (cacheado até a próxima mutação de cookies)."""
        return self._auth_state.get()

    def _compute_is_authenticated(self) -> bool:
        return self.has_valid_central_auth_cookies(
            self._settings.central_auth_cookie_source_domain
        )

    def has_valid_central_auth_cookies(self, domain: str) -> bool:
        """True se há cookies centralauth_ para o domínio e nenhum expirado."""
        return self._cookie_store.has_valid_cookies_with_name_prefix(
            CENTRAL_AUTH_COOKIE_PREFIX, domain
        )

    def clone_central_auth_cookies(self) -> int:
        """Copia cookies centralauth_ do domínio de origem para os domínios alvo.

        Returns:
            Quantidade de cookies gravados.
        """
        source = self._settings.central_auth_cookie_source_domain
        copied = self._cookie_store.copy_cookies_with_name_prefix(
            CENTRAL_AUTH_COOKIE_PREFIX,
            source,
            self._settings.central_auth_cookie_target_domains,
        )
        self._auth_state.invalidate()
        log_auth_event(
            logger,
            "central_auth_cookies_cloned",
            domain=source,
            cookie_count=copied,
        )
        return copied

    def remove_all_cookies(self) -> int:
        """Remove todos os cookies e tokens CSRF cacheados.

        Returns:
            Quantidade de cookies removidos.
        """
        removed = self._cookie_store.remove_all()
        self._auth_state.invalidate()
        self._token_fetcher.clear()
        log_auth_event(logger, "cookies_removed", cookie_count=removed)
        return removed

    # ──────────────────────────────────────────────────────────────────────
    # Construção e envio
    # ──────────────────────────────────────────────────────────────────────

    def request(
        self,
        components: URLComponents,
        method: HttpMethod = HttpMethod.GET,
        body: Any = None,
        encoding: BodyEncoding = BodyEncoding.JSON,
        *,
        accept: str = ACCEPT_JSON,
    ) -> httpx.Request | None:
        """Monta a requisição; None se os componentes não formam URL."""
        return build_request(
            components,
            method,
            body,
            encoding,
            user_agent=self._settings.versioned_user_agent,
            headers=self._default_headers(),
            accept=accept,
        )

    async def send(
        self,
        request: httpx.Request,
        *,
        restricted_network: bool = False,
    ) -> httpx.Response:
        """Executa uma troca HTTP fora da fila.

        Toda resposta passa pelo ResponseHandler antes de ser retornada.

        Raises:
            TransportError: Falha de conexão, timeout ou protocolo.
        """
        client = self._restricted_client if restricted_network else self._client
        httpx.Cookies(self._cookie_store.jar).set_cookie_header(request)
        host = request.url.host
        started = time.perf_counter()
        try:
            response = await client.send(request)
        except httpx.HTTPError as exc:
            record_request_latency(
                request.method, host, None, (time.perf_counter() - started) * 1000
            )
            logger.warning(
                "wiki_request_failed",
                extra={
                    "method": request.method,
                    "host": host,
                    "error_type": type(exc).__name__,
                    "restricted_network": restricted_network,
                },
            )
            retryable = isinstance(exc, (httpx.TimeoutException, httpx.NetworkError))
            raise TransportError(
                f"Falha de transporte: {type(exc).__name__}",
                is_retryable=retryable,
            ) from exc

        record_request_latency(
            request.method, host, response.status_code, (time.perf_counter() - started) * 1000
        )
        await self._response_handler.handle(response)
        return response

    # ──────────────────────────────────────────────────────────────────────
    # Tasks enfileiradas
    # ──────────────────────────────────────────────────────────────────────

    def data_task(
        self,
        components: URLComponents,
        method: HttpMethod = HttpMethod.GET,
        body: Any = None,
        encoding: BodyEncoding = BodyEncoding.JSON,
        *,
        restricted_network: bool = False,
    ) -> asyncio.Task[DataTaskResult] | None:
        """Agenda uma troca que retorna os bytes brutos."""
        request = self.request(components, method, body, encoding)
        if request is None:
            return None
        return self._queue.submit(self._data_exchange(request, restricted_network))

    def json_dictionary_task(
        self,
        components: URLComponents,
        method: HttpMethod = HttpMethod.GET,
        body: Any = None,
        encoding: BodyEncoding = BodyEncoding.JSON,
        *,
        authorized: bool | None = None,
    ) -> asyncio.Task[JSONDictionaryResult] | None:
        """Agenda uma troca decodificada como objeto JSON genérico."""
        request = self.request(components, method, body, encoding)
        if request is None:
            return None
        return self.json_dictionary_task_for_request(request, authorized=authorized)

    def json_dictionary_task_for_request(
        self,
        request: httpx.Request,
        *,
        authorized: bool | None = None,
    ) -> asyncio.Task[JSONDictionaryResult]:
        return self._queue.submit(self._json_dictionary_exchange(request, authorized))

    def json_decodable_task(
        self,
        model: type[T],
        components: URLComponents,
        method: HttpMethod = HttpMethod.GET,
        body: Any = None,
        encoding: BodyEncoding = BodyEncoding.JSON,
        *,
        authorized: bool | None = None,
    ) -> asyncio.Task[DecodableResult[T]] | None:
        """Agenda uma troca decodificada para `model` (apenas HTTP 200)."""
        request = self.request(components, method, body, encoding)
        if request is None:
            return None
        return self._queue.submit(self._decodable_exchange(request, model, authorized))

    def json_codable_task(
        self,
        model: type[T],
        error_model: type[E],
        components: URLComponents,
        method: HttpMethod = HttpMethod.GET,
        body: Any = None,
        encoding: BodyEncoding = BodyEncoding.JSON,
    ) -> asyncio.Task[CodableResult[T, E]] | None:
        """Agenda uma troca com decode duplo: sucesso `model` ou erro `error_model`."""
        request = self.request(components, method, body, encoding)
        if request is None:
            return None
        return self._queue.submit(self._codable_exchange(request, model, error_model))

    def request_with_csrf(
        self,
        model: type[T],
        components: URLComponents,
        method: HttpMethod = HttpMethod.POST,
        body: Mapping[str, Any] | Any = None,
        encoding: BodyEncoding = BodyEncoding.JSON,
        token_context: TokenContext | None = None,
        *,
        error_model: type[E] = APIErrorResponse,  # type: ignore[assignment]
        success_notification: str | None = None,
    ) -> CSRFTokenOperation[T, E]:
        """Enfileira uma operação mutante protegida por token CSRF.

        Raises:
            InvalidRequestParametersError: Token no corpo com corpo não-mapping.
        """
        operation: CSRFTokenOperation[T, E] = CSRFTokenOperation(
            self,
            self._token_fetcher,
            model=model,
            error_model=error_model,
            components=components,
            method=method,
            body=body,
            encoding=encoding,
            token_context=token_context,
            success_notification=success_notification,
            notification_center=self._notification_center,
        )
        operation.start(self._queue)
        return operation

    async def perform_codable_request(
        self,
        model: type[T],
        error_model: type[E],
        components: URLComponents,
        *,
        method: HttpMethod = HttpMethod.GET,
        body: Any = None,
        encoding: BodyEncoding = BodyEncoding.JSON,
    ) -> CodableResult[T, E]:
        """Troca com decode duplo executada fora da fila.

        Usada por operações que já ocupam uma vaga (pipeline CSRF).
        """
        request = self.request(components, method, body, encoding)
        if request is None:
            error = InvalidRequestParametersError("Componentes não formam URL válida")
            return CodableResult(result=None, error_result=None, response=None, error=error)
        return await self._codable_exchange(request, model, error_model)

    # ──────────────────────────────────────────────────────────────────────
    # Trocas (corpo das tasks)
    # ──────────────────────────────────────────────────────────────────────

    async def _data_exchange(
        self,
        request: httpx.Request,
        restricted_network: bool = False,
    ) -> DataTaskResult:
        try:
            response = await self.send(request, restricted_network=restricted_network)
        except TransportError as exc:
            return DataTaskResult(data=None, response=None, error=exc)
        return DataTaskResult(data=response.content, response=response)

    async def _json_dictionary_exchange(
        self,
        request: httpx.Request,
        authorized: bool | None = None,
    ) -> JSONDictionaryResult:
        exchange = await self._data_exchange(request)
        if exchange.error is not None:
            return JSONDictionaryResult(None, exchange.response, authorized, exchange.error)
        try:
            result = decode_json_dictionary(exchange.data)
        except DecodeError as exc:
            logger.error(
                "wiki_json_parse_failed",
                extra={"host": request.url.host, "status_code": exchange.status_code},
            )
            return JSONDictionaryResult(None, exchange.response, authorized, exc)
        return JSONDictionaryResult(result, exchange.response, authorized)

    async def _decodable_exchange(
        self,
        request: httpx.Request,
        model: type[T],
        authorized: bool | None = None,
    ) -> DecodableResult[T]:
        exchange = await self._data_exchange(request)
        if exchange.error is not None:
            return DecodableResult(None, exchange.response, authorized, exchange.error)
        if exchange.status_code != 200:
            return DecodableResult(None, exchange.response, authorized)
        try:
            result = decode_model(model, exchange.data or b"")
        except DecodeError as exc:
            return DecodableResult(None, exchange.response, authorized, exc)
        return DecodableResult(result, exchange.response, authorized)

    async def _codable_exchange(
        self,
        request: httpx.Request,
        model: type[T],
        error_model: type[E],
    ) -> CodableResult[T, E]:
        exchange = await self._data_exchange(request)
        if exchange.error is not None:
            return CodableResult(None, None, exchange.response, exchange.error)

        content = exchange.data or b""
        success_error: DecodeError | None = None
        if exchange.status_code == 200:
            try:
                return CodableResult(decode_model(model, content), None, exchange.response)
            except DecodeError as exc:
                success_error = exc

        try:
            error_result = decode_model(error_model, content)
        except DecodeError as exc:
            return CodableResult(None, None, exchange.response, success_error or exc)
        return CodableResult(None, error_result, exchange.response)

    # ──────────────────────────────────────────────────────────────────────
    # Ciclo de vida
    # ──────────────────────────────────────────────────────────────────────

    async def aclose(self) -> None:
        """Cancela tasks pendentes e fecha os clientes HTTP."""
        self._queue.cancel_all()
        await self._queue.join()
        await asyncio.gather(self._client.aclose(), self._restricted_client.aclose())
        logger.info("wiki_session_closed", extra={"max_in_flight": self._queue.max_in_flight})

    async def __aenter__(self) -> Session:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
