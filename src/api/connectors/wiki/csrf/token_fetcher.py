"""Obtenção e cache de tokens CSRF por host.

Token obtido via `action=query&meta=tokens&type=csrf` na Action API do
host. Cache invalidado em retry por token expirado e na limpeza de
cookies.

Buscas concorrentes para o mesmo host compartilham uma única requisição
em voo; cancelar um chamador não cancela a busca dos demais.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from api.connectors.wiki.components import URLComponents
from api.connectors.wiki.csrf.models import CSRFToken
from api.connectors.wiki.decoding import decode_model
from api.connectors.wiki.models import CSRFTokenResponse
from utils.errors import DecodeError, TokenFetchError, TransportError

if TYPE_CHECKING:
    from api.connectors.wiki.session import Session

logger = logging.getLogger(__name__)

TOKEN_QUERY_PARAMETERS: tuple[tuple[str, str], ...] = (
    ("action", "query"),
    ("meta", "tokens"),
    ("type", "csrf"),
    ("format", "json"),
)


class AuthTokenFetcher:
    """Fetcher padrão de tokens CSRF, com cache por host.

    Nunca retorna None: todo host da Action API exige token.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._tokens: dict[str, CSRFToken] = {}
        self._pending: dict[str, asyncio.Task[CSRFToken]] = {}

    def cached_token(self, host: str) -> CSRFToken | None:
        return self._tokens.get(host)

    @property
    def pending_hosts(self) -> frozenset[str]:
        """Hosts com busca de token em voo."""
        return frozenset(self._pending)

    async def fetch_token(self, host: str, *, scheme: str = "https") -> CSRFToken | None:
        """Retorna o token do host (cache, busca em voo ou rede).

        Raises:
            TokenFetchError: Transporte, status ou payload inválidos.
        """
        cached = self._tokens.get(host)
        if cached is not None:
            return cached

        task = self._pending.get(host)
        if task is None:
            task = asyncio.create_task(
                self._request_token(host, scheme),
                name=f"csrf-token-{host}",
            )
            self._pending[host] = task
            task.add_done_callback(lambda done, host=host: self._on_request_done(host, done))
        else:
            logger.debug("csrf_token_fetch_joined", extra={"host": host})
        return await asyncio.shield(task)

    def _on_request_done(self, host: str, task: asyncio.Task[CSRFToken]) -> None:
        if self._pending.get(host) is task:
            del self._pending[host]
        # Evita "exception was never retrieved" quando todos os chamadores saíram
        if not task.cancelled():
            task.exception()

    async def _request_token(self, host: str, scheme: str) -> CSRFToken:
        components = URLComponents(
            scheme=scheme,
            host=host,
            path=self._session.settings.api_path,
            query=TOKEN_QUERY_PARAMETERS,
        )
        request = self._session.request(components)
        if request is None:
            raise TokenFetchError(f"URL de token inválida para {host}", is_retryable=False)

        try:
            response = await self._session.send(request)
        except TransportError as exc:
            raise TokenFetchError(f"Falha ao obter token CSRF de {host}") from exc

        if response.status_code != 200:
            raise TokenFetchError(
                f"Token CSRF indisponível: HTTP {response.status_code}",
                is_retryable=response.status_code >= 500,
            )

        try:
            payload = decode_model(CSRFTokenResponse, response.content)
        except DecodeError as exc:
            raise TokenFetchError("Resposta de token CSRF inválida", is_retryable=False) from exc

        token = CSRFToken.from_value(payload.token)
        # invalidate()/clear() durante a busca: token servido, mas não cacheado
        if self._pending.get(host) is asyncio.current_task():
            self._tokens[host] = token
        logger.debug(
            "csrf_token_fetched",
            extra={"host": host, "is_authenticated": token.is_authenticated},
        )
        return token

    def invalidate(self, host: str) -> None:
        self._tokens.pop(host, None)
        self._pending.pop(host, None)

    def clear(self) -> None:
        self._tokens.clear()
        self._pending.clear()
