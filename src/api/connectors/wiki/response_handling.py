"""Tratamento centralizado de respostas.

Dois pontos de entrada por troca HTTP:
- `on_response_headers`: hook de resposta dos clientes httpx, executado
  logo após a extração de cookies e antes da leitura do corpo. Set-Cookie
  invalida o flag de autenticação cacheado.
- `handle`: executado com a resposta completa, antes de o resultado chegar
  ao chamador. 401 → logout iniciado pelo servidor + remoção de todos os
  cookies.

A resposta original segue inalterada para o chamador.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import httpx

from app.protocols import LogoutInitiator
from config.logging import log_auth_event

if TYPE_CHECKING:
    from app.protocols import AuthenticationManagerProtocol

logger = logging.getLogger(__name__)

UNAUTHORIZED_STATUS = 401


class ResponseHandler:
    """Gate de respostas compartilhado pelos clientes da sessão.

    Args:
        remove_all_cookies: Limpa o cookie store (e invalida o flag)
        invalidate_auth_state: Invalida só o flag de autenticação
        authentication_manager: Colaborador de logout (opcional)
    """

    def __init__(
        self,
        *,
        remove_all_cookies: Callable[[], int],
        invalidate_auth_state: Callable[[], None],
        authentication_manager: AuthenticationManagerProtocol | None = None,
    ) -> None:
        self._remove_all_cookies = remove_all_cookies
        self._invalidate_auth_state = invalidate_auth_state
        self.authentication_manager = authentication_manager
        self._unauthorized_count = 0

    @property
    def unauthorized_count(self) -> int:
        """Quantidade de respostas 401 tratadas."""
        return self._unauthorized_count

    async def on_response_headers(self, response: httpx.Response) -> None:
        """Hook httpx: cookies já estão no jar, corpo ainda não foi lido."""
        if "set-cookie" in response.headers:
            self._invalidate_auth_state()

    async def handle(self, response: httpx.Response) -> None:
        """Aplica os efeitos colaterais da resposta completa."""
        if response.status_code == UNAUTHORIZED_STATUS:
            await self._handle_unauthorized(response)

    async def _handle_unauthorized(self, response: httpx.Response) -> None:
        self._unauthorized_count += 1
        host = response.request.url.host

        manager = self.authentication_manager
        if manager is not None:
            try:
                await manager.logout(initiated_by=LogoutInitiator.SERVER)
            except Exception as exc:
                logger.warning(
                    "wiki_logout_failed",
                    extra={"host": host, "error_type": type(exc).__name__},
                )

        removed = self._remove_all_cookies()
        log_auth_event(
            logger,
            "wiki_unauthorized_response",
            domain=host,
            reason="http_401",
            cookie_count=removed,
        )
