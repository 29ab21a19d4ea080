"""Contrato de obtenção de tokens CSRF."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from api.connectors.wiki.csrf.models import CSRFToken


class TokenFetcherProtocol(Protocol):
    """Obtém (e cacheia) o token CSRF de um host.

    `fetch_token` retorna None quando o host não exige token.
    Falhas levantam TokenFetchError.
    """

    async def fetch_token(self, host: str, *, scheme: str = "https") -> CSRFToken | None: ...

    def invalidate(self, host: str) -> None: ...

    def clear(self) -> None: ...
