"""Tipos do pipeline de token CSRF."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

# Token devolvido pelo MediaWiki para sessões anônimas
ANONYMOUS_TOKEN = "+\\"


class TokenPlacement(StrEnum):
    """Onde o token é injetado na requisição."""

    BODY = "body"
    QUERY = "query"


@dataclass(frozen=True, slots=True)
class TokenContext:
    """Nome do parâmetro do token e onde injetá-lo."""

    token_name: str = "token"
    token_placement: TokenPlacement = TokenPlacement.BODY


@dataclass(frozen=True, slots=True)
class CSRFToken:
    """Token CSRF obtido para um host.

    O valor nunca aparece em repr/logs.
    """

    value: str = field(repr=False)
    is_authenticated: bool

    @classmethod
    def from_value(cls, value: str) -> CSRFToken:
        return cls(value=value, is_authenticated=value != ANONYMOUS_TOKEN)
