"""Modelos de payload da Action API do MediaWiki.

Erros de domínio chegam com HTTP 200 e corpo `{"error": {...}}`; por isso
o modelo de erro exige o campo `error`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Códigos de erro que indicam token CSRF expirado/inválido
TOKEN_EXPIRED_ERROR_CODES = frozenset({"badtoken", "notoken"})


class APIError(BaseModel):
    """Erro de negócio retornado pela API."""

    model_config = ConfigDict(extra="ignore")

    code: str | None = Field(default=None, description="Código do erro (ex: badtoken).")
    info: str | None = Field(default=None, description="Descrição legível.")

    @property
    def is_token_expired(self) -> bool:
        return self.code in TOKEN_EXPIRED_ERROR_CODES


class APIErrorResponse(BaseModel):
    """Envelope de erro padrão `{"error": {"code", "info"}}`."""

    model_config = ConfigDict(extra="ignore")

    error: APIError


class _Tokens(BaseModel):
    model_config = ConfigDict(extra="ignore")

    csrftoken: str


class _TokensQuery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    tokens: _Tokens


class CSRFTokenResponse(BaseModel):
    """Resposta de `action=query&meta=tokens&type=csrf`."""

    model_config = ConfigDict(extra="ignore")

    query: _TokensQuery

    @property
    def token(self) -> str:
        return self.query.tokens.csrftoken
