"""Pipeline de token CSRF para requisições mutantes."""

from api.connectors.wiki.csrf.models import (
    ANONYMOUS_TOKEN,
    CSRFToken,
    TokenContext,
    TokenPlacement,
)
from api.connectors.wiki.csrf.operation import (
    MAX_TOKEN_RETRIES,
    CSRFTokenOperation,
    is_token_expired_error,
)
from api.connectors.wiki.csrf.token_fetcher import TOKEN_QUERY_PARAMETERS, AuthTokenFetcher

__all__ = [
    "ANONYMOUS_TOKEN",
    "MAX_TOKEN_RETRIES",
    "TOKEN_QUERY_PARAMETERS",
    "AuthTokenFetcher",
    "CSRFToken",
    "CSRFTokenOperation",
    "TokenContext",
    "TokenPlacement",
    "is_token_expired_error",
]
