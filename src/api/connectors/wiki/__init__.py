"""Connector do wiki — sessão HTTP compartilhada e pipeline CSRF.

Uso:
    from api.connectors.wiki import Session, URLComponents

    async with Session(settings) as session:
        task = session.json_dictionary_task(components)
        result = await task
"""

from api.connectors.wiki.article_api import (
    MEDIA_PATH,
    SUMMARY_ACCEPT,
    SUMMARY_PATH,
    ArticleReference,
    parse_article_url,
)
from api.connectors.wiki.auth_cache import AuthStateCache, ReadWriteLock
from api.connectors.wiki.components import (
    BodyEncoding,
    HttpMethod,
    URLComponents,
    encode_path_segment,
)
from api.connectors.wiki.cookies import CENTRAL_AUTH_COOKIE_PREFIX, CookieStore, make_cookie
from api.connectors.wiki.csrf import (
    AuthTokenFetcher,
    CSRFToken,
    CSRFTokenOperation,
    TokenContext,
    TokenPlacement,
)
from api.connectors.wiki.models import APIError, APIErrorResponse, CSRFTokenResponse
from api.connectors.wiki.request_builder import build_request
from api.connectors.wiki.results import (
    CodableResult,
    CSRFOperationResult,
    DataTaskResult,
    DecodableResult,
    JSONDictionaryResult,
)
from api.connectors.wiki.session import Session
from api.connectors.wiki.task_queue import TaskQueue

__all__ = [
    "CENTRAL_AUTH_COOKIE_PREFIX",
    "MEDIA_PATH",
    "SUMMARY_ACCEPT",
    "SUMMARY_PATH",
    "APIError",
    "APIErrorResponse",
    "ArticleReference",
    "AuthStateCache",
    "AuthTokenFetcher",
    "BodyEncoding",
    "CSRFOperationResult",
    "CSRFToken",
    "CSRFTokenOperation",
    "CSRFTokenResponse",
    "CodableResult",
    "CookieStore",
    "DataTaskResult",
    "DecodableResult",
    "HttpMethod",
    "JSONDictionaryResult",
    "ReadWriteLock",
    "Session",
    "TaskQueue",
    "TokenContext",
    "TokenPlacement",
    "URLComponents",
    "build_request",
    "encode_path_segment",
    "make_cookie",
    "parse_article_url",
]
