"""Construção de requisições HTTP a partir de componentes.

Função pura: (componentes, método, corpo, codificação) → httpx.Request.
Sem IO; o envio fica com a Session.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

import httpx

from api.connectors.wiki.components import BodyEncoding, HttpMethod, URLComponents

logger = logging.getLogger(__name__)

ACCEPT_JSON = "application/json; charset=utf-8"
CONTENT_TYPE_JSON = "application/json; charset=utf-8"
CONTENT_TYPE_FORM = "application/x-www-form-urlencoded; charset=utf-8"


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_form_body(parameters: Mapping[str, Any]) -> bytes:
    """Serializa parâmetros como application/x-www-form-urlencoded."""
    pairs = [(str(name), _form_value(value)) for name, value in parameters.items()]
    return urlencode(pairs).encode("utf-8")


def encode_json_body(body: Any) -> bytes:
    """Serializa corpo como JSON UTF-8.

    Raises:
        TypeError/ValueError: Se o corpo não for serializável.
    """
    return json.dumps(body, ensure_ascii=False, allow_nan=False).encode("utf-8")


def build_request(
    components: URLComponents,
    method: HttpMethod = HttpMethod.GET,
    body: Any = None,
    encoding: BodyEncoding = BodyEncoding.JSON,
    *,
    user_agent: str,
    headers: Mapping[str, str] | None = None,
    accept: str = ACCEPT_JSON,
) -> httpx.Request | None:
    """Monta uma requisição completa.

    Accept JSON e User-Agent versionado são sempre definidos. Corpo JSON
    não serializável é logado e a requisição segue sem corpo. Corpo FORM
    só é aceito como mapping.

    Args:
        components: Destino da requisição
        method: Método HTTP
        body: Parâmetros do corpo (None = sem corpo)
        encoding: JSON ou FORM
        user_agent: User-Agent versionado
        headers: Headers adicionais (não sobrescrevem Accept/User-Agent)
        accept: Valor do header Accept (REST API usa profile próprio)

    Returns:
        httpx.Request, ou None se a URL não puder ser construída.
    """
    url = components.url
    if url is None:
        logger.warning(
            "wiki_request_invalid_url",
            extra={"host": components.host or None, "method": method.value},
        )
        return None

    request_headers: dict[str, str] = dict(headers or {})
    request_headers["Accept"] = accept
    request_headers["User-Agent"] = user_agent

    content: bytes | None = None
    if body is not None:
        if encoding == BodyEncoding.JSON:
            try:
                content = encode_json_body(body)
                request_headers["Content-Type"] = CONTENT_TYPE_JSON
            except (TypeError, ValueError) as exc:
                logger.error(
                    "wiki_request_json_serialization_failed",
                    extra={"error_type": type(exc).__name__, "host": components.host},
                )
        elif isinstance(body, Mapping):
            content = encode_form_body(body)
            request_headers["Content-Type"] = CONTENT_TYPE_FORM

    return httpx.Request(method.value, url, headers=request_headers, content=content)
