"""Componentes de URL e enums de requisição.

`URLComponents` descreve o destino de uma requisição antes de virar URL.
`url` retorna None quando os componentes não formam uma URL absoluta,
único caso em que a construção da requisição falha.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any
from urllib.parse import quote, urlencode, urlunsplit

# Caracteres permitidos em um segmento de path (RFC 3986 pchar, sem "/")
PATH_SEGMENT_SAFE_CHARS = "!$&'()*+,;=:@"


class HttpMethod(StrEnum):
    """Métodos HTTP suportados pela sessão."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class BodyEncoding(StrEnum):
    """Codificação do corpo da requisição."""

    JSON = "json"
    FORM = "form"


QueryItems = tuple[tuple[str, str], ...]


def _to_query_items(parameters: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> QueryItems:
    items = parameters.items() if isinstance(parameters, Mapping) else parameters
    return tuple((str(name), str(value)) for name, value in items)


def encode_path_segment(segment: str) -> str:
    """Percent-encode de um único segmento de path (inclusive "/")."""
    return quote(segment, safe=PATH_SEGMENT_SAFE_CHARS)


@dataclass(frozen=True, slots=True)
class URLComponents:
    """Componentes de uma URL de requisição.

    Attributes:
        scheme: Esquema (https)
        host: Host de destino
        path: Path já percent-encoded, começando com "/" (ou vazio)
        query: Itens de query em ordem
        port: Porta explícita (opcional)
    """

    scheme: str = ""
    host: str = ""
    path: str = ""
    query: QueryItems = ()
    port: int | None = None

    @property
    def url(self) -> str | None:
        """URL absoluta ou None se os componentes forem inválidos."""
        if not self.scheme or not self.host:
            return None
        if any(ch.isspace() or ch in "/?#@" for ch in self.host):
            return None
        if self.path and not self.path.startswith("/"):
            return None
        if self.port is not None and not 0 < self.port < 65536:
            return None

        netloc = self.host if self.port is None else f"{self.host}:{self.port}"
        query = urlencode(self.query, quote_via=quote) if self.query else ""
        return urlunsplit((self.scheme, netloc, self.path, query, ""))

    def with_query_parameters(
        self,
        parameters: Mapping[str, Any] | Iterable[tuple[str, Any]],
    ) -> URLComponents:
        """Substitui toda a query pelos parâmetros informados."""
        return replace(self, query=_to_query_items(parameters))

    def adding_query_item(self, name: str, value: Any) -> URLComponents:
        """Acrescenta um item de query (substitui itens com o mesmo nome)."""
        kept = tuple((k, v) for k, v in self.query if k != name)
        return replace(self, query=(*kept, (name, str(value))))

    def with_path_components(self, components: Iterable[str]) -> URLComponents:
        """Monta o path a partir de segmentos já codificados."""
        segments = [segment.strip("/") for segment in components if segment]
        return replace(self, path="/" + "/".join(segments) if segments else "")

    @property
    def query_dict(self) -> dict[str, str]:
        return dict(self.query)

    @classmethod
    def for_host(cls, host: str, *, scheme: str = "https", path: str = "") -> URLComponents:
        return cls(scheme=scheme, host=host, path=path)
