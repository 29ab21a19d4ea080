"""Busca de resumo e mídia de artigos via REST API.

Artigos são identificados pela URL `https://<host>/wiki/<Título>`. O path
base da REST API depende do host (regra configurável em WikiSettings).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote, urlsplit

from api.connectors.wiki.components import URLComponents, encode_path_segment
from api.connectors.wiki.results import JSONDictionaryResult
from utils.errors import InvalidRequestParametersError

logger = logging.getLogger(__name__)

# O profile é case-sensitive no servidor
SUMMARY_ACCEPT = (
    'application/json; charset=utf-8; profile="https://www.mediawiki.org/wiki/Specs/Summary/1.1.2"'
)
SUMMARY_PATH = "page/summary"
MEDIA_PATH = "page/media"
ARTICLE_PATH_PREFIX = "/wiki/"


@dataclass(frozen=True, slots=True)
class ArticleReference:
    """Site e título (com underscores) de um artigo."""

    scheme: str
    host: str
    title: str

    @property
    def database_key(self) -> str:
        """Chave estável do artigo (URL canônica sem fragmento)."""
        return f"{self.scheme}://{self.host}{ARTICLE_PATH_PREFIX}{encode_path_segment(self.title)}"


def parse_article_url(article_url: str) -> ArticleReference | None:
    """Extrai site e título de uma URL de artigo; None se não for artigo."""
    parts = urlsplit(article_url)
    if not parts.scheme or not parts.hostname:
        return None
    if not parts.path.startswith(ARTICLE_PATH_PREFIX):
        return None
    title = unquote(parts.path[len(ARTICLE_PATH_PREFIX) :]).replace(" ", "_")
    if not title:
        return None
    return ArticleReference(scheme=parts.scheme, host=parts.hostname, title=title)


class ArticleAPIMixin:
    """Operações da REST API sobre a Session."""

    def api_task(
        self,
        article_url: str,
        path: str,
        *,
        accept: str = SUMMARY_ACCEPT,
    ) -> asyncio.Task[JSONDictionaryResult] | None:
        """Agenda GET `<base REST>/<path>/<título>` no host do artigo.

        Returns:
            Task, ou None se a URL do artigo não puder ser interpretada.
        """
        article = parse_article_url(article_url)
        if article is None:
            return None

        base_path = self.settings.rest_api_base_path_for_host(article.host)
        components = URLComponents(scheme=article.scheme, host=article.host).with_path_components(
            [*base_path, path, encode_path_segment(article.title)]
        )
        request = self.request(components, accept=accept)
        if request is None:
            return None
        return self.json_dictionary_task_for_request(request)

    async def fetch_api(self, path: str, article_url: str) -> JSONDictionaryResult:
        task = self.api_task(article_url, path)
        if task is None:
            error = InvalidRequestParametersError(f"URL de artigo inválida: {article_url}")
            return JSONDictionaryResult(result=None, response=None, error=error)
        return await task

    async def fetch_summary(self, article_url: str) -> JSONDictionaryResult:
        return await self.fetch_api(SUMMARY_PATH, article_url)

    async def fetch_media(self, article_url: str) -> JSONDictionaryResult:
        return await self.fetch_api(MEDIA_PATH, article_url)

    async def fetch_article_summaries(self, article_urls: Iterable[str]) -> dict[str, dict[str, Any]]:
        """Busca resumos em paralelo, indexados pela chave do artigo.

        Artigos com falha, status diferente de 200 ou sem resumo ficam de
        fora do resultado.
        """
        urls = list(article_urls)
        results = await asyncio.gather(*(self.fetch_summary(url) for url in urls))

        summaries: dict[str, dict[str, Any]] = {}
        for url, outcome in zip(urls, results, strict=True):
            article = parse_article_url(url)
            if article is None or outcome.result is None:
                continue
            if outcome.response is None or outcome.response.status_code != 200:
                continue
            summaries[article.database_key] = outcome.result

        logger.debug(
            "article_summaries_fetched",
            extra={"requested": len(urls), "received": len(summaries)},
        )
        return summaries
