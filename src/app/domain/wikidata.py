"""Modelos de domínio da edição de descrições no Wikidata."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ArticleDescriptionSource(StrEnum):
    """Origem da descrição curta de um artigo."""

    NONE = "none"
    CENTRAL = "central"
    LOCAL = "local"


class WikidataAPIResult(BaseModel):
    """Resposta de sucesso de `wbsetdescription`."""

    model_config = ConfigDict(extra="ignore")

    success: int = Field(..., description="1 quando a edição foi aplicada.")

    @property
    def succeeded(self) -> bool:
        return self.success == 1


class WikidataPublishingErrorReason(StrEnum):
    """Motivos de falha local na publicação."""

    INVALID_ARTICLE_URL = "invalid_article_url"
    API_RESULT_NOT_PARSED = "api_result_not_parsed"
    NOT_EDITABLE = "not_editable"
    UNKNOWN = "unknown"


class WikidataPublishingError(Exception):
    """Publicação não pôde ser feita ou interpretada."""

    def __init__(self, reason: WikidataPublishingErrorReason) -> None:
        super().__init__(f"Falha ao publicar descrição: {reason.value}")
        self.reason = reason


class WikidataAPIError(Exception):
    """Erro de negócio devolvido pela API do Wikidata."""

    def __init__(self, code: str | None, info: str | None) -> None:
        super().__init__(info or code or "Erro desconhecido da API do Wikidata")
        self.code = code
        self.info = info


def is_wikidata_description_editable(
    wikidata_id: str | None,
    source: ArticleDescriptionSource,
) -> bool:
    """Descrição editável: entidade conhecida e descrição não local."""
    return wikidata_id is not None and source != ArticleDescriptionSource.LOCAL
