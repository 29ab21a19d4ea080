"""Publicação de descrições curtas no Wikidata.

Consumidor do pipeline CSRF: `wbsetdescription` via POST form com o
token no corpo. Cada chamada tem exatamente um desfecho (retorno ou
exceção).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from api.connectors.wiki import (
    APIErrorResponse,
    BodyEncoding,
    HttpMethod,
    TokenContext,
    TokenPlacement,
    URLComponents,
)
from app.constants.wiki import (
    DID_MAKE_AUTHORIZED_WIKIDATA_DESCRIPTION_EDIT,
    WBSETDESCRIPTION_QUERY,
    WIKIDATA_API_HOST,
    WIKIDATA_API_PATH,
    WIKIDATA_API_SCHEME,
)
from app.domain.wikidata import (
    ArticleDescriptionSource,
    WikidataAPIError,
    WikidataAPIResult,
    WikidataPublishingError,
    WikidataPublishingErrorReason,
)

if TYPE_CHECKING:
    from api.connectors.wiki import Session

logger = logging.getLogger(__name__)

WIKIDATA_TOKEN_CONTEXT = TokenContext(token_name="token", token_placement=TokenPlacement.BODY)


def wikidata_api_components() -> URLComponents:
    return URLComponents(
        scheme=WIKIDATA_API_SCHEME,
        host=WIKIDATA_API_HOST,
        path=WIKIDATA_API_PATH,
    )


class WikidataDescriptionEditingController:
    """Publica descrições de entidades do Wikidata pela Session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    async def publish(
        self,
        new_description: str,
        source: ArticleDescriptionSource,
        wikidata_id: str,
        language: str,
    ) -> WikidataAPIResult:
        """Publica a nova descrição.

        Args:
            new_description: Texto da descrição (ex: "Capital of England")
            source: Origem atual da descrição
            wikidata_id: ID da entidade com prefixo (ex: Q84)
            language: Código do idioma do wiki (ex: "en")

        Raises:
            WikidataPublishingError: Descrição local ou resposta não interpretada
            WikidataAPIError: API rejeitou a edição
            SessionError: Falha de transporte, token ou decode
        """
        if source == ArticleDescriptionSource.LOCAL:
            raise WikidataPublishingError(WikidataPublishingErrorReason.NOT_EDITABLE)

        body = {
            "language": language,
            "uselang": language,
            "id": wikidata_id,
            "value": new_description,
        }
        operation = self._session.request_with_csrf(
            WikidataAPIResult,
            wikidata_api_components().with_query_parameters(WBSETDESCRIPTION_QUERY),
            HttpMethod.POST,
            body,
            BodyEncoding.FORM,
            WIKIDATA_TOKEN_CONTEXT,
            error_model=APIErrorResponse,
            success_notification=DID_MAKE_AUTHORIZED_WIKIDATA_DESCRIPTION_EDIT,
        )
        outcome = await operation

        if outcome.error is not None:
            logger.warning(
                "wikidata_description_publish_failed",
                extra={"wikidata_id": wikidata_id, "error_type": type(outcome.error).__name__},
            )
            raise outcome.error

        if outcome.error_result is not None:
            api_error = outcome.error_result.error
            logger.info(
                "wikidata_description_rejected",
                extra={"wikidata_id": wikidata_id, "code": api_error.code},
            )
            raise WikidataAPIError(api_error.code, api_error.info)

        if outcome.result is None:
            raise WikidataPublishingError(WikidataPublishingErrorReason.API_RESULT_NOT_PARSED)

        logger.info(
            "wikidata_description_published",
            extra={
                "wikidata_id": wikidata_id,
                "language": language,
                "authorized": outcome.authorized,
            },
        )
        return outcome.result
