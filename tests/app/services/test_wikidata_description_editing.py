"""Testes da publicação de descrições no Wikidata."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from api.connectors.wiki import Session
from app.constants.wiki import DID_MAKE_AUTHORIZED_WIKIDATA_DESCRIPTION_EDIT
from app.domain.wikidata import (
    ArticleDescriptionSource,
    WikidataAPIError,
    WikidataPublishingError,
    WikidataPublishingErrorReason,
    is_wikidata_description_editable,
)
from app.infra.notifications import NotificationCenter
from app.services import WikidataDescriptionEditingController
from config.settings import WikiSettings
from tests.fakes.fake_wiki_server import DEFAULT_CSRF_TOKEN, FakeWikiServer, form_body
from utils.errors import DecodeError, TokenFetchError

WIKIDATA_PATH = "/w/api.php"


@pytest.fixture
def server() -> FakeWikiServer:
    return FakeWikiServer()


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture
def controller(server: FakeWikiServer, notifications: NotificationCenter) -> WikidataDescriptionEditingController:
    session = Session(WikiSettings(), transport=server.transport(), notification_center=notifications)
    return WikidataDescriptionEditingController(session)


class TestEditability:
    @pytest.mark.parametrize(
        ("wikidata_id", "source", "expected"),
        [
            ("Q84", ArticleDescriptionSource.CENTRAL, True),
            ("Q84", ArticleDescriptionSource.NONE, True),
            ("Q84", ArticleDescriptionSource.LOCAL, False),
            (None, ArticleDescriptionSource.CENTRAL, False),
        ],
    )
    def test_is_editable(self, wikidata_id: str | None, source: ArticleDescriptionSource, expected: bool) -> None:
        assert is_wikidata_description_editable(wikidata_id, source) is expected


class TestPublish:
    """Testes de WikidataDescriptionEditingController.publish."""

    @pytest.mark.asyncio
    async def test_local_description_not_editable(
        self,
        controller: WikidataDescriptionEditingController,
        server: FakeWikiServer,
    ) -> None:
        """Descrição local falha sem nenhuma requisição."""
        with pytest.raises(WikidataPublishingError) as exc_info:
            await controller.publish("Capital of England", ArticleDescriptionSource.LOCAL, "Q84", "en")

        assert exc_info.value.reason == WikidataPublishingErrorReason.NOT_EDITABLE
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_successful_publish(
        self,
        controller: WikidataDescriptionEditingController,
        server: FakeWikiServer,
        notifications: NotificationCenter,
    ) -> None:
        """POST form com token no corpo e notificação de edição autorizada."""
        server.respond(WIKIDATA_PATH, 200, {"success": 1})
        observer = MagicMock()
        notifications.subscribe(DID_MAKE_AUTHORIZED_WIKIDATA_DESCRIPTION_EDIT, observer)

        result = await controller.publish("Capital of England", ArticleDescriptionSource.CENTRAL, "Q84", "en")

        assert result.succeeded
        (edit,) = server.mutating_requests
        assert edit.method == "POST"
        assert edit.url.host == "www.wikidata.org"
        assert dict(edit.url.params) == {
            "action": "wbsetdescription",
            "format": "json",
            "formatversion": "2",
        }
        assert form_body(edit) == {
            "language": "en",
            "uselang": "en",
            "id": "Q84",
            "value": "Capital of England",
            "token": DEFAULT_CSRF_TOKEN,
        }
        observer.assert_called_once_with(DID_MAKE_AUTHORIZED_WIKIDATA_DESCRIPTION_EDIT)

    @pytest.mark.asyncio
    async def test_anonymous_edit_does_not_notify(
        self,
        controller: WikidataDescriptionEditingController,
        server: FakeWikiServer,
        notifications: NotificationCenter,
    ) -> None:
        server.csrf_tokens = ["+\\"]
        server.respond(WIKIDATA_PATH, 200, {"success": 1})
        observer = MagicMock()
        notifications.subscribe(DID_MAKE_AUTHORIZED_WIKIDATA_DESCRIPTION_EDIT, observer)

        await controller.publish("Cidade", ArticleDescriptionSource.NONE, "Q84", "pt")

        observer.assert_not_called()

    @pytest.mark.asyncio
    async def test_api_error_raised(
        self,
        controller: WikidataDescriptionEditingController,
        server: FakeWikiServer,
    ) -> None:
        """Erro de negócio da API vira WikidataAPIError."""
        server.respond(
            WIKIDATA_PATH,
            200,
            {"error": {"code": "modification-failed", "info": "Descrição duplicada"}},
        )

        with pytest.raises(WikidataAPIError) as exc_info:
            await controller.publish("Dup", ArticleDescriptionSource.CENTRAL, "Q84", "en")

        assert exc_info.value.code == "modification-failed"
        assert exc_info.value.info == "Descrição duplicada"
        assert len(server.mutating_requests) == 1

    @pytest.mark.asyncio
    async def test_token_failure_raised(
        self,
        controller: WikidataDescriptionEditingController,
        server: FakeWikiServer,
    ) -> None:
        """Falha no token: exceção de sessão, edição não enviada."""
        server.token_status = 500

        with pytest.raises(TokenFetchError):
            await controller.publish("X", ArticleDescriptionSource.CENTRAL, "Q84", "en")

        assert server.mutating_requests == []

    @pytest.mark.asyncio
    async def test_unparsable_response(
        self,
        controller: WikidataDescriptionEditingController,
        server: FakeWikiServer,
    ) -> None:
        """Resposta sem sucesso nem erro reconhecível: DecodeError."""
        server.respond(WIKIDATA_PATH, 200, {})

        with pytest.raises(DecodeError):
            await controller.publish("X", ArticleDescriptionSource.CENTRAL, "Q84", "en")
