"""Bootstrap da aplicação — inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
constrói a Session compartilhada e seus consumidores. Nada aqui é
singleton global: quem chama `build_application` é dono das instâncias.

Uso:
    from app.bootstrap import build_application

    services = build_application()
    try:
        summary = await services.session.fetch_summary(article_url)
    finally:
        await services.aclose()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from api.connectors.wiki import Session
from app.coordinators.background_fetch import BackgroundFetcherController
from app.infra.notifications import NotificationCenter
from app.observability import get_correlation_id
from app.services import WikidataDescriptionEditingController
from config.logging import configure_logging
from config.settings import BaseSettings, WikiSettings, get_base_settings, get_wiki_settings

if TYPE_CHECKING:
    import httpx

    from app.protocols import AuthenticationManagerProtocol

STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


@dataclass
class ApplicationServices:
    """Instâncias construídas pelo bootstrap."""

    settings: WikiSettings
    session: Session
    notification_center: NotificationCenter
    background_fetcher: BackgroundFetcherController
    wikidata_description_editing: WikidataDescriptionEditingController

    async def aclose(self) -> None:
        await self.session.aclose()


def initialize_app(base_settings: BaseSettings | None = None) -> None:
    """Configura logging estruturado JSON com correlation_id.

    Deve ser chamada uma vez no início do processo.
    """
    settings = base_settings or get_base_settings()
    configure_logging(
        level=settings.log_level,
        service_name=settings.service_name,
        correlation_id_getter=get_correlation_id,
    )


def initialize_test_app() -> None:
    """Inicializa logging para testes (DEBUG)."""
    configure_logging(
        level="DEBUG",
        service_name="wiki-session-core_test",
        correlation_id_getter=get_correlation_id,
    )


def validate_runtime_settings(
    wiki_settings: WikiSettings,
    base_settings: BaseSettings | None = None,
) -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.

    Raises:
        RuntimeError: Settings inválidas em ambiente estrito.
    """
    base = base_settings or get_base_settings()
    errors: list[str] = []
    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"wiki: {error}" for error in wiki_settings.validate())

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": base.environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": base.environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if base.environment in STRICT_VALIDATION_ENVS:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {base.environment}:\n{details}")


def build_application(
    wiki_settings: WikiSettings | None = None,
    *,
    base_settings: BaseSettings | None = None,
    authentication_manager: AuthenticationManagerProtocol | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    configure_logs: bool = True,
) -> ApplicationServices:
    """Constrói a Session e os serviços que dependem dela.

    Args:
        wiki_settings: Configuração do wiki (default: env)
        base_settings: Settings base (default: env)
        authentication_manager: Colaborador de logout em 401
        transport: Transporte httpx (testes)
        configure_logs: Se False, não altera o logging do processo

    Returns:
        ApplicationServices com as instâncias conectadas.
    """
    settings = wiki_settings or get_wiki_settings()
    if configure_logs:
        initialize_app(base_settings)
    validate_runtime_settings(settings, base_settings)

    notification_center = NotificationCenter()
    session = Session(
        settings,
        transport=transport,
        authentication_manager=authentication_manager,
        notification_center=notification_center,
    )
    services = ApplicationServices(
        settings=settings,
        session=session,
        notification_center=notification_center,
        background_fetcher=BackgroundFetcherController(),
        wikidata_description_editing=WikidataDescriptionEditingController(session),
    )
    logger.info(
        "application_built",
        extra={
            "component": "bootstrap",
            "api_host": settings.api_host,
            "max_concurrent_operations": settings.max_concurrent_operations,
        },
    )
    return services
