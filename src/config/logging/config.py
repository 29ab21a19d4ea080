"""Configuração centralizada de logging.

Uso:
    from config.logging import configure_logging, get_logger

    # No bootstrap da aplicação
    configure_logging(level="INFO", service_name="wiki-session-core")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("wiki_request_completed", extra={"status_code": 200})

Nunca logar valores de cookies ou tokens.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import CorrelationIdFilter, SensitiveFieldFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "wiki-session-core"

# Bibliotecas de transporte muito verbosas em DEBUG
_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado para o serviço.

    Deve ser chamada uma vez no bootstrap.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função opcional que retorna o correlation_id
            do contexto atual (ex: de ContextVar).

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(CorrelationIdFilter(service_name, correlation_id_getter))
    handler.addFilter(SensitiveFieldFilter())

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substituir handlers existentes para evitar duplicação
    root.handlers = [handler]

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo especificado."""
    return logging.getLogger(name)


def log_auth_event(
    logger: logging.Logger,
    event: str,
    *,
    domain: str | None = None,
    reason: str | None = None,
    cookie_count: int | None = None,
) -> None:
    """Log observável de mutação de estado de autenticação (sem PII).

    Registra clonagem/remoção de cookies e logout forçado. Apenas
    contagens e domínios, nunca nomes ou valores de cookies.

    Args:
        logger: Logger instance.
        event: Nome do evento (ex: "central_auth_cookies_cloned").
        domain: Domínio afetado (quando aplicável).
        reason: Motivo (ex: "http_401").
        cookie_count: Quantidade de cookies afetados.
    """
    extra: dict[str, object] = {"component": "auth_state", "auth_event": event}
    if domain:
        extra["domain"] = domain
    if reason:
        extra["reason"] = reason
    if cookie_count is not None:
        extra["cookie_count"] = cookie_count

    logger.info(event, extra=extra)
