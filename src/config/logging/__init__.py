"""Configuração de logging estruturado.

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="wiki-session-core")
    logger = get_logger(__name__)
    logger.info("wiki_request_completed", extra={"latency_ms": 42})

Campos obrigatórios em todo log: correlation_id, service, level, logger,
message, asctime.
"""

from config.logging.config import configure_logging, get_logger, log_auth_event
from config.logging.filters import (
    REDACTED_VALUE,
    SENSITIVE_FIELDS,
    CorrelationIdFilter,
    SensitiveFieldFilter,
)
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REDACTED_VALUE",
    "REQUIRED_LOG_FIELDS",
    "SENSITIVE_FIELDS",
    # Filters
    "CorrelationIdFilter",
    "SensitiveFieldFilter",
    # Configuração principal
    "configure_logging",
    # Formatters
    "create_json_formatter",
    "get_logger",
    "log_auth_event",
]
