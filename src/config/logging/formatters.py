"""Formatters de logging estruturado (JSON).

Campos obrigatórios em todo log: asctime, level, logger, message,
correlation_id, service.
"""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

# Campos obrigatórios em todo log estruturado
REQUIRED_LOG_FIELDS = (
    "asctime",
    "levelname",
    "name",
    "message",
    "correlation_id",
    "service",
)

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter(*, timestamp: bool = False) -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Args:
        timestamp: Se True, adiciona campo `timestamp` ISO-8601 (UTC).

    Exemplo de output:
        {
            "asctime": "2026-10-18 10:30:00,123",
            "level": "INFO",
            "logger": "api.connectors.wiki.session",
            "message": "wiki_request_completed",
            "correlation_id": "abc-123",
            "service": "wiki-session-core",
            "status_code": 200
        }
    """
    format_string = " ".join(f"%({name})s" for name in REQUIRED_LOG_FIELDS)

    return JsonFormatter(
        format_string,
        rename_fields=FIELD_RENAME_MAP,
        timestamp=timestamp,
    )
