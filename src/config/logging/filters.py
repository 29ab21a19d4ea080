"""Filters de logging para injeção de contexto e redação.

Campos injetados:
- correlation_id: ID de rastreamento (background fetch, requisição)
- service: Nome do serviço

Campos redigidos: valores de token CSRF e cookies nunca chegam ao output,
mesmo quando passados por engano via `extra`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

REDACTED_VALUE = "[redacted]"

# Nomes de atributos `extra` cujo valor é sempre sensível
SENSITIVE_FIELDS = frozenset(
    {
        "token",
        "csrf_token",
        "cookie",
        "cookies",
        "cookie_value",
        "set_cookie",
    }
)


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id e service em cada record de log.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
            Se não fornecida, usa string vazia como fallback.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Adiciona correlation_id e service ao record.

        Se correlation_id já foi passado via `extra`, preserva o valor.
        """
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        return True


class SensitiveFieldFilter(logging.Filter):
    """Substitui valores de campos sensíveis por REDACTED_VALUE.

    Não filtra records, apenas reescreve atributos.
    """

    def __init__(self, fields: frozenset[str] = SENSITIVE_FIELDS) -> None:
        super().__init__()
        self._fields = fields

    def filter(self, record: logging.LogRecord) -> bool:
        for name in self._fields:
            if name in record.__dict__:
                setattr(record, name, REDACTED_VALUE)
        return True
