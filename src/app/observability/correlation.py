"""Gerenciamento de correlation_id para rastreamento.

O correlation_id identifica uma unidade de trabalho (ex: um background
fetch) e é injetado nos logs pelo CorrelationIdFilter. Usa ContextVar,
portanto é isolado por task asyncio.

Uso:
    from app.observability import bound_correlation_id

    with bound_correlation_id(identifier):
        await run_fetchers()
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (ou string vazia)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Args:
        correlation_id: ID a definir. Se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    return _correlation_id.set(correlation_id or generate_correlation_id())


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    """Gera um novo correlation_id (UUID v4)."""
    return str(uuid.uuid4())


@contextmanager
def bound_correlation_id(correlation_id: str | None = None) -> Iterator[str]:
    """Vincula um correlation_id ao contexto durante o bloco `with`.

    Tasks criadas dentro do bloco herdam o valor (cópia do contexto).
    """
    token = set_correlation_id(correlation_id)
    try:
        yield _correlation_id.get()
    finally:
        reset_correlation_id(token)
