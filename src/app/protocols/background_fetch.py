"""Contratos de background fetch (workers e observador)."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol


class BackgroundFetchResult(StrEnum):
    """Resultado de um worker ou do fetch combinado.

    NO_DATA é o elemento neutro da combinação.
    """

    NO_DATA = "no_data"
    NEW_DATA = "new_data"
    FAILED = "failed"


class BackgroundFetcherProtocol(Protocol):
    """Worker registrado no coordenador; retorna exatamente uma vez."""

    async def perform_background_fetch(self) -> BackgroundFetchResult: ...


class WorkerControllerDelegateProtocol(Protocol):
    """Observador do ciclo de vida de um fetch."""

    def on_fetch_will_start(self, correlation_id: str) -> None: ...

    def on_fetch_did_end(self, correlation_id: str) -> None: ...
