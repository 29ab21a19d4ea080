"""Coordenação de background fetch (fan-out/fan-in).

Workers registrados por referência fraca rodam em paralelo; os
resultados são reduzidos a um único BackgroundFetchResult:
FAILED domina, depois NEW_DATA, senão NO_DATA.
"""

from __future__ import annotations

import asyncio
import logging
import time
import weakref
from collections.abc import Iterable

from app.observability import (
    bound_correlation_id,
    generate_correlation_id,
    record_background_fetch,
)
from app.protocols import (
    BackgroundFetcherProtocol,
    BackgroundFetchResult,
    WorkerControllerDelegateProtocol,
)

logger = logging.getLogger(__name__)


def combine_results(results: Iterable[BackgroundFetchResult]) -> BackgroundFetchResult:
    """Reduz resultados de workers; sequência vazia → NO_DATA."""
    combined = BackgroundFetchResult.NO_DATA
    for result in results:
        if result == BackgroundFetchResult.FAILED:
            return BackgroundFetchResult.FAILED
        if result == BackgroundFetchResult.NEW_DATA:
            combined = BackgroundFetchResult.NEW_DATA
    return combined


class WorkerController:
    """Base de controllers que notificam início/fim de trabalho."""

    def __init__(self, delegate: WorkerControllerDelegateProtocol | None = None) -> None:
        self.delegate = delegate

    def _notify_will_start(self, correlation_id: str) -> None:
        if self.delegate is not None:
            self.delegate.on_fetch_will_start(correlation_id)

    def _notify_did_end(self, correlation_id: str) -> None:
        if self.delegate is not None:
            self.delegate.on_fetch_did_end(correlation_id)


class BackgroundFetcherController(WorkerController):
    """Executa todos os workers vivos e combina os resultados.

    O controller não mantém workers vivos: o dono de cada worker controla
    seu ciclo de vida.
    """

    def __init__(self, delegate: WorkerControllerDelegateProtocol | None = None) -> None:
        super().__init__(delegate)
        self._fetchers: list[weakref.ref[BackgroundFetcherProtocol]] = []

    def add(self, worker: BackgroundFetcherProtocol) -> None:
        """Registra o worker (ignorado se já registrado)."""
        if any(ref() is worker for ref in self._fetchers):
            return
        self._fetchers.append(weakref.ref(worker))

    def live_fetchers(self) -> list[BackgroundFetcherProtocol]:
        """Workers ainda vivos; referências mortas são descartadas."""
        alive: list[BackgroundFetcherProtocol] = []
        refs: list[weakref.ref[BackgroundFetcherProtocol]] = []
        for ref in self._fetchers:
            fetcher = ref()
            if fetcher is None:
                continue
            alive.append(fetcher)
            refs.append(ref)
        self._fetchers = refs
        return alive

    @property
    def worker_count(self) -> int:
        return len(self.live_fetchers())

    async def perform_background_fetch(self) -> BackgroundFetchResult:
        """Roda todos os workers em paralelo e retorna o resultado combinado."""
        identifier = generate_correlation_id()
        with bound_correlation_id(identifier):
            started = time.perf_counter()
            self._notify_will_start(identifier)

            fetchers = self.live_fetchers()
            results = await asyncio.gather(*(self._run_worker(f) for f in fetchers))
            combined = combine_results(results)

            record_background_fetch(
                combined.value,
                len(fetchers),
                (time.perf_counter() - started) * 1000,
                identifier,
            )
            self._notify_did_end(identifier)
        return combined

    async def _run_worker(self, fetcher: BackgroundFetcherProtocol) -> BackgroundFetchResult:
        try:
            return await fetcher.perform_background_fetch()
        except Exception as exc:
            logger.warning(
                "background_fetch_worker_failed",
                extra={
                    "component": "background_fetch",
                    "worker": type(fetcher).__name__,
                    "error_type": type(exc).__name__,
                },
            )
            return BackgroundFetchResult.FAILED
