"""Fila de tarefas com limite de concorrência.

Toda operação enfileirada vira uma asyncio.Task que só executa seu corpo
depois de adquirir uma vaga do semáforo. Cancelar a task antes da vaga
impede a execução.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

from app.observability import record_queue_occupancy

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskQueue:
    """Executa coroutines com no máximo `limit` simultâneas.

    Attributes:
        limit: Máximo de operações em execução
        in_flight: Operações em execução agora
        max_in_flight: Pico observado desde a criação
    """

    def __init__(self, limit: int = 16, *, name: str = "wiki_session") -> None:
        if limit < 1:
            raise ValueError("limit deve ser >= 1")
        self._limit = limit
        self._name = name
        self._semaphore = asyncio.Semaphore(limit)
        self._in_flight = 0
        self._max_in_flight = 0
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def max_in_flight(self) -> int:
        return self._max_in_flight

    @property
    def pending(self) -> int:
        """Tasks criadas e ainda não concluídas (em execução ou aguardando)."""
        return len(self._tasks)

    def submit(self, coro: Coroutine[Any, Any, T], *, name: str | None = None) -> asyncio.Task[T]:
        """Agenda a coroutine na fila e retorna o handle cancelável.

        Precisa ser chamado com event loop em execução.
        """
        task = asyncio.create_task(self._run(coro), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        # Cancelada antes do primeiro passo: fecha a coroutine nunca iniciada
        task.add_done_callback(lambda _: coro.close())
        return task

    async def _run(self, coro: Coroutine[Any, Any, T]) -> T:
        await self._semaphore.acquire()
        self._in_flight += 1
        self._max_in_flight = max(self._max_in_flight, self._in_flight)
        record_queue_occupancy(self._in_flight, self._max_in_flight, self._limit)
        try:
            return await coro
        finally:
            self._in_flight -= 1
            self._semaphore.release()

    async def join(self) -> None:
        """Aguarda todas as tasks pendentes (resultados descartados)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def cancel_all(self) -> int:
        """Cancela todas as tasks pendentes. Retorna quantas."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            logger.info(
                "task_queue_cancelled",
                extra={"component": "task_queue", "queue": self._name, "count": len(tasks)},
            )
        return len(tasks)
