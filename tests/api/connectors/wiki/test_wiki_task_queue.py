"""Testes da TaskQueue e do limite de concorrência da Session."""

from __future__ import annotations

import asyncio

import pytest

from api.connectors.wiki import Session, TaskQueue, URLComponents
from config.settings import WikiSettings
from tests.fakes.fake_wiki_server import FakeWikiServer, json_response


class TestTaskQueue:
    """Testes da fila com semáforo."""

    def test_limit_must_be_positive(self) -> None:
        """Limite zero é rejeitado."""
        with pytest.raises(ValueError):
            TaskQueue(0)

    @pytest.mark.asyncio
    async def test_never_exceeds_limit(self) -> None:
        """Com 20 coroutines e limite 3, no máximo 3 rodam juntas."""
        queue = TaskQueue(3)
        running = 0
        peak = 0

        async def job(value: int) -> int:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.001)
            running -= 1
            return value * 2

        tasks = [queue.submit(job(i)) for i in range(20)]
        results = await asyncio.gather(*tasks)

        assert results == [i * 2 for i in range(20)]
        assert peak == 3
        assert queue.max_in_flight == 3
        assert queue.in_flight == 0
        assert queue.pending == 0

    @pytest.mark.asyncio
    async def test_cancel_before_slot_skips_body(self) -> None:
        """Task cancelada antes de obter vaga nunca executa o corpo."""
        queue = TaskQueue(1)
        release = asyncio.Event()
        executed: list[str] = []

        async def blocker() -> None:
            await release.wait()

        async def follower() -> None:
            executed.append("follower")

        first = queue.submit(blocker())
        second = queue.submit(follower())
        await asyncio.sleep(0)

        second.cancel()
        release.set()
        await first
        with pytest.raises(asyncio.CancelledError):
            await second

        assert executed == []
        assert queue.in_flight == 0

    @pytest.mark.asyncio
    async def test_cancel_all_and_join(self) -> None:
        """cancel_all cancela pendentes e join retorna."""
        queue = TaskQueue(2)
        never = asyncio.Event()
        tasks = [queue.submit(never.wait()) for _ in range(4)]
        await asyncio.sleep(0)

        assert queue.cancel_all() == 4
        await queue.join()

        assert all(task.cancelled() for task in tasks)
        assert queue.pending == 0


class TestSessionConcurrency:
    """Limite de 16 operações simultâneas na Session."""

    @pytest.mark.asyncio
    async def test_fifty_requests_never_exceed_sixteen(self) -> None:
        """50 requisições simultâneas: nunca mais de 16 em trânsito."""
        server = FakeWikiServer(latency=0.01)
        server.route("/w/api.php", lambda request: json_response(200, {"ok": True}))
        session = Session(WikiSettings(), transport=server.transport())
        components = URLComponents(scheme="https", host="en.wikipedia.org", path="/w/api.php")

        tasks = [session.data_task(components) for _ in range(50)]
        results = await asyncio.gather(*tasks)

        assert len(server.requests) == 50
        assert all(result.status_code == 200 for result in results)
        assert server.max_in_flight <= 16
        assert session.queue.max_in_flight == 16
        await session.aclose()
