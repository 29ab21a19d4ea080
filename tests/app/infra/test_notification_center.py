"""Testes da central de notificações."""

from __future__ import annotations

import logging

import pytest

from app.infra.notifications import NotificationCenter


class TestNotificationCenter:
    """Testes de subscribe/post/unsubscribe."""

    def test_post_reaches_subscribers_once(self) -> None:
        center = NotificationCenter()
        received: list[str] = []
        center.subscribe("edit", received.append)
        center.subscribe("edit", received.append)

        assert center.post("edit") == 1
        assert received == ["edit"]

    def test_post_without_observers(self) -> None:
        assert NotificationCenter().post("ninguem") == 0

    def test_unsubscribe(self) -> None:
        center = NotificationCenter()
        received: list[str] = []
        center.subscribe("edit", received.append)

        assert center.unsubscribe("edit", received.append) is True
        assert center.unsubscribe("edit", received.append) is False
        assert center.observer_count("edit") == 0

        center.post("edit")
        assert received == []

    def test_failing_observer_does_not_block_others(self, caplog: pytest.LogCaptureFixture) -> None:
        """Observador com erro é registrado em log e os demais recebem."""
        center = NotificationCenter()
        received: list[str] = []

        def broken(name: str) -> None:
            raise ValueError(name)

        center.subscribe("edit", broken)
        center.subscribe("edit", received.append)

        with caplog.at_level(logging.WARNING, logger="app.infra.notifications"):
            delivered = center.post("edit")

        assert delivered == 1
        assert received == ["edit"]
        assert any(r.getMessage() == "notification_observer_failed" for r in caplog.records)
