"""Testes do composition root (app.bootstrap)."""

from __future__ import annotations

import logging

import pytest

from app.bootstrap import build_application, validate_runtime_settings
from config.settings import BaseSettings, WikiSettings
from tests.fakes.fake_wiki_server import FakeWikiServer


class TestValidateRuntimeSettings:
    def test_valid_settings(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="app.bootstrap"):
            validate_runtime_settings(WikiSettings(), BaseSettings())
        assert any(r.getMessage() == "settings_validated" for r in caplog.records)

    def test_development_only_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        invalid = WikiSettings(max_concurrent_operations=0)
        with caplog.at_level(logging.WARNING, logger="app.bootstrap"):
            validate_runtime_settings(invalid, BaseSettings(environment="development"))
        assert any(r.getMessage() == "settings_validation_failed" for r in caplog.records)

    @pytest.mark.parametrize("environment", ["staging", "production"])
    def test_strict_environments_raise(self, environment: str) -> None:
        invalid = WikiSettings(api_host="")
        with pytest.raises(RuntimeError, match="WIKI_API_HOST"):
            validate_runtime_settings(invalid, BaseSettings(environment=environment))


class TestBuildApplication:
    """Testes de build_application."""

    @pytest.mark.asyncio
    async def test_wires_shared_session(self) -> None:
        server = FakeWikiServer()
        server.respond("/api/rest_v1/page/summary/Dog", 200, {"title": "Dog"})
        settings = WikiSettings(max_concurrent_operations=3)

        services = build_application(
            settings,
            base_settings=BaseSettings(),
            transport=server.transport(),
            configure_logs=False,
        )
        try:
            assert services.settings is settings
            assert services.session.queue.limit == 3
            assert services.session.notification_center is services.notification_center
            assert services.background_fetcher.worker_count == 0

            summary = await services.session.fetch_summary("https://en.wikipedia.org/wiki/Dog")
            assert summary.result == {"title": "Dog"}
        finally:
            await services.aclose()
