"""
Unit tests for FastAPI application lifespan management.

Startup verifies the database connection; shutdown flushes autosave drafts
and closes the outbound HTTP clients.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI

from jalanea_forge.core.database.session import init_db
from jalanea_forge.server.main import lifespan
from jalanea_forge.server.services import clients

pytestmark = pytest.mark.asyncio


class TestLifespan:
    async def test_startup_checks_database_and_shutdown_closes_clients(self):
        with (
            patch("jalanea_forge.server.main.init_db", new_callable=AsyncMock) as mock_init,
            patch("jalanea_forge.server.main.close_clients", new_callable=AsyncMock) as mock_close,
        ):
            async with lifespan(FastAPI()):
                mock_init.assert_awaited_once()
                mock_close.assert_not_awaited()

        mock_close.assert_awaited_once()

    async def test_database_failure_does_not_block_startup(self, caplog):
        with (
            patch("jalanea_forge.server.main.init_db", new_callable=AsyncMock, side_effect=OSError("refused")),
            patch("jalanea_forge.server.main.close_clients", new_callable=AsyncMock) as mock_close,
        ):
            async with lifespan(FastAPI()):
                pass

        assert "Database initialization failed: refused" in caplog.text
        mock_close.assert_awaited_once()

    async def test_init_db_against_sqlite(self):
        await init_db()


class TestServiceClients:
    async def test_getters_cache_instances(self, monkeypatch):
        monkeypatch.setattr(clients, "_lab_tokens", None)
        monkeypatch.setattr(clients, "_stripe_gateway", None)

        assert clients.get_lab_tokens() is clients.get_lab_tokens()
        assert clients.get_stripe_gateway() is clients.get_stripe_gateway()

    async def test_close_clients_flushes_and_resets(self, monkeypatch):
        autosave = AsyncMock()
        sender = AsyncMock()
        monkeypatch.setattr(clients, "_autosave", autosave)
        monkeypatch.setattr(clients, "_email_sender", sender)

        await clients.close_clients()

        autosave.close.assert_awaited_once()
        sender.aclose.assert_awaited_once()
        assert clients._autosave is None
        assert clients._email_sender is None

    async def test_close_clients_without_instances(self, monkeypatch):
        monkeypatch.setattr(clients, "_autosave", None)
        monkeypatch.setattr(clients, "_email_sender", None)

        await clients.close_clients()
