import logging

import httpx
import pytest
import pytest_asyncio

from familyvault.core.config import Settings
from familyvault.flow.view import MemorySurface
from familyvault.main import build_client
from familyvault.services.token_store import TokenStore

from tests.fake_backend import FakeVault, create_app
from tests.fakes import FakeIdentityProvider

EMAIL = "alice@example.com"
PASSWORD = "secret123"


@pytest.fixture
def logger():
    return logging.getLogger("familyvault.tests")


@pytest.fixture
def config(tmp_path):
    return Settings(
        _env_file=None,
        API_BASE_URL="http://testserver/api",
        FIREBASE_API_KEY="test-key",
        TOKEN_STORE_PATH=str(tmp_path / "storage.json"),
    )


@pytest.fixture
def vault():
    return FakeVault()


@pytest.fixture
def transport(vault):
    return httpx.ASGITransport(app=create_app(vault))


@pytest.fixture
def identity():
    provider = FakeIdentityProvider()
    provider.add_account(EMAIL, PASSWORD, "uid-alice", "Alice")
    return provider


@pytest.fixture
def store(config, logger):
    return TokenStore(config.TOKEN_STORE_PATH, logger)


@pytest.fixture
def surface(logger):
    # No auto-dismiss: alerts stay inspectable
    return MemorySurface(logger, alert_dismiss_seconds=None)


@pytest_asyncio.fixture
async def client(config, logger, surface, identity, store, transport):
    vault_client = build_client(
        config=config,
        logger=logger,
        surface=surface,
        identity=identity,
        store=store,
        transport=transport,
    )
    vault_client.coordinator.start()
    yield vault_client
    await vault_client.aclose()


@pytest_asyncio.fixture
async def signed_in(client):
    await client.surface.dispatch("auth:login", email=EMAIL, password=PASSWORD)
    return client
