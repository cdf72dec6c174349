import pytest

from familyvault.core.exceptions import NotAuthenticatedError
from familyvault.services.auth_service import AuthTokenHolder
from familyvault.services.token_store import TokenStore

from tests.fakes import FakeIdentityProvider

KEY = "firebaseToken"


@pytest.fixture
def provider():
    provider = FakeIdentityProvider()
    provider.add_account("bob@example.com", "pw123456", "uid-bob", token="live-token")
    return provider


@pytest.fixture
def holder(provider, store, logger):
    holder = AuthTokenHolder(provider, store, KEY, logger)
    holder.start()
    return holder


@pytest.mark.asyncio
async def test_sign_in_records_user_and_persists_token(holder, provider, store):
    await provider.sign_in("bob@example.com", "pw123456")

    assert holder.user.uid == "uid-bob"
    assert store.get(KEY) == "live-token"
    assert await holder.get_token() == "live-token"


@pytest.mark.asyncio
async def test_get_token_prefers_live_handle(holder, provider, store):
    user = await provider.sign_in("bob@example.com", "pw123456")
    store.set(KEY, "stale-persisted")
    minted = user.minted

    assert await holder.get_token() == "live-token"
    assert user.minted == minted + 1


@pytest.mark.asyncio
async def test_get_token_falls_back_to_cached_token_when_refresh_fails(holder, provider):
    user = await provider.sign_in("bob@example.com", "pw123456")
    user.fail_refresh = True

    assert await holder.get_token() == "live-token"


@pytest.mark.asyncio
async def test_get_token_uses_persisted_token_without_live_user(provider, store, logger):
    store.set(KEY, "persisted-token")
    holder = AuthTokenHolder(provider, store, KEY, logger)

    assert await holder.get_token() == "persisted-token"


@pytest.mark.asyncio
async def test_sign_out_clears_everything(holder, provider, store):
    await provider.sign_in("bob@example.com", "pw123456")
    await provider.sign_out()

    assert holder.user is None
    assert not store.has(KEY)
    with pytest.raises(NotAuthenticatedError):
        await holder.get_token()


@pytest.mark.asyncio
async def test_listeners_run_after_holder_state_is_updated(holder, provider, store):
    seen = []

    async def listener(user):
        seen.append((user.uid if user else None, store.get(KEY)))

    holder.subscribe(listener)
    await provider.sign_in("bob@example.com", "pw123456")
    await provider.sign_out()

    assert seen == [("uid-bob", "live-token"), (None, None)]


def test_token_store_survives_restart_and_ignores_corrupt_file(tmp_path, logger):
    path = tmp_path / "nested" / "storage.json"
    TokenStore(str(path), logger).set(KEY, "abc")
    assert TokenStore(str(path), logger).get(KEY) == "abc"

    path.write_text("{not json", encoding="utf-8")
    store = TokenStore(str(path), logger)
    assert store.get(KEY) is None
    store.remove(KEY)
    assert not store.has(KEY)
