import pytest
import pytest_asyncio
from pokedex_api import db
from pokedex_api.db import Favorite
from pokedex_api.exceptions import NotFound
from pokedex_api.services.favorites_store import FavoritesStore


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """A fresh SQLite database per test."""
    engine = db.create_engine(f"sqlite+aiosqlite:///{tmp_path / 'favorites.db'}")
    await db.init_db(engine)
    yield db.create_session_factory(engine)
    await engine.dispose()

@pytest.fixture
def store(session_factory):
    return FavoritesStore(session_factory)


@pytest.mark.asyncio
async def test_starts_empty(store):
    assert await store.list() == []

@pytest.mark.asyncio
async def test_add_returns_updated_list(store):
    assert await store.add("pikachu") == ["pikachu"]
    assert await store.add("bulbasaur") == ["pikachu", "bulbasaur"]

@pytest.mark.asyncio
async def test_add_is_idempotent(store):
    once = await store.add("pikachu")
    twice = await store.add("pikachu")

    assert once == twice == ["pikachu"]

@pytest.mark.asyncio
async def test_remove_returns_updated_list(store):
    await store.add("pikachu")
    await store.add("charmander")

    assert await store.remove("pikachu") == ["charmander"]

@pytest.mark.asyncio
async def test_remove_absent_name_raises_not_found(store):
    with pytest.raises(NotFound) as excinfo:
        await store.remove("mew")

    assert excinfo.value.status_code == 404
    assert excinfo.value.detail == "Favorite 'mew' not found"

@pytest.mark.asyncio
async def test_remove_twice_fails_the_second_time(store):
    """Removal is not idempotent, unlike add."""
    await store.add("mew")
    await store.remove("mew")

    with pytest.raises(NotFound):
        await store.remove("mew")

@pytest.mark.asyncio
async def test_names_are_case_insensitive_by_default(store):
    await store.add("Pikachu")

    assert await store.add("PIKACHU") == ["pikachu"]
    assert await store.remove("pikachu") == []

@pytest.mark.asyncio
async def test_case_sensitive_store_keeps_distinct_names(session_factory):
    store = FavoritesStore(session_factory, case_sensitive=True)

    await store.add("Pikachu")
    result = await store.add("pikachu")

    assert sorted(result) == ["Pikachu", "pikachu"]
    with pytest.raises(NotFound):
        await store.remove("PIKACHU")

@pytest.mark.asyncio
async def test_favorites_persist_across_store_instances(session_factory):
    await FavoritesStore(session_factory).add("snorlax")

    assert await FavoritesStore(session_factory).list() == ["snorlax"]

@pytest.mark.asyncio
async def test_concurrent_duplicate_add_is_absorbed(session_factory):
    """
    Another request stores the same name between our lookup and our commit.
    The primary key rejects our insert and add still returns the list.
    """
    def racing_factory():
        session = session_factory()
        original_get = session.get

        async def get_then_concurrent_insert(entity, key):
            found = await original_get(entity, key)
            async with session_factory() as other:
                other.add(Favorite(name=key))
                await other.commit()
            return found

        session.get = get_then_concurrent_insert
        return session

    store = FavoritesStore(racing_factory)

    result = await store.add("pikachu")

    assert result == ["pikachu"]
    assert await FavoritesStore(session_factory).list() == ["pikachu"]
