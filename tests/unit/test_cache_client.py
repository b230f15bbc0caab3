import json
import pytest
from unittest.mock import AsyncMock
from redis.exceptions import ConnectionError as RedisConnectionError
from pokedex_api.clients.cache_client import CacheClient, CacheResult
from fakeredis.aioredis import FakeRedis


@pytest.fixture
def redis_client():
    """Provides a fake Redis client for testing."""
    return FakeRedis(decode_responses=True)

@pytest.fixture
def cache_client(redis_client):
    """Provides a CacheClient with fake Redis."""
    client = CacheClient()
    client.redis = redis_client  # Inject fake Redis
    return client

@pytest.fixture
def broken_cache_client():
    """A CacheClient whose Redis connection always fails."""
    client = CacheClient()
    client.redis = AsyncMock()
    client.redis.get.side_effect = RedisConnectionError("Connection refused")
    client.redis.set.side_effect = RedisConnectionError("Connection refused")
    return client


def test_detail_key_is_lowercased():
    assert CacheClient.detail_key("Pikachu") == "detail_pikachu"
    assert CacheClient.detail_key("PIKACHU") == CacheClient.detail_key("pikachu")

@pytest.mark.asyncio
async def test_missing_key_is_a_plain_miss(cache_client):
    """An absent key is a valid state: no value and no error."""
    result = await cache_client.get("pokemon_list")

    assert result == CacheResult()
    assert result.hit is False
    assert result.error is None

@pytest.mark.asyncio
async def test_set_then_get_returns_value(cache_client):
    payload = [{"name": "pikachu", "id": 25, "image": "25.png"}]

    written = await cache_client.set("pokemon_list", payload, 60_000)
    result = await cache_client.get("pokemon_list")

    assert written.error is None
    assert result.hit is True
    assert result.value == payload

@pytest.mark.asyncio
async def test_set_applies_ttl_in_milliseconds(cache_client, redis_client):
    await cache_client.set("detail_pikachu", {"id": 25}, 3_600_000)

    ttl = await redis_client.pttl("detail_pikachu")
    assert 0 < ttl <= 3_600_000

@pytest.mark.asyncio
async def test_values_are_stored_as_json(cache_client, redis_client):
    await cache_client.set("detail_pikachu", {"id": 25, "name": "pikachu"})

    raw = await redis_client.get("detail_pikachu")
    assert json.loads(raw) == {"id": 25, "name": "pikachu"}

@pytest.mark.asyncio
async def test_get_failure_is_returned_not_raised(broken_cache_client):
    """A down cache reads as a miss carrying the error."""
    result = await broken_cache_client.get("pokemon_list")

    assert result.hit is False
    assert isinstance(result.error, RedisConnectionError)

@pytest.mark.asyncio
async def test_set_failure_is_returned_not_raised(broken_cache_client):
    result = await broken_cache_client.set("pokemon_list", [], 1000)

    assert isinstance(result.error, RedisConnectionError)

@pytest.mark.asyncio
async def test_undecodable_entry_is_treated_as_miss(cache_client, redis_client):
    await redis_client.set("detail_broken", "{not json")

    result = await cache_client.get("detail_broken")

    assert result.hit is False
    assert result.error is not None

@pytest.mark.asyncio
async def test_clear_removes_list_and_detail_entries(cache_client, redis_client):
    await cache_client.set("pokemon_list", [])
    await cache_client.set("detail_pikachu", {"id": 25})
    await redis_client.set("unrelated", "keep")

    await cache_client.clear("pokemon_list")

    assert await redis_client.exists("pokemon_list", "detail_pikachu") == 0
    assert await redis_client.get("unrelated") == "keep"

@pytest.mark.asyncio
async def test_non_redis_failures_are_returned_not_raised():
    """Any exception from the Redis client is absorbed, not only RedisError."""
    client = CacheClient()
    client.redis = AsyncMock()
    client.redis.get.side_effect = RuntimeError("Event loop is closed")
    client.redis.set.side_effect = RuntimeError("Event loop is closed")

    read = await client.get("pokemon_list")
    written = await client.set("pokemon_list", [], 1000)

    assert read.hit is False
    assert isinstance(read.error, RuntimeError)
    assert isinstance(written.error, RuntimeError)

@pytest.mark.asyncio
async def test_unserializable_value_is_returned_not_raised(cache_client, redis_client):
    result = await cache_client.set("detail_pikachu", {"id": object()})

    assert isinstance(result.error, TypeError)
    assert await redis_client.get("detail_pikachu") is None
