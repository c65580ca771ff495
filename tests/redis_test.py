from unittest.mock import AsyncMock, MagicMock, patch

from src.fault_triage.redis.redis import RedisManager


async def test_init_redis_disabled(caplog):
    manager = RedisManager()

    with caplog.at_level("INFO"):
        await manager.init_redis()

    assert manager.redis_client is None
    assert "fault-event locks are process-local" in caplog.text


@patch("src.fault_triage.redis.redis.get_settings")
@patch("src.fault_triage.redis.redis.redis.Redis")
async def test_init_redis(mock_redis_class, mock_get_settings):
    mock_get_settings.return_value.REDIS_ENABLED = True
    mock_get_settings.return_value.REDIS_HOST = "localhost"
    mock_get_settings.return_value.REDIS_PORT = 6379
    mock_client = MagicMock()
    mock_client.ping = AsyncMock()
    mock_redis_class.return_value = mock_client

    manager = RedisManager()
    await manager.init_redis()

    mock_redis_class.assert_called_once_with(
        host="localhost", port=6379, encoding="utf-8", decode_responses=True
    )
    mock_client.ping.assert_awaited_once()
    assert manager.redis_client is mock_client


async def test_close_redis():
    mock_client = AsyncMock()
    manager = RedisManager()
    manager.redis_client = mock_client

    await manager.close_redis()

    mock_client.aclose.assert_awaited_once()
    assert manager.redis_client is None


async def test_close_redis_without_client():
    manager = RedisManager()
    await manager.close_redis()
    assert manager.redis_client is None
