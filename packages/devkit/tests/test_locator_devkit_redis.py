import pytest

from locator_devkit.redis import AsyncRedisManager, create_redis_client


def test_create_redis_client_none() -> None:
    assert create_redis_client(None) is None
    assert create_redis_client("") is None


class FlakyClient:
    def __init__(self, fail_once: bool) -> None:
        self.fail_once = fail_once
        self.eval_calls = 0

    async def get(self, _key: str) -> str:
        if self.fail_once:
            self.fail_once = False
            raise ConnectionError("transient")
        return "value"

    async def eval(self, _script: str, _numkeys: int, *_args) -> list:
        self.eval_calls += 1
        if self.fail_once:
            self.fail_once = False
            raise TimeoutError("reply lost")
        return [1, 1, "100.0"]

    async def close(self) -> None:
        return None


def _flaky_manager(created: list[FlakyClient]) -> AsyncRedisManager:
    def factory(_url: str) -> FlakyClient:
        client = FlakyClient(fail_once=(len(created) == 0))
        created.append(client)
        return client

    return AsyncRedisManager("redis://example:6379/0", base_delay_seconds=0, client_factory=factory)


@pytest.mark.asyncio
async def test_async_redis_manager_reconnects_on_failure() -> None:
    created: list[FlakyClient] = []
    manager = _flaky_manager(created)

    value = await manager.get("k1")

    assert value == "value"
    assert len(created) == 2


@pytest.mark.asyncio
async def test_async_redis_manager_does_not_replay_scripts() -> None:
    created: list[FlakyClient] = []
    manager = _flaky_manager(created)

    with pytest.raises(TimeoutError):
        await manager.eval("return 1", 1, "k1")

    assert sum(client.eval_calls for client in created) == 1
    # the next call goes through the replacement client
    assert await manager.eval("return 1", 1, "k1") == [1, 1, "100.0"]
    assert len(created) == 2


@pytest.mark.asyncio
async def test_async_redis_manager_gives_up_after_max_retries() -> None:
    class BrokenClient:
        def __init__(self) -> None:
            self.calls = 0

        async def get(self, _key: str) -> str:
            self.calls += 1
            raise ConnectionError("down")

        async def close(self) -> None:
            return None

    client = BrokenClient()
    manager = AsyncRedisManager(
        "redis://example:6379/0",
        max_retries=2,
        base_delay_seconds=0,
        client_factory=lambda _url: client,
    )
    with pytest.raises(ConnectionError):
        await manager.get("k1")

    assert client.calls == 2
