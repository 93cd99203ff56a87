import pytest

from teamhub.services.events import EventHub


@pytest.mark.asyncio
async def test_slow_subscriber_only_keeps_latest_snapshot():
    hub = EventHub()

    async with hub.subscription("tasks") as queue:
        for snapshot in (["a"], ["a", "b"], ["a", "b", "c"]):
            hub.publish("tasks", snapshot)

        assert queue.qsize() == 1
        assert await queue.get() == ["a", "b", "c"]

    assert hub.has_subscribers("tasks") is False


@pytest.mark.asyncio
async def test_deeper_subscription_keeps_newest_items():
    hub = EventHub()

    async with hub.subscription("tasks", depth=2) as queue:
        for n in range(5):
            hub.publish("tasks", n)

        assert [queue.get_nowait(), queue.get_nowait()] == [3, 4]


def test_failing_listener_does_not_stop_others():
    hub = EventHub()
    seen = []

    def broken(_payload):
        raise RuntimeError("boom")

    hub.add_listener("identity", broken)
    unsubscribe = hub.add_listener("identity", seen.append)
    hub.publish("identity", "uid-1")
    unsubscribe()
    hub.publish("identity", "uid-2")

    assert seen == ["uid-1"]
