"""Unit tests for ProgressChannel: bounded publish, guaranteed terminal."""

import asyncio

import pytest

from app.services.progress_channel import ProgressChannel


async def drain(channel: ProgressChannel) -> list:
    return [event async for event in channel]


class TestPublish:
    @pytest.mark.asyncio
    async def test_events_arrive_in_order_then_terminal(self):
        channel: ProgressChannel[str] = ProgressChannel(maxsize=10)
        channel.publish("fetching")
        channel.publish("parsing")
        channel.close("done")

        assert await drain(channel) == ["fetching", "parsing", "done"]

    def test_drops_when_full(self):
        channel: ProgressChannel[int] = ProgressChannel(maxsize=2)
        for i in range(5):
            channel.publish(i)

        assert channel.dropped == 3

    @pytest.mark.asyncio
    async def test_publish_after_close_is_ignored(self):
        channel: ProgressChannel[str] = ProgressChannel(maxsize=4)
        channel.close("done")
        channel.publish("late")

        assert await drain(channel) == ["done"]


class TestClose:
    @pytest.mark.asyncio
    async def test_terminal_evicts_oldest_when_full(self):
        channel: ProgressChannel[str] = ProgressChannel(maxsize=2)
        channel.publish("a")
        channel.publish("b")
        channel.close("done")

        assert await drain(channel) == ["b", "done"]
        assert channel.dropped == 1

    @pytest.mark.asyncio
    async def test_only_first_close_counts(self):
        channel: ProgressChannel[str] = ProgressChannel(maxsize=4)
        channel.close("completed")
        channel.close("failed")

        assert channel.closed is True
        assert await drain(channel) == ["completed"]

    @pytest.mark.asyncio
    async def test_consumer_waits_for_producer(self):
        channel: ProgressChannel[str] = ProgressChannel(maxsize=4)

        async def produce():
            await asyncio.sleep(0)
            channel.publish("step")
            await asyncio.sleep(0)
            channel.close("done")

        producer = asyncio.create_task(produce())
        events = await asyncio.wait_for(drain(channel), timeout=1)
        await producer

        assert events == ["step", "done"]
