# pylint: disable=missing-module-docstring,missing-function-docstring

import asyncio

import pytest

from audio.queues import ChunkChannel, DropReason


def test_overflow_drops_newest():
    channel = ChunkChannel(max_chunks=2)

    assert channel.offer(b"a") is True
    assert channel.offer(b"b") is True
    assert channel.offer(b"c") is False

    assert channel.drops.overflow == 1
    assert len(channel) == 2

    async def drain() -> list[bytes]:
        return [await channel.get(), await channel.get()]

    assert asyncio.run(drain()) == [b"a", b"b"]


def test_busy_and_overflow_accounted_separately():
    channel = ChunkChannel(max_chunks=1)

    channel.offer(b"a")
    channel.offer(b"b")
    channel.mark_dropped(DropReason.BUSY)
    channel.mark_dropped(DropReason.BUSY)

    assert channel.snapshot() == {
        "chunks": 1,
        "dropped_overflow": 1,
        "dropped_busy": 2,
        "dropped_total": 3,
    }


def test_clear_is_not_a_drop():
    channel = ChunkChannel(max_chunks=4)
    channel.offer(b"a")
    channel.offer(b"b")

    channel.clear()

    assert len(channel) == 0
    assert channel.total_drops() == 0


def test_invalid_capacity_rejected():
    with pytest.raises(ValueError):
        ChunkChannel(max_chunks=0)
