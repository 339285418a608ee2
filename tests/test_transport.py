"""Tests for the chunked BLE transport."""

import asyncio
import math

import pytest

from bleprinter.printer.connection import ConnectionManager, ConnectionState
from bleprinter.printer.errors import ErrorKind, LinkError
from bleprinter.printer.transport import ChunkTransport, split_chunks

from conftest import DROP


class TestSplitChunks:

    @pytest.mark.parametrize("length", [0, 1, 127, 128, 129, 256, 1000])
    def test_chunk_count_and_order(self, length):
        data = bytes(i % 251 for i in range(length))
        chunks = split_chunks(data, 128)

        assert len(chunks) == math.ceil(length / 128)
        assert all(len(c.data) <= 128 for c in chunks)
        assert b"".join(c.data for c in chunks) == data
        assert [c.index for c in chunks] == list(range(len(chunks)))
        assert all(c.total == len(chunks) for c in chunks)

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            split_chunks(b"abc", 0)


class TestChunkTransport:

    def test_writes_all_chunks_with_pacing(self, link, selector, sleep):
        async def scenario():
            manager = ConnectionManager(selector)
            await manager.connect()
            transport = ChunkTransport(manager, sleep=sleep)
            return await transport.write(manager.endpoint, b"x" * 300)

        result = asyncio.run(scenario())

        assert result.success
        assert [len(w) for w in link.writes] == [128, 128, 44]
        assert sleep.calls == [0.1, 0.1]

    def test_single_chunk_has_no_delay(self, link, selector, sleep):
        async def scenario():
            manager = ConnectionManager(selector)
            await manager.connect()
            return await ChunkTransport(manager, sleep=sleep).write(manager.endpoint, b"hello")

        assert asyncio.run(scenario()).success
        assert sleep.calls == []

    def test_retries_with_backoff_then_succeeds(self, link, selector, sleep):
        link.write_plan = [LinkError("busy"), LinkError("busy"), None]

        async def scenario():
            manager = ConnectionManager(selector)
            await manager.connect()
            return await ChunkTransport(manager, sleep=sleep).write(manager.endpoint, b"y" * 300)

        result = asyncio.run(scenario())

        assert result.success
        assert link.written == b"y" * 300
        assert sleep.calls == [0.2, 0.4, 0.1, 0.1]

    def test_chunk_failure_aborts_print(self, link, selector, sleep):
        link.write_plan = [None, LinkError("nak"), LinkError("nak"), LinkError("nak")]

        async def scenario():
            manager = ConnectionManager(selector)
            await manager.connect()
            return await ChunkTransport(manager, sleep=sleep).write(manager.endpoint, b"z" * 300)

        result = asyncio.run(scenario())

        assert not result.success
        assert result.error.kind is ErrorKind.CHUNK_WRITE_FAILED
        assert (result.error.index, result.error.total) == (1, 3)
        # Only the first chunk got through; the third was never attempted
        assert link.writes == [b"z" * 128]
        assert link.write_plan == []
        assert sleep.calls == [0.1, 0.2, 0.4]

    def test_reconnects_after_link_loss(self, link, selector, sleep):
        events = []
        link.write_plan = [None, DROP]

        async def scenario():
            manager = ConnectionManager(selector)
            manager.on_connection_change(events.append)
            await manager.connect()
            result = await ChunkTransport(manager, sleep=sleep).write(manager.endpoint, b"r" * 300)
            return manager, result

        manager, result = asyncio.run(scenario())

        assert result.success
        assert link.written == b"r" * 300
        assert link.open_calls == 2
        assert events == [True, False, True]
        assert manager.state is ConnectionState.CONNECTED
        # Only chunk pacing; the dropped write went straight to reconnect
        assert sleep.calls == [0.1, 0.1]

    def test_failed_reconnect_fails_chunk_immediately(self, link, selector, sleep):
        link.write_plan = [DROP]

        async def scenario():
            manager = ConnectionManager(selector)
            await manager.connect()
            link.open_failures = 1
            result = await ChunkTransport(manager, sleep=sleep).write(manager.endpoint, b"q" * 200)
            return manager, result

        manager, result = asyncio.run(scenario())

        assert result.error.kind is ErrorKind.CHUNK_WRITE_FAILED
        assert (result.error.index, result.error.total) == (0, 2)
        assert link.writes == []
        # No backoff after the dropped write; the reconnect failed
        assert sleep.calls == []
        assert manager.state is ConnectionState.DISCONNECTED

    def test_reconnect_limit_per_print(self, link, selector, sleep):
        link.write_plan = [DROP, None, DROP]

        async def scenario():
            manager = ConnectionManager(selector)
            await manager.connect()
            transport = ChunkTransport(manager, sleep=sleep, max_reconnects=1)
            return await transport.write(manager.endpoint, b"m" * 256)

        result = asyncio.run(scenario())

        assert result.error.kind is ErrorKind.CHUNK_WRITE_FAILED
        assert result.error.index == 1
        assert link.writes == [b"m" * 128]
        assert link.open_calls == 2

    def test_uses_renegotiated_endpoint(self, link, selector, sleep):
        seen = []
        original_write = link.write

        async def tracking_write(endpoint, data):
            seen.append(endpoint)
            await original_write(endpoint, data)

        link.write = tracking_write
        link.write_plan = [DROP]

        async def scenario():
            manager = ConnectionManager(selector)
            await manager.connect()
            stale = manager.endpoint
            result = await ChunkTransport(manager, sleep=sleep).write(stale, b"e")
            return stale, manager.endpoint, result

        stale, fresh, result = asyncio.run(scenario())

        assert result.success
        assert seen[0] is stale
        assert seen[-1] is fresh
