"""Chunked, paced writes to the printer's GATT characteristic.

Cheap BLE printer firmware drops data when its receive buffer overflows, so
bytes are written in small chunks with a pause in between. A chunk that
cannot be delivered aborts the whole transfer.
"""
import asyncio
import math
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from bleprinter.logging_config import get_logger
from bleprinter.printer.errors import ErrorKind, LinkError, Result
from bleprinter.printer.link import WriteEndpoint

logger = get_logger(__name__)

CHUNK_SIZE = 128
CHUNK_DELAY = 0.1          # seconds between chunks
WRITE_ATTEMPTS = 3
BACKOFF_BASE = 0.2         # seconds, doubled after each failed attempt
MAX_RECONNECTS = 3         # inline reconnects allowed per write


@dataclass(frozen=True)
class Chunk:
    index: int
    total: int
    data: bytes


def split_chunks(data: bytes, size: int = CHUNK_SIZE) -> List[Chunk]:
    """Split data into ``ceil(len/size)`` ordered chunks."""
    if size <= 0:
        raise ValueError("Chunk size must be positive")
    total = math.ceil(len(data) / size)
    return [
        Chunk(index=i, total=total, data=bytes(data[i * size:(i + 1) * size]))
        for i in range(total)
    ]


class ChunkTransport:
    """Writes a byte buffer through the manager's active session."""

    def __init__(self, manager, chunk_size: int = CHUNK_SIZE, chunk_delay: float = CHUNK_DELAY,
                 attempts: int = WRITE_ATTEMPTS, backoff_base: float = BACKOFF_BASE,
                 max_reconnects: int = MAX_RECONNECTS,
                 sleep: Optional[Callable[[float], Awaitable[None]]] = None):
        """Initialize transport.

        Args:
            manager: ConnectionManager providing the link and reconnects
            chunk_size: Maximum bytes per GATT write
            chunk_delay: Pause after each chunk except the last
            attempts: Write attempts per chunk
            backoff_base: First backoff delay; doubles on each retry
            max_reconnects: Inline reconnects allowed during one write
            sleep: Coroutine used for pauses (asyncio.sleep by default)
        """
        self.manager = manager
        self.chunk_size = chunk_size
        self.chunk_delay = chunk_delay
        self.attempts = attempts
        self.backoff_base = backoff_base
        self.max_reconnects = max_reconnects
        self.sleep = sleep or asyncio.sleep

    async def write(self, endpoint: WriteEndpoint, data: bytes) -> Result:
        chunks = split_chunks(data, self.chunk_size)
        state = {"endpoint": endpoint, "reconnects": 0}
        logger.info("Sending %d bytes in %d chunk(s)", len(data), len(chunks))

        for chunk in chunks:
            if not await self._write_chunk(chunk, state):
                logger.error("Chunk %d/%d failed, aborting print", chunk.index + 1, chunk.total)
                return Result.fail(
                    ErrorKind.CHUNK_WRITE_FAILED,
                    f"Failed to write chunk {chunk.index + 1} of {chunk.total}",
                    index=chunk.index,
                    total=chunk.total,
                )
            if chunk.index < chunk.total - 1:
                await self.sleep(self.chunk_delay)

        return Result.ok()

    async def _write_chunk(self, chunk: Chunk, state: dict) -> bool:
        for attempt in range(1, self.attempts + 1):
            link = self.manager.link
            if link is None or not link.is_open:
                if not await self._reconnect(state):
                    return False
                link = self.manager.link

            try:
                await link.write(state["endpoint"], chunk.data)
                return True
            except LinkError as e:
                logger.warning("Chunk %d/%d attempt %d failed: %s",
                               chunk.index + 1, chunk.total, attempt, e)

            # A dropped link goes straight to reconnect on the next attempt
            if attempt < self.attempts and link.is_open:
                await self.sleep(self.backoff_base * 2 ** (attempt - 1))
        return False

    async def _reconnect(self, state: dict) -> bool:
        if state["reconnects"] >= self.max_reconnects:
            logger.warning("Reconnect limit (%d) reached for this print", self.max_reconnects)
            return False
        state["reconnects"] += 1

        result = await self.manager.reconnect()
        if not result.success:
            return False
        state["endpoint"] = result.value
        return True
