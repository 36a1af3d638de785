from __future__ import annotations

import asyncio
import logging
import zlib
from typing import Protocol

from collector.core.errors import DownstreamFault
from collector.schema.events import BeaconEvent

logger = logging.getLogger(__name__)


class ProcessingPool(Protocol):
    async def enqueue(self, partition_key: str, event: BeaconEvent) -> None: ...


class EventSink(Protocol):
    async def append(self, partition: int, event: BeaconEvent) -> None: ...


class PartitionedProcessingPool:
    """
    In-process processing pool: one bounded FIFO queue and one worker per partition.

    Events sharing a partition key always land on the same queue, so their
    delivery order to the sink is their enqueue order. Ordering across
    partitions is unspecified. A full queue is waited on for at most
    ``max_enqueue_delay_s``; after that the event is dropped with a warning.
    """

    def __init__(
        self,
        *,
        sink: EventSink,
        partitions: int = 2,
        max_queue: int = 100,
        max_enqueue_delay_s: float = 1.0,
    ) -> None:
        if partitions < 1:
            raise ValueError(f"partitions must be positive: {partitions}")
        self._sink = sink
        self._max_enqueue_delay_s = max_enqueue_delay_s
        self._queues: list[asyncio.Queue[BeaconEvent]] = [asyncio.Queue(maxsize=max_queue) for _ in range(partitions)]
        self._tasks: list[asyncio.Task] = []
        self._running = False
        self.dropped = 0

    @property
    def partitions(self) -> int:
        return len(self._queues)

    def partition_for(self, partition_key: str) -> int:
        return zlib.crc32(partition_key.encode("utf-8")) % len(self._queues)

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._tasks = [
            asyncio.create_task(self._run(i), name=f"processing-partition-{i}") for i in range(len(self._queues))
        ]

    async def stop(self, timeout_s: float = 3.0) -> None:
        if not self._running:
            return
        self._running = False
        try:
            await asyncio.wait_for(asyncio.gather(*(q.join() for q in self._queues)), timeout=timeout_s)
        except asyncio.TimeoutError:
            pending = sum(q.qsize() for q in self._queues)
            logger.warning("Processing pool stopped with %d undelivered events", pending)
        for t in self._tasks:
            t.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

    async def enqueue(self, partition_key: str, event: BeaconEvent) -> None:
        if not self._running:
            raise DownstreamFault("processing pool is not running")
        q = self._queues[self.partition_for(partition_key)]
        try:
            q.put_nowait(event)
            return
        except asyncio.QueueFull:
            pass
        try:
            await asyncio.wait_for(q.put(event), timeout=self._max_enqueue_delay_s)
        except asyncio.TimeoutError:
            self.dropped += 1
            logger.warning("Failed to enqueue event for processing within %.3fs; dropping it", self._max_enqueue_delay_s)

    async def join(self) -> None:
        await asyncio.gather(*(q.join() for q in self._queues))

    async def _run(self, partition: int) -> None:
        q = self._queues[partition]
        while True:
            event = await q.get()
            try:
                await self._sink.append(partition, event)
            except Exception:
                logger.exception("Event sink failed on partition %d for party %s", partition, event.party_id)
            finally:
                q.task_done()
