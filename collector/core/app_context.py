from __future__ import annotations

import logging

from redis.asyncio import Redis

from collector.core.dispatch import DispatchGateway
from collector.core.event_handler import EventHandler
from collector.core.identity import TrackingIdentity
from collector.core.processing_pool import PartitionedProcessingPool, ProcessingPool
from collector.core.response import TransparentImage
from collector.core.settings import Settings, load_settings
from collector.infra.redis_event_sink import RedisEventSink

logger = logging.getLogger(__name__)


class AppContext:
    """
    Process-wide application context.

    Everything shared between requests is built here once and is read-only
    afterwards: the settings, the transparent image and the two tracking
    identities. Any configuration problem surfaces as ``ConfigurationError``
    from the constructor, before the service accepts traffic.

    A ``pool`` may be injected; otherwise a partitioned pool feeding Redis
    Streams is created and owned by the context.
    """

    def __init__(self, settings: Settings | None = None, *, pool: ProcessingPool | None = None) -> None:
        self.settings = settings or load_settings()

        self.redis: Redis | None = None
        self._owned_pool: PartitionedProcessingPool | None = None
        if pool is None:
            self.redis = Redis.from_url(self.settings.redis_url, decode_responses=False)
            sink = RedisEventSink(self.redis, stream=self.settings.redis_stream, maxlen=self.settings.redis_stream_maxlen)
            self._owned_pool = PartitionedProcessingPool(
                sink=sink,
                partitions=self.settings.pool_partitions,
                max_queue=self.settings.max_write_queue,
                max_enqueue_delay_s=self.settings.max_enqueue_delay.total_seconds(),
            )
            pool = self._owned_pool
        self.pool = pool

        self.handler = EventHandler(
            party=TrackingIdentity(
                cookie_name=self.settings.party_cookie,
                timeout=self.settings.party_timeout,
                domain=self.settings.cookie_domain,
            ),
            session=TrackingIdentity(
                cookie_name=self.settings.session_cookie,
                timeout=self.settings.session_timeout,
                domain=self.settings.cookie_domain,
            ),
            image=TransparentImage.load(),
            gateway=DispatchGateway(pool),
        )
        self._bg_started = False

    async def start_background(self) -> None:
        if self._bg_started:
            return
        self._bg_started = True
        if self._owned_pool is not None:
            self._owned_pool.start()
        logger.info(
            "Collector ready: party cookie %s (%s), session cookie %s (%s)",
            self.settings.party_cookie,
            self.settings.party_timeout,
            self.settings.session_cookie,
            self.settings.session_timeout,
        )

    async def shutdown(self) -> None:
        if self._owned_pool is not None:
            await self._owned_pool.stop()
        if self.redis is not None:
            await self.redis.aclose()
