from __future__ import annotations

import logging

from collector.core.processing_pool import ProcessingPool
from collector.schema.events import BeaconEvent

logger = logging.getLogger(__name__)


class DispatchGateway:
    """
    Hands accepted events to the processing pool, keyed by party id.

    Runs after the client already has its response, so a pool failure can only
    be logged; it is not retried and never reaches the client.
    """

    def __init__(self, pool: ProcessingPool) -> None:
        self._pool = pool

    async def dispatch(self, event: BeaconEvent) -> None:
        logger.debug("Enqueuing event: %s/%s", event.party_id, event.session_id)
        try:
            await self._pool.enqueue(event.party_id, event)
        except Exception:
            logger.exception("Downstream fault while enqueuing event for party %s", event.party_id)
