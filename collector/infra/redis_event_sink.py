from __future__ import annotations

from redis.asyncio import Redis
from redis.exceptions import RedisError

from collector.schema.events import BeaconEvent


class EventSinkError(RuntimeError):
    pass


class RedisEventSink:
    """
    Downstream hand-off of accepted events into Redis Streams.

    Constraints:
    - one stream per partition, so per-party receipt order survives
    - the raw request context is stored as-is; parsing happens further downstream
    - streams are trimmed approximately to ``maxlen`` entries
    """

    def __init__(self, redis: Redis, *, stream: str = "collector:events", maxlen: int = 100_000) -> None:
        self._r = redis
        self._stream = stream
        self._maxlen = maxlen

    def _k_stream(self, partition: int) -> str:
        return f"{self._stream}:{partition}"

    async def append(self, partition: int, event: BeaconEvent) -> None:
        fields = {
            "party_id": event.party_id,
            "session_id": event.session_id,
            "received_at": str(event.context.received_at),
            "context": event.context.model_dump_json(),
        }
        try:
            await self._r.xadd(self._k_stream(partition), fields, maxlen=self._maxlen, approximate=True)
        except RedisError as e:
            raise EventSinkError(f"could not append event for party {event.party_id}: {e}") from e
