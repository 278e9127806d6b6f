"""Live-update broadcaster and its connection registry.

Every connected client receives every event: there is no per-client
filtering, no acknowledgement and no queueing for disconnected clients.
Sends are scheduled as background tasks so the request that triggered an
event never waits on a slow or dead socket.

The registry is an explicit object owned by the
:class:`~smart_workflow.manager.WorkflowManager`. All mutations happen on
the event loop thread, so a plain ``set`` is sufficient.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from smart_workflow.core.types import LiveEvent

logger = logging.getLogger(__name__)


@runtime_checkable
class Channel(Protocol):
    """Anything that can push a text frame (``starlette.websockets.WebSocket``)."""

    async def send_text(self, data: str) -> None: ...


class ConnectionRegistry:
    """Set of currently open live-update channels.

    Channels are added when the socket is accepted and discarded on the
    socket's own close signal. The broadcaster never removes entries.
    """

    def __init__(self) -> None:
        self._channels: set[Channel] = set()

    def add(self, channel: Channel) -> None:
        self._channels.add(channel)
        logger.debug("Live channel opened (%d connected)", len(self._channels))

    def discard(self, channel: Channel) -> None:
        self._channels.discard(channel)
        logger.debug("Live channel closed (%d connected)", len(self._channels))

    def snapshot(self) -> list[Channel]:
        """Copy of the current channels, safe to iterate while others connect."""
        return list(self._channels)

    def __contains__(self, channel: object) -> bool:
        return channel in self._channels

    def __iter__(self) -> Iterator[Channel]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._channels)


class LiveUpdateBroadcaster:
    """Fire-and-forget fan-out of :class:`~smart_workflow.core.types.LiveEvent` frames.

    Example:
        ```python
        registry = ConnectionRegistry()
        broadcaster = LiveUpdateBroadcaster(registry)
        broadcaster.broadcast(LiveEvent(type=LiveEventType.PROJECT_DELETED, data={"id": pid}))
        ```
    """

    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry
        self._pending: set[asyncio.Task[None]] = set()

    def broadcast(self, event: LiveEvent) -> int:
        """Schedule delivery of *event* to every open channel.

        Must be called from a running event loop. Returns the number of
        channels a send was scheduled for.
        """
        payload = event.model_dump_json()
        channels = self.registry.snapshot()
        loop = asyncio.get_running_loop()
        for channel in channels:
            task = loop.create_task(self._send(channel, payload))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        logger.info("Broadcast %s to %d client(s)", event.type.value, len(channels))
        return len(channels)

    async def _send(self, channel: Channel, payload: str) -> None:
        try:
            await channel.send_text(payload)
        except Exception as exc:
            # closed sockets are pruned by their own disconnect handler
            logger.warning("Live update send failed: %s", exc)

    @property
    def pending(self) -> int:
        """Number of sends still in flight."""
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled send to finish (shutdown and tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


__all__ = ["Channel", "ConnectionRegistry", "LiveUpdateBroadcaster"]
