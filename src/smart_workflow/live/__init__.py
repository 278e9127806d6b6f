"""Live-update channel: connection registry and broadcaster."""

from smart_workflow.live.broadcaster import Channel, ConnectionRegistry, LiveUpdateBroadcaster

__all__ = ["Channel", "ConnectionRegistry", "LiveUpdateBroadcaster"]
