"""OutboundChannel protocol: interface for delivering replies to the owner."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class OutboundChannel(Protocol):
    """Protocol that outbound transports must satisfy."""

    @property
    def name(self) -> str:
        """Unique channel identifier (e.g. 'telegram')."""
        ...

    async def send(self, chat_id: int, message: str) -> int:
        """Send a text message, split as needed. Returns the number of parts sent.

        Raises on delivery failure; callers decide whether to swallow it.
        """
        ...

    async def send_presence(self, chat_id: int) -> bool:
        """Show a best-effort "working" indicator. Returns True on success."""
        ...
