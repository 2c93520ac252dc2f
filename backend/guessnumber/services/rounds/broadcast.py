import logging
from typing import Iterable, Optional, Protocol

from .events import OutboundEvent

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """What the engine needs from a connected client."""

    id: str

    def is_open(self) -> bool:
        ...

    def send(self, event: OutboundEvent) -> None:
        ...


def deliver(connection: Optional[Connection], event: OutboundEvent, log: Optional[logging.Logger] = None) -> bool:
    """Best-effort send to one connection. Returns True if the send went out.

    Closed connections are skipped and send errors are logged, never raised.
    """
    log = log or logger
    if connection is None:
        return False
    try:
        if not connection.is_open():
            return False
        connection.send(event)
        return True
    except Exception:
        log.warning(f"[send-failed] conn={getattr(connection, 'id', None)} type={event.type.value}", exc_info=True)
        return False


def fan_out(connections: Iterable[Connection], event: OutboundEvent, log: Optional[logging.Logger] = None) -> int:
    """Send `event` to every open connection; returns how many sends succeeded."""
    sent = 0
    for connection in connections:
        if deliver(connection, event, log):
            sent += 1
    return sent
