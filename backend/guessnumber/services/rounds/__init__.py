"""Round lifecycle: draw, payouts, registries, broadcast and the round loop.

Nothing here imports Flask or Socket.IO; the transport adapts its sockets to
the `Connection` protocol in `broadcast`.
"""
from .engine import RoundEngine
from .draw import DrawSource
from .events import EventType, OutboundEvent

__all__ = ['RoundEngine', 'DrawSource', 'EventType', 'OutboundEvent']
