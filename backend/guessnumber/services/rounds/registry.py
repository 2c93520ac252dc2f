"""Thread-safe registries for connected clients and their pending bets.

Each map operation holds the registry lock only for its own duration;
iteration goes over a snapshot so a broadcast never blocks registration.
"""
import itertools
import logging
import threading
from typing import Dict, List, Optional

from guessnumber.models import Bet, BetPayload
from .broadcast import Connection, fan_out
from .events import OutboundEvent


class ConnectionRegistry:

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._connections: Dict[str, Connection] = {}
        self._lock = threading.Lock()
        self._logger = logger or logging.getLogger(__name__)

    def add(self, connection: Connection) -> bool:
        """Store the connection unless its id is already present."""
        with self._lock:
            if connection.id in self._connections:
                return False
            self._connections[connection.id] = connection
            return True

    def remove(self, connection_id: str) -> Optional[Connection]:
        with self._lock:
            return self._connections.pop(connection_id, None)

    def get(self, connection_id: str) -> Optional[Connection]:
        with self._lock:
            return self._connections.get(connection_id)

    def snapshot(self) -> List[Connection]:
        with self._lock:
            return list(self._connections.values())

    def broadcast_all(self, event: OutboundEvent) -> int:
        # Closed connections stay registered until their disconnect arrives.
        return fan_out(self.snapshot(), event, self._logger)

    def __contains__(self, connection_id) -> bool:
        with self._lock:
            return connection_id in self._connections

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)


class BetRegistry:
    """At most one bet per connection id for the round in progress."""

    def __init__(self):
        self._bets: Dict[str, Bet] = {}
        self._lock = threading.Lock()
        self._seq = itertools.count(1)

    def place(self, connection_id: str, payload: BetPayload) -> Bet:
        """Build a bet from `payload` and store it, replacing any earlier one.

        Raises InvalidBet if the fields are out of range; nothing is stored
        in that case.
        """
        with self._lock:
            bet = Bet.from_payload(connection_id, payload, seq=next(self._seq))
            self._bets[connection_id] = bet
            return bet

    def remove(self, connection_id: str) -> Optional[Bet]:
        with self._lock:
            return self._bets.pop(connection_id, None)

    def get(self, connection_id: str) -> Optional[Bet]:
        with self._lock:
            return self._bets.get(connection_id)

    def snapshot(self) -> List[Bet]:
        """Pending bets in submission order."""
        with self._lock:
            bets = list(self._bets.values())
        return sorted(bets, key=lambda b: b.seq)

    def clear(self) -> None:
        with self._lock:
            self._bets.clear()

    def __contains__(self, connection_id) -> bool:
        with self._lock:
            return connection_id in self._bets

    def __len__(self) -> int:
        with self._lock:
            return len(self._bets)
