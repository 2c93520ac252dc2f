from flask import current_app, request
from flask_socketio import emit

from guessnumber import socketio
from guessnumber.exceptions import InvalidPayload
from guessnumber.services.rounds.events import OutboundEvent
from guessnumber.validation import decode_bet_payload

NAMESPACE = '/ws'
EVENT_NAME = 'game_event'


class SocketIOConnection:
    """Adapts one Socket.IO client (by sid) to the engine's Connection protocol."""

    def __init__(self, sid: str, namespace: str = NAMESPACE):
        self.id = sid
        self.namespace = namespace
        self._open = True

    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        self._open = False

    def send(self, event: OutboundEvent) -> None:
        # socketio.emit works from the round loop's background task too
        socketio.emit(EVENT_NAME, event.to_dict(), to=self.id, namespace=self.namespace)


def _engine():
    return current_app.extensions['round_engine']


def _get_sid() -> str:
    return request.sid  # type: ignore


def handle_connect(auth=None):
    _engine().register(SocketIOConnection(_get_sid()))


def handle_disconnect(reason=None):
    engine = _engine()
    sid = _get_sid()
    connection = engine.connections.get(sid)
    if connection is not None:
        connection.close()
    engine.unregister(sid)


def handle_bet(data):
    sid = _get_sid()
    try:
        payload = decode_bet_payload(data)
    except InvalidPayload as exc:
        # Sender is not told; the frame is only logged.
        current_app.logger.warning(f"[payload-rejected] conn={sid} error={exc}")
        return
    current_app.logger.info(f"[bet-received] conn={sid} payload={data}")
    emit('bet_received', {'message': f"Server received: {data}"})
    _engine().submit_bet(sid, payload)


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'.

    Bets arrive either as a `bet` event or as a plain `message` text frame.
    """
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('bet', handle_bet, namespace=NAMESPACE)
    socketio.on_event('message', handle_bet, namespace=NAMESPACE)
