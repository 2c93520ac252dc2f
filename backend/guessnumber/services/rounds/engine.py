import logging
import threading
import time
from typing import Callable, Optional

from guessnumber.exceptions import InvalidStateTransition
from guessnumber.models import BetPayload, Bet, Phase, RoundResult
from . import payout
from .broadcast import Connection, deliver, fan_out
from .draw import DrawSource
from .events import OutboundEvent
from .registry import BetRegistry, ConnectionRegistry

BETTING_CLOSED_MESSAGE = "Betting phase is over. Please wait for the next round."

_TRANSITIONS = {
    Phase.WAITING: Phase.BETTING,
    Phase.BETTING: Phase.RESOLVING,
    Phase.RESOLVING: Phase.WAITING,
}


def _spawn_thread(target, *args):
    thread = threading.Thread(target=target, args=args, name='round-engine', daemon=True)
    thread.start()
    return thread


class RoundEngine:
    """Runs the betting round loop and owns the connection and bet registries.

    With a positive `duration` the engine drives itself once `start()` is
    called: a single background loop ticks every `tick` seconds over a cycle
    of `duration + 1` ticks. Tick 0 opens the round, even ticks while
    betting broadcast a countdown, tick `duration` resolves the round and
    the remaining tick is the pause before the next round.

    With `duration <= 0` no loop is ever started. The phase is BETTING from
    construction and callers drive `start_round()` / `resolve_round()`
    themselves (used for high-volume simulation).
    """

    def __init__(self, duration: int = 10, draw_source: Optional[DrawSource] = None, tick: float = 1.0,
                 logger: Optional[logging.Logger] = None,
                 start_background_task: Optional[Callable] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.duration = int(duration)
        self.tick = float(tick)
        self.draw_source = draw_source or DrawSource()
        self.logger = logger or logging.getLogger(__name__)
        self.connections = ConnectionRegistry(self.logger)
        self.bets = BetRegistry()
        self.last_result: Optional[RoundResult] = None
        self._start_background_task = start_background_task or _spawn_thread
        self._clock = clock
        self._phase_lock = threading.Lock()
        self._stopped = threading.Event()
        self._tick_lock = threading.Lock()
        self._running = False
        if self.manual:
            self._phase = Phase.BETTING
            self.round_started_at: Optional[float] = clock()
        else:
            self._phase = Phase.WAITING
            self.round_started_at = None

    @property
    def manual(self) -> bool:
        return self.duration <= 0

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def running(self) -> bool:
        return self._running

    # ---- Loop lifecycle ----

    def start(self) -> None:
        if self.manual:
            self.logger.info("[loop-disabled] manual mode, round loop not started")
            return
        if self._running:
            return
        self._running = True
        # Each loop gets its own stop event so a restart never revives an old loop.
        self._stopped = threading.Event()
        self._start_background_task(self._loop, self._stopped)

    def stop(self) -> None:
        """Cancel upcoming ticks. A tick already running is allowed to finish."""
        self._stopped.set()
        self._running = False

    def _loop(self, stopped: threading.Event) -> None:
        self.logger.info(f"[loop-start] duration={self.duration} tick={self.tick}s")
        cycle = self.duration + 1
        position = 0
        deadline = self._clock() + self.tick
        while not stopped.is_set():
            delay = deadline - self._clock()
            if delay > 0 and stopped.wait(delay):
                break
            # A stopped loop may still be finishing its tick; ticks never overlap.
            with self._tick_lock:
                if stopped.is_set():
                    break
                self._run_task(self._on_tick, position)
            position = (position + 1) % cycle
            deadline += self.tick
            now = self._clock()
            if now - deadline > self.tick:
                self.logger.warning(f"[tick-late] behind={now - deadline:.3f}s position={position}")
                deadline = now
        self.logger.info("[loop-stop]")

    def _run_task(self, task: Callable, *args) -> None:
        # Nothing may escape a tick, otherwise the round loop dies.
        try:
            task(*args)
        except Exception:
            self.logger.exception(f"[task-failed] task={task.__name__} args={args}")

    def _on_tick(self, position: int) -> None:
        if position == 0:
            if self._phase is not Phase.WAITING:
                self.logger.warning(f"[round-skip] phase={self._phase.value}")
                return
            self.start_round()
            return
        self._countdown(position)
        if position == self.duration:
            self.resolve_round()

    # ---- Phase transitions ----

    def _transition(self, target: Phase) -> None:
        """Move to `target`; caller holds the phase lock."""
        if _TRANSITIONS[self._phase] is not target:
            raise InvalidStateTransition(self._phase, target)
        self._phase = target

    def start_round(self) -> None:
        with self._phase_lock:
            self._transition(Phase.BETTING)
            self.round_started_at = self._clock()
        self.logger.info(f"[round-start] duration={self.duration}")
        self.broadcast_all(OutboundEvent.round_start(self.duration))

    def _countdown(self, elapsed: int) -> None:
        if self._phase is not Phase.BETTING or elapsed % 2:
            return
        seconds_left = self.duration - elapsed
        self.logger.debug(f"[countdown] remaining={seconds_left}")
        self.broadcast_all(OutboundEvent.countdown(seconds_left))

    def resolve_round(self) -> RoundResult:
        """Close betting, draw, settle payouts and notify everyone.

        If anything fails midway the round is discarded (bets cleared, phase
        back to WAITING) and the error is re-raised.
        """
        with self._phase_lock:
            self._transition(Phase.RESOLVING)
        try:
            winning_number = self.draw_source.draw()
            bets = self.bets.snapshot()
            payout.resolve(winning_number, bets)
            winners = payout.rank_winners(bets)
            result = RoundResult(winning_number, tuple(winners), bets)
            self.logger.info(
                f"[round-result] winning_number={winning_number} bets={len(bets)} winners={len(winners)}"
            )
            self._broadcast_result(result)
            self.broadcast_all(OutboundEvent.round_end())
        except Exception:
            self.logger.error("[round-reset] resolution failed, discarding pending bets")
            self._reset_round()
            raise
        self.bets.clear()
        with self._phase_lock:
            self._transition(Phase.WAITING)
        self.last_result = result
        self.logger.info("[round-end]")
        return result

    def _reset_round(self) -> None:
        self.bets.clear()
        with self._phase_lock:
            self._phase = Phase.WAITING

    def _broadcast_result(self, result: RoundResult) -> None:
        bettors = set()
        for bet in result.bets:
            bettors.add(bet.owner_id)
            connection = self.connections.get(bet.owner_id)
            if connection is None:
                continue
            deliver(connection, OutboundEvent.personal_result(
                bet.nickname, bet.payout, result.winning_number, result.winners
            ), self.logger)
        spectators = [c for c in self.connections.snapshot() if c.id not in bettors]
        if spectators:
            fan_out(spectators, OutboundEvent.round_result(result.winning_number, result.winners), self.logger)

    # ---- Connections and bets ----

    def time_remaining(self) -> int:
        if self.round_started_at is None:
            return max(0, self.duration)
        elapsed = int((self._clock() - self.round_started_at) / self.tick)
        return max(0, self.duration - elapsed)

    def register(self, connection: Optional[Connection]) -> bool:
        if connection is None:
            self.logger.warning("[connect-rejected] connection is None")
            return False
        if not connection.is_open():
            self.logger.warning(f"[connect-rejected] conn={connection.id} is closed")
            return False
        if not self.connections.add(connection):
            self.logger.warning(f"[connect-rejected] conn={connection.id} already registered")
            return False
        self.logger.info(f"[connect] conn={connection.id} total={len(self.connections)}")
        if self._phase is Phase.BETTING:
            event = OutboundEvent.countdown(self.time_remaining(), joining=True)
        else:
            event = OutboundEvent.welcome()
        deliver(connection, event, self.logger)
        return True

    def unregister(self, connection_id: str) -> Optional[Connection]:
        """Drop the connection; its pending bet is forfeited."""
        removed = self.connections.remove(connection_id)
        forfeited = self.bets.remove(connection_id)
        self.logger.info(
            f"[disconnect] conn={connection_id} known={removed is not None} bet_dropped={forfeited is not None}"
        )
        return removed

    def submit_bet(self, connection_id: Optional[str], payload: Optional[BetPayload]) -> Optional[Bet]:
        if not connection_id or payload is None:
            self.logger.warning("[bet-ignored] missing connection id or payload")
            return None
        with self._phase_lock:
            betting = self._phase is Phase.BETTING
            if betting:
                try:
                    bet = self.bets.place(connection_id, payload)
                except Exception as exc:
                    self.logger.warning(f"[bet-invalid] conn={connection_id} error={exc}")
                    return None
        if not betting:
            self.logger.info(f"[bet-rejected] conn={connection_id} phase={self._phase.value}")
            deliver(self.connections.get(connection_id), OutboundEvent.error(BETTING_CLOSED_MESSAGE), self.logger)
            return None
        self.logger.debug(f"[bet-placed] conn={connection_id} amount={bet.bet_amount} pick={bet.picked_number}")
        return bet

    def broadcast_all(self, event: OutboundEvent) -> int:
        return self.connections.broadcast_all(event)
