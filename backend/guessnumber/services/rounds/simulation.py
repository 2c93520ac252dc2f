"""Return-to-player simulation over manually driven engines.

Each worker owns its own engine and draw source, so workers never share a
generator or a registry.
"""
import logging
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from guessnumber.models import BetPayload, MIN_PICK, MAX_PICK, Phase
from .draw import DrawSource
from .engine import RoundEngine

_engine_logger = logging.getLogger(f"{__name__}.engine")
_engine_logger.setLevel(logging.WARNING)

PLAYER_ID = 'simulated-player'


@dataclass
class SimulationResult:
    rounds: int = 0
    wagered: float = 0.0
    won: float = 0.0
    wins: int = 0

    @property
    def rtp(self) -> float:
        return self.won / self.wagered if self.wagered else 0.0

    @property
    def win_rate(self) -> float:
        return self.wins / self.rounds if self.rounds else 0.0

    def merge(self, other: 'SimulationResult') -> 'SimulationResult':
        return SimulationResult(
            rounds=self.rounds + other.rounds,
            wagered=self.wagered + other.wagered,
            won=self.won + other.won,
            wins=self.wins + other.wins,
        )


def run_rounds(rounds: int, stake: float = 100.0, seed: Optional[int] = None) -> SimulationResult:
    """Play `rounds` rounds with one player picking uniformly at random."""
    engine = RoundEngine(duration=0, draw_source=DrawSource(seed), logger=_engine_logger)
    picker = random.Random(None if seed is None else seed + 1)
    payload_for = {n: BetPayload('Player', stake, n) for n in range(MIN_PICK, MAX_PICK + 1)}
    result = SimulationResult()
    for _ in range(rounds):
        if engine.phase is Phase.WAITING:
            engine.start_round()
        engine.submit_bet(PLAYER_ID, payload_for[picker.randint(MIN_PICK, MAX_PICK)])
        bet = engine.resolve_round().bet_for(PLAYER_ID)
        result.rounds += 1
        result.wagered += bet.bet_amount
        if bet.payout > 0:
            result.won += bet.payout
            result.wins += 1
    return result


def simulate_rtp(rounds: int, stake: float = 100.0, workers: int = 4,
                 seed: Optional[int] = None) -> SimulationResult:
    """Split `rounds` across `workers` independent engines and merge the totals."""
    workers = max(1, min(workers, rounds)) if rounds > 0 else 1
    per_worker, leftover = divmod(rounds, workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [
            pool.submit(
                run_rounds,
                per_worker + (leftover if i == workers - 1 else 0),
                stake,
                None if seed is None else seed + 2 * i,
            )
            for i in range(workers)
        ]
        total = SimulationResult()
        for future in futures:
            total = total.merge(future.result())
    return total
