import enum
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from guessnumber.exceptions import InvalidBet

MIN_PICK = 1
MAX_PICK = 10


class Phase(enum.Enum):
    WAITING = 'waiting'
    BETTING = 'betting'
    RESOLVING = 'resolving'


@dataclass(frozen=True)
class BetPayload:
    """Decoded bet frame as handed over by the transport."""
    nickname: str
    bet_amount: float
    picked_number: int


@dataclass(frozen=True)
class Winner:
    nickname: str
    winning: float

    def to_dict(self):
        return {'nickname': self.nickname, 'winning': self.winning}


class Bet:
    """One pending wager for the current round.

    Stake and picked number are fixed at construction. The payout starts at
    0 and can be settled exactly once, during resolution.
    """

    def __init__(self, owner_id: str, nickname: str, bet_amount: float, picked_number: int, seq: int = 0):
        if not isinstance(nickname, str) or not nickname.strip():
            raise InvalidBet('nickname is required')
        if isinstance(bet_amount, bool) or not isinstance(bet_amount, (int, float)):
            raise InvalidBet(f'betAmount must be a number, got {bet_amount!r}')
        if not math.isfinite(bet_amount) or bet_amount <= 0:
            raise InvalidBet(f'betAmount must be positive, got {bet_amount!r}')
        if isinstance(picked_number, bool) or not isinstance(picked_number, int):
            raise InvalidBet(f'pickedNumber must be an integer, got {picked_number!r}')
        if not MIN_PICK <= picked_number <= MAX_PICK:
            raise InvalidBet(f'pickedNumber must be between {MIN_PICK} and {MAX_PICK}, got {picked_number}')
        self.owner_id = owner_id
        self.nickname = nickname
        self._bet_amount = float(bet_amount)
        self._picked_number = picked_number
        self.seq = seq
        self._payout = 0.0
        self._settled = False

    @classmethod
    def from_payload(cls, owner_id: str, payload: BetPayload, seq: int = 0) -> 'Bet':
        return cls(owner_id, payload.nickname, payload.bet_amount, payload.picked_number, seq=seq)

    @property
    def bet_amount(self) -> float:
        return self._bet_amount

    @property
    def picked_number(self) -> int:
        return self._picked_number

    @property
    def payout(self) -> float:
        return self._payout

    @property
    def is_settled(self) -> bool:
        return self._settled

    def settle(self, amount: float) -> None:
        if self._settled:
            raise InvalidBet(f'bet of {self.owner_id} already settled')
        self._payout = amount
        self._settled = True

    def __repr__(self):
        return (f"Bet(owner_id={self.owner_id!r}, nickname={self.nickname!r}, "
                f"bet_amount={self._bet_amount}, picked_number={self._picked_number}, payout={self._payout})")


@dataclass(frozen=True)
class RoundResult:
    winning_number: int
    winners: Tuple[Winner, ...]
    bets: List[Bet] = field(default_factory=list)

    def bet_for(self, owner_id: str) -> Optional[Bet]:
        for bet in self.bets:
            if bet.owner_id == owner_id:
                return bet
        return None

    @property
    def total_wagered(self) -> float:
        return sum(b.bet_amount for b in self.bets)

    @property
    def total_paid(self) -> float:
        return sum(b.payout for b in self.bets)
