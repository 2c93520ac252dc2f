import enum
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from guessnumber.models import Winner


class EventType(enum.Enum):
    ROUND_START = 'ROUND_START'
    COUNTDOWN = 'COUNTDOWN'
    ROUND_RESULT = 'ROUND_RESULT'
    ROUND_END = 'ROUND_END'
    WELCOME = 'WELCOME'
    ERROR = 'ERROR'


@dataclass(frozen=True)
class OutboundEvent:
    """A message pushed to clients.

    Serialized with `to_dict`; fields left as None are omitted from the
    payload.
    """
    type: EventType
    message: Optional[str] = None
    winning_number: Optional[int] = None
    winning: Optional[float] = None
    winners: Optional[Tuple[Winner, ...]] = None
    time_remaining: Optional[int] = None

    @classmethod
    def round_start(cls, duration: int) -> 'OutboundEvent':
        return cls(EventType.ROUND_START,
                   message=f"Round has started! {duration} seconds until the result.",
                   time_remaining=duration)

    @classmethod
    def countdown(cls, seconds_left: int, joining: bool = False) -> 'OutboundEvent':
        if joining:
            message = f"Welcome! Round is running! Time remaining: {seconds_left} seconds"
        else:
            message = f"Time remaining: {seconds_left} seconds"
        return cls(EventType.COUNTDOWN, message=message, time_remaining=seconds_left)

    @classmethod
    def welcome(cls) -> 'OutboundEvent':
        return cls(EventType.WELCOME, message="Welcome! Please wait for the next round.")

    @classmethod
    def error(cls, message: str) -> 'OutboundEvent':
        return cls(EventType.ERROR, message=message)

    @classmethod
    def round_end(cls) -> 'OutboundEvent':
        return cls(EventType.ROUND_END, message="End of round! Please wait for the next round to start.")

    @classmethod
    def round_result(cls, winning_number: int, winners: Sequence[Winner]) -> 'OutboundEvent':
        """Result for connections that did not bet this round."""
        return cls(EventType.ROUND_RESULT,
                   message=f"Winning number: {winning_number}",
                   winning_number=winning_number,
                   winners=tuple(winners))

    @classmethod
    def personal_result(cls, nickname: str, payout: float, winning_number: int,
                        winners: Sequence[Winner]) -> 'OutboundEvent':
        if payout > 0:
            message = f"Congratulations {nickname}! You won: {payout}"
        else:
            message = f"Sorry {nickname}, better luck next time!"
        return cls(EventType.ROUND_RESULT,
                   message=message,
                   winning_number=winning_number,
                   winning=payout,
                   winners=tuple(winners))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'type': self.type.value}
        if self.message is not None:
            data['message'] = self.message
        if self.winning_number is not None:
            data['winningNumber'] = self.winning_number
        if self.winning is not None:
            data['winning'] = self.winning
        if self.winners is not None:
            data['winners'] = [w.to_dict() for w in self.winners]
        if self.time_remaining is not None:
            data['timeRemaining'] = self.time_remaining
        return data
