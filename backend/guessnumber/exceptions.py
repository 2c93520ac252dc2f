"""Exceptions raised by the round engine and the socket transport."""


class GuessNumberException(Exception):
    """Base class for all game errors."""
    pass


class InvalidStateTransition(GuessNumberException):
    """A phase change that the round state machine does not allow."""
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move round from {current.value} to {target.value}")


class InvalidBet(GuessNumberException, ValueError):
    """Bet fields are out of range (stake, picked number or nickname)."""
    pass


class InvalidPayload(GuessNumberException, ValueError):
    """Inbound frame is empty, not JSON, or does not have the bet shape."""
    pass
