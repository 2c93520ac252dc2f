from typing import Iterable, List

from guessnumber.models import Bet, Winner

# With ten equally likely numbers this returns 0.99 of every stake in the long run.
MULTIPLIER = 9.9


def compute_payout(bet: Bet, winning_number: int) -> float:
    if bet.picked_number == winning_number:
        return bet.bet_amount * MULTIPLIER
    return 0.0


def resolve(winning_number: int, bets: Iterable[Bet]) -> None:
    """Settle the payout of every bet against the drawn number."""
    for bet in bets:
        bet.settle(compute_payout(bet, winning_number))


def rank_winners(bets: Iterable[Bet]) -> List[Winner]:
    """Winning bets only, highest payout first.

    Equal payouts keep submission order (`Bet.seq`).
    """
    winning = sorted((b for b in bets if b.payout > 0), key=lambda b: b.seq)
    winning.sort(key=lambda b: b.payout, reverse=True)
    return [Winner(b.nickname, b.payout) for b in winning]
