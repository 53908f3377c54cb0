# coinflip/engine.py
from decimal import Decimal

from bankroll.services import place_bet
from engine.entropy import caller_key
from engine.strategy import Outcome, OutcomeEngine
from .models import CoinFlipGame

PAYOUT_FACTOR = 2


class CoinFlipEngine(OutcomeEngine):
    """Even money. The edge is structural, nothing is deducted from a win."""

    game = "coinflip"

    def max_payout(self, bet: Decimal, **params) -> Decimal:
        return bet * PAYOUT_FACTOR

    def resolve(self, bankroll, user, bet, entropy, guess: bool = True, **params) -> Outcome:
        result = entropy.draw_bounded(2, caller_key(user))
        won = result == int(bool(guess))
        payout = bet * PAYOUT_FACTOR if won else Decimal("0")

        return Outcome(won=won, payout=payout, detail={"result": bool(result)})

    def record(self, bankroll, user, bet, outcome, guess: bool = True, **params) -> None:
        CoinFlipGame.objects.create(
            user=user,
            bet_amount=bet,
            guess=bool(guess),
            result=outcome.detail["result"],
            won=outcome.won,
            payout=outcome.payout,
        )


def flip(user, guess: bool, amount, value=None, entropy=None) -> Outcome:
    return place_bet(CoinFlipEngine(), user, amount, value=value, entropy=entropy, guess=guess)
