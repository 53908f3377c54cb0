# wheel/engine.py
from decimal import Decimal

from bankroll.services import place_bet
from engine.entropy import caller_key
from engine.strategy import Outcome, OutcomeEngine
from .models import WheelGame, LastSpin

# basis points, in segment order
SEGMENT_WEIGHTS = (1900, 1900, 2200, 2100, 1000, 600, 300)
# tenths: 0x, 0x, 1.5x, 2x, 3x, 5x, 10x
SEGMENT_MULTIPLIERS = (0, 0, 15, 20, 30, 50, 100)
WEIGHT_TOTAL = 10000


def pick_segment(r: int) -> int:
    """First segment whose cumulative weight exceeds r."""
    cumulative = 0
    for index, weight in enumerate(SEGMENT_WEIGHTS):
        cumulative += weight
        if r < cumulative:
            return index
    raise ValueError(f"draw {r} outside [0, {WEIGHT_TOTAL})")


def payout_for(bet: Decimal, multiplier_tenths: int) -> Decimal:
    # integer math; the default decimal context keeps only 28 digits
    return Decimal(int(bet) * multiplier_tenths // 10)


class WheelEngine(OutcomeEngine):
    game = "wheel"

    def max_payout(self, bet: Decimal, **params) -> Decimal:
        return payout_for(bet, max(SEGMENT_MULTIPLIERS))

    def resolve(self, bankroll, user, bet, entropy, **params) -> Outcome:
        r = entropy.draw_bounded(WEIGHT_TOTAL, caller_key(user))
        segment = pick_segment(r)
        tenths = SEGMENT_MULTIPLIERS[segment]
        payout = payout_for(bet, tenths)

        return Outcome(
            won=payout > 0,
            payout=payout,
            detail={"segment": segment, "multiplier_tenths": tenths},
        )

    def record(self, bankroll, user, bet, outcome, **params) -> None:
        WheelGame.objects.create(
            user=user,
            bet_amount=bet,
            result_segment=outcome.detail["segment"],
            multiplier_tenths=outcome.detail["multiplier_tenths"],
            payout=outcome.payout,
        )

        # Win or lose, the cache moves forward
        last, _ = LastSpin.objects.select_for_update().get_or_create(user=user)
        last.outcome_index = outcome.detail["segment"]
        last.multiplier_tenths = outcome.detail["multiplier_tenths"]
        last.won = outcome.won
        last.amount = outcome.payout
        last.nonce += 1
        last.save()

        outcome.detail["nonce"] = last.nonce


def spin(user, amount, value=None, entropy=None) -> Outcome:
    return place_bet(WheelEngine(), user, amount, value=value, entropy=entropy)
