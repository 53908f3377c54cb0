# crash/engine.py
from decimal import Decimal

from bankroll.exceptions import BettingClosed, InsufficientBankroll, InvalidBet, PayoutCapExceeded
from bankroll.services import place_bet
from engine.strategy import Outcome, OutcomeEngine
from .models import CrashBet, Round
from .rounds import MAX_CRASH_TENTHS, current_round

MIN_AUTO_CASHOUT = 11    # 1.1x
MAX_AUTO_CASHOUT = 300   # 30.0x

BASIS_POINTS = 10000
HOUSE_EDGE_BP = 200           # 2%
MAX_PAYOUT_SHARE_BP = 2500    # 25% of available bankroll per bet


def net_payout(bet: Decimal, auto_cashout: int) -> Decimal:
    gross = int(bet) * auto_cashout // 10
    return Decimal(gross * (BASIS_POINTS - HOUSE_EDGE_BP) // BASIS_POINTS)


class CrashEngine(OutcomeEngine):
    """
    Settles a bet against the round's pre-drawn multiplier. Nothing is
    drawn per bet; the caps use the bankroll as it stands at settlement.
    """

    game = "crash"

    def __init__(self, round_obj: Round):
        self.round = round_obj

    def validate(self, bet, auto_cashout=None, **params) -> None:
        if auto_cashout is None:
            raise InvalidBet("auto_cashout is required")
        if not MIN_AUTO_CASHOUT <= auto_cashout <= MAX_AUTO_CASHOUT:
            raise InvalidBet(
                f"auto_cashout must be between {MIN_AUTO_CASHOUT} and {MAX_AUTO_CASHOUT}"
            )
        if not self.round.is_betting():
            raise BettingClosed()

    def max_payout(self, bet, **params) -> Decimal:
        return Decimal(int(bet) * MAX_CRASH_TENTHS // 10)

    def resolve(self, bankroll, user, bet, entropy, auto_cashout=None, **params) -> Outcome:
        detail = {
            "round_id": self.round.round_id,
            "auto_cashout": auto_cashout,
        }

        if auto_cashout > self.round.crash_multiplier:
            return Outcome(won=False, payout=Decimal("0"), detail=detail)

        payout = net_payout(bet, auto_cashout)
        # ints, so a large bankroll cannot overflow the decimal context
        available = int(bankroll.available)

        if payout > available * MAX_PAYOUT_SHARE_BP // BASIS_POINTS:
            raise PayoutCapExceeded()
        if payout > available:
            raise InsufficientBankroll()

        return Outcome(won=True, payout=payout, detail=detail)

    def record(self, bankroll, user, bet, outcome, auto_cashout=None, **params) -> None:
        CrashBet.objects.create(
            user=user,
            round=self.round,
            bet_amount=bet,
            auto_cashout=auto_cashout,
            won=outcome.won,
            payout=outcome.payout,
        )


def play(user, amount, auto_cashout: int, value=None) -> Outcome:
    return place_bet(
        CrashEngine(current_round()),
        user,
        amount,
        value=value,
        auto_cashout=auto_cashout,
    )
