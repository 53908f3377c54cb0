from django.conf import settings
from django.db import models
from django.utils import timezone


class Round(models.Model):
    """
    One shared crash round. The multiplier is drawn when the round is
    created and never changes; only force-close touches betting_ends_at.
    """
    PHASE_BETTING = "BETTING"
    PHASE_CLOSED = "CLOSED"

    round_id = models.PositiveBigIntegerField(unique=True)
    start_time = models.DateTimeField()
    betting_ends_at = models.DateTimeField()
    crash_multiplier = models.PositiveIntegerField()  # tenths, 10..300
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-round_id"]

    def __str__(self):
        return f"Round {self.round_id} @ {self.crash_multiplier / 10:.1f}x"

    def is_betting(self, now=None) -> bool:
        now = now or timezone.now()
        return now < self.betting_ends_at

    def phase(self, now=None) -> str:
        return self.PHASE_BETTING if self.is_betting(now) else self.PHASE_CLOSED


class CrashBet(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    round = models.ForeignKey(Round, on_delete=models.CASCADE, related_name="bets")
    bet_amount = models.DecimalField(max_digits=38, decimal_places=0)
    auto_cashout = models.PositiveIntegerField()  # tenths
    won = models.BooleanField(default=False)
    payout = models.DecimalField(max_digits=38, decimal_places=0, default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["round", "user"], name="crash_bet_round_user_idx"),
        ]

    def __str__(self):
        return f"Bet {self.id} on Round {self.round.round_id}"
