# bankroll/models.py
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Sum

from .defaults import DEFAULT_LIMITS

User = settings.AUTH_USER_MODEL


class Bankroll(models.Model):
    GAME_COINFLIP = "coinflip"
    GAME_WHEEL = "wheel"
    GAME_CRASH = "crash"

    GAME_CHOICES = [
        (GAME_COINFLIP, "Coin Flip"),
        (GAME_WHEEL, "Wheel"),
        (GAME_CRASH, "Crash"),
    ]

    game = models.CharField(max_length=16, choices=GAME_CHOICES, unique=True)
    owner = models.ForeignKey(
        User,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="owned_bankrolls",
    )

    # Only wallets.transfers moves held_balance.
    held_balance = models.DecimalField(max_digits=38, decimal_places=0, default=0)
    # Always equals the sum of PendingPrize.amount for this bankroll.
    total_pending = models.DecimalField(max_digits=38, decimal_places=0, default=0)
    global_total_bet = models.DecimalField(max_digits=38, decimal_places=0, default=0)

    min_bet = models.DecimalField(max_digits=38, decimal_places=0, default=100)
    max_bet = models.DecimalField(max_digits=38, decimal_places=0, default=1000000)

    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Bankroll({self.game})"

    @property
    def available(self) -> Decimal:
        return self.held_balance - self.total_pending

    @classmethod
    def get(cls, game: str) -> "Bankroll":
        obj, _ = cls.objects.get_or_create(game=game, defaults=cls._defaults(game))
        return obj

    @classmethod
    def for_update(cls, game: str) -> "Bankroll":
        obj, _ = cls.objects.select_for_update().get_or_create(
            game=game, defaults=cls._defaults(game)
        )
        return obj

    @staticmethod
    def _defaults(game: str) -> dict:
        defaults = DEFAULT_LIMITS.get(game)
        if defaults is None:
            raise ValueError(f"Unknown game: {game}")
        return dict(defaults)

    def pending_sum(self) -> Decimal:
        return self.pending_prizes.aggregate(total=Sum("amount"))["total"] or Decimal("0")

    def check_invariant(self) -> bool:
        return (
            self.total_pending == self.pending_sum()
            and self.held_balance >= self.total_pending
        )


class PendingPrize(models.Model):
    bankroll = models.ForeignKey(Bankroll, on_delete=models.CASCADE, related_name="pending_prizes")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="pending_prizes")
    amount = models.DecimalField(max_digits=38, decimal_places=0, default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [("bankroll", "user")]

    def __str__(self):
        return f"{self.amount} owed to {self.user_id} by {self.bankroll.game}"


class PlayerStats(models.Model):
    bankroll = models.ForeignKey(Bankroll, on_delete=models.CASCADE, related_name="player_stats")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="game_stats")
    total_bet = models.DecimalField(max_digits=38, decimal_places=0, default=0)
    total_won = models.DecimalField(max_digits=38, decimal_places=0, default=0)
    total_lost = models.DecimalField(max_digits=38, decimal_places=0, default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [("bankroll", "user")]
        verbose_name_plural = "player stats"
