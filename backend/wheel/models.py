from django.db import models
from django.conf import settings


class WheelGame(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    bet_amount = models.DecimalField(max_digits=38, decimal_places=0)
    result_segment = models.IntegerField()
    multiplier_tenths = models.IntegerField()
    payout = models.DecimalField(max_digits=38, decimal_places=0, default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-id"]


class LastSpin(models.Model):
    """
    Latest result per player, overwritten on every spin. Clients poll it
    and treat a nonce change as a new result.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="last_spin",
    )
    outcome_index = models.IntegerField(default=0)
    multiplier_tenths = models.IntegerField(default=0)
    won = models.BooleanField(default=False)
    amount = models.DecimalField(max_digits=38, decimal_places=0, default=0)
    nonce = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)
