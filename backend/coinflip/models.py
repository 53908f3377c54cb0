from django.db import models
from django.conf import settings


class CoinFlipGame(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    bet_amount = models.DecimalField(max_digits=38, decimal_places=0)
    guess = models.BooleanField()
    result = models.BooleanField()
    won = models.BooleanField(default=False)
    payout = models.DecimalField(max_digits=38, decimal_places=0, default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-id"]
