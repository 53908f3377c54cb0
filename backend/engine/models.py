from django.db import models


class EntropyPool(models.Model):
    """
    Persistent 256-bit accumulator, one per game domain.
    Every raw draw is XORed back into it.
    """
    domain = models.CharField(max_length=32, unique=True)
    accumulator = models.CharField(max_length=64, default="0" * 64)  # hex
    draws = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"EntropyPool({self.domain})"


class CallerNonce(models.Model):
    domain = models.CharField(max_length=32)
    caller = models.CharField(max_length=64)
    value = models.PositiveBigIntegerField(default=0)

    class Meta:
        unique_together = [("domain", "caller")]

    def __str__(self):
        return f"{self.domain}:{self.caller} #{self.value}"
