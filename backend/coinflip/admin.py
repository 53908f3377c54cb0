from django.contrib import admin
from .models import CoinFlipGame

@admin.register(CoinFlipGame)
class CoinFlipGameAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "bet_amount", "guess", "result", "won", "payout", "created_at")
    list_filter = ("won",)
