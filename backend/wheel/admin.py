from django.contrib import admin
from .models import WheelGame, LastSpin

@admin.register(WheelGame)
class WheelGameAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "bet_amount", "result_segment", "multiplier_tenths", "payout", "created_at")
    list_filter = ("result_segment",)

@admin.register(LastSpin)
class LastSpinAdmin(admin.ModelAdmin):
    list_display = ("user", "outcome_index", "multiplier_tenths", "won", "amount", "nonce", "updated_at")
