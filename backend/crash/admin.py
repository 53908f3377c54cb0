from django.contrib import admin
from .models import Round, CrashBet

@admin.register(Round)
class RoundAdmin(admin.ModelAdmin):
    list_display = ("round_id", "start_time", "betting_ends_at", "crash_multiplier")
    readonly_fields = ("round_id", "start_time", "crash_multiplier", "created_at")

@admin.register(CrashBet)
class CrashBetAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "round", "bet_amount", "auto_cashout", "won", "payout", "created_at")
    list_filter = ("won",)
