# bankroll/admin.py
from django.contrib import admin
from .models import Bankroll, PendingPrize, PlayerStats

@admin.register(Bankroll)
class BankrollAdmin(admin.ModelAdmin):
    list_display = ("game", "owner", "held_balance", "total_pending", "global_total_bet", "min_bet", "max_bet", "updated_at")
    list_editable = ("min_bet", "max_bet")
    # balances only move through the ledger services
    readonly_fields = ("held_balance", "total_pending", "global_total_bet")

@admin.register(PendingPrize)
class PendingPrizeAdmin(admin.ModelAdmin):
    list_display = ("bankroll", "user", "amount", "updated_at")
    list_filter = ("bankroll__game",)
    search_fields = ("user__username", "user__email")
    readonly_fields = ("bankroll", "user", "amount")

@admin.register(PlayerStats)
class PlayerStatsAdmin(admin.ModelAdmin):
    list_display = ("bankroll", "user", "total_bet", "total_won", "total_lost", "updated_at")
    list_filter = ("bankroll__game",)
    search_fields = ("user__username",)
