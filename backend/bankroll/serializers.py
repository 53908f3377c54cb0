from rest_framework import serializers

from .defaults import MAX_AMOUNT
from .models import Bankroll, PlayerStats


class BetIn(serializers.Serializer):
    bet_amount = serializers.DecimalField(max_digits=38, decimal_places=0, min_value=1, max_value=MAX_AMOUNT)
    # amount actually sent with the bet; defaults to bet_amount
    value = serializers.DecimalField(max_digits=38, decimal_places=0, required=False, max_value=MAX_AMOUNT)


class DepositIn(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=38, decimal_places=0, max_value=MAX_AMOUNT)


class PlayerStatsSerializer(serializers.ModelSerializer):
    class Meta:
        model = PlayerStats
        fields = ["total_bet", "total_won", "total_lost"]


class BankrollSerializer(serializers.ModelSerializer):
    available = serializers.DecimalField(max_digits=38, decimal_places=0, read_only=True)

    class Meta:
        model = Bankroll
        fields = [
            "game",
            "held_balance",
            "total_pending",
            "available",
            "global_total_bet",
            "min_bet",
            "max_bet",
        ]
