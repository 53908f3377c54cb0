from rest_framework import serializers

from bankroll.serializers import BetIn
from .engine import MIN_AUTO_CASHOUT, MAX_AUTO_CASHOUT
from .models import Round, CrashBet


class PlayIn(BetIn):
    auto_cashout = serializers.IntegerField(min_value=MIN_AUTO_CASHOUT, max_value=MAX_AUTO_CASHOUT)


class RoundSerializer(serializers.ModelSerializer):
    phase = serializers.SerializerMethodField()

    class Meta:
        model = Round
        fields = [
            "round_id",
            "phase",
            "start_time",
            "betting_ends_at",
            "crash_multiplier",
        ]

    def get_phase(self, obj):
        return obj.phase()

    def to_representation(self, instance):
        data = super().to_representation(instance)
        # fixed at round start, but only shown once betting is over
        if instance.is_betting():
            data["crash_multiplier"] = None
        return data


class CrashBetSerializer(serializers.ModelSerializer):
    round_id = serializers.IntegerField(source="round.round_id", read_only=True)

    class Meta:
        model = CrashBet
        fields = [
            "id",
            "round_id",
            "bet_amount",
            "auto_cashout",
            "won",
            "payout",
            "created_at",
        ]
