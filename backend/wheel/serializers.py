from rest_framework import serializers

from .models import LastSpin


class LastSpinSerializer(serializers.ModelSerializer):
    class Meta:
        model = LastSpin
        fields = [
            "outcome_index",
            "multiplier_tenths",
            "won",
            "amount",
            "nonce",
            "updated_at",
        ]
