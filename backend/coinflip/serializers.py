from rest_framework import serializers

from bankroll.serializers import BetIn


class FlipIn(BetIn):
    guess = serializers.BooleanField()
