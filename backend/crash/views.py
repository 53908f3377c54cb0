from django.utils import timezone
from rest_framework import generics, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bankroll.exceptions import GameError
from bankroll.views import error_response
from .engine import play
from .models import CrashBet, Round
from .rounds import current_round, open_next_round, force_close_betting
from .serializers import CrashBetSerializer, PlayIn, RoundSerializer


class RecentRoundsView(generics.ListAPIView):
    serializer_class = RoundSerializer
    permission_classes = [permissions.AllowAny]

    def get_queryset(self):
        return Round.objects.filter(betting_ends_at__lte=timezone.now()).order_by("-round_id")[:50]


@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def round_state(request):
    return Response(RoundSerializer(current_round()).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_bets(request):
    """The caller's bets on the live round."""
    round_obj = current_round()
    bets = (
        CrashBet.objects
        .filter(round=round_obj, user=request.user)
        .select_related("round")
        .order_by("created_at", "id")
    )
    return Response(CrashBetSerializer(bets, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def place_bet(request):
    serializer = PlayIn(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        outcome = play(
            request.user,
            data["bet_amount"],
            data["auto_cashout"],
            value=data.get("value"),
        )
    except GameError as e:
        return error_response(e)

    return Response({
        'round_id': outcome.detail["round_id"],
        'won': outcome.won,
        'payout': str(outcome.payout),
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def open_next(request):
    try:
        round_obj = open_next_round(request.user)
    except GameError as e:
        return error_response(e)

    return Response(RoundSerializer(round_obj).data, status=201)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def force_close(request):
    try:
        round_obj = force_close_betting(request.user)
    except GameError as e:
        return error_response(e)

    return Response(RoundSerializer(round_obj).data)
