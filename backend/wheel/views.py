from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bankroll.exceptions import GameError
from bankroll.serializers import BetIn
from bankroll.views import error_response
from .engine import spin
from .models import LastSpin
from .serializers import LastSpinSerializer


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def spin_wheel(request):
    serializer = BetIn(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        outcome = spin(request.user, data["bet_amount"], value=data.get("value"))
    except GameError as e:
        return error_response(e)

    return Response({
        'segment': outcome.detail["segment"],
        'multiplier_tenths': outcome.detail["multiplier_tenths"],
        'won': outcome.won,
        'payout': str(outcome.payout),
        'nonce': outcome.detail["nonce"],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def last_spin(request):
    last = LastSpin.objects.filter(user=request.user).first()
    if last is None:
        return Response({'error': 'No spins yet'}, status=status.HTTP_404_NOT_FOUND)
    return Response(LastSpinSerializer(last).data)
