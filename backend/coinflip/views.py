from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bankroll.exceptions import GameError
from bankroll.views import error_response
from .engine import flip
from .serializers import FlipIn


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def flip_coin(request):
    serializer = FlipIn(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        outcome = flip(
            request.user,
            data["guess"],
            data["bet_amount"],
            value=data.get("value"),
        )
    except GameError as e:
        return error_response(e)

    return Response({
        'result': outcome.detail["result"],
        'won': outcome.won,
        'payout': str(outcome.payout),
    })
