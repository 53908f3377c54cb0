# bankroll/views.py
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .defaults import DEFAULT_LIMITS
from .exceptions import GameError
from .models import Bankroll, PlayerStats
from .serializers import BankrollSerializer, DepositIn, PlayerStatsSerializer
from . import services


def error_response(exc: GameError) -> Response:
    return Response(
        {'error': exc.message, 'code': exc.code},
        status=exc.status_code,
    )


def _unknown_game():
    return Response({'error': 'Unknown game'}, status=status.HTTP_404_NOT_FOUND)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def bankroll_state(request, game):
    if game not in DEFAULT_LIMITS:
        return _unknown_game()

    bankroll = Bankroll.get(game)
    stats = PlayerStats.objects.filter(bankroll=bankroll, user=request.user).first()

    return Response({
        'bankroll': BankrollSerializer(bankroll).data,
        'pending_prize': str(services.pending_for(bankroll, request.user)),
        'stats': PlayerStatsSerializer(stats).data if stats else None,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def deposit(request, game):
    if game not in DEFAULT_LIMITS:
        return _unknown_game()

    serializer = DepositIn(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        bankroll = services.deposit(game, request.user, serializer.validated_data['amount'])
    except GameError as e:
        return error_response(e)

    return Response({'held_balance': str(bankroll.held_balance)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def claim(request, game):
    if game not in DEFAULT_LIMITS:
        return _unknown_game()

    try:
        amount = services.claim(game, request.user)
    except GameError as e:
        return error_response(e)

    return Response({'claimed': str(amount)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def withdraw(request, game):
    if game not in DEFAULT_LIMITS:
        return _unknown_game()

    try:
        amount = services.withdraw(game, request.user)
    except GameError as e:
        return error_response(e)

    return Response({'withdrawn': str(amount)})
