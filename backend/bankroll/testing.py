# bankroll/testing.py
from decimal import Decimal

from django.contrib.auth import get_user_model

from wallets.models import Wallet
from .models import Bankroll
from . import services


def make_player(username: str, balance=0):
    user = get_user_model().objects.create_user(username=username, password="not-used-123")
    Wallet.objects.create(user=user, balance=Decimal(balance))
    return user


def make_bankroll(game: str, owner=None, funded=0) -> Bankroll:
    """Bankroll row with an owner, optionally seeded by a deposit from the owner."""
    owner = owner or make_player(f"{game}-owner", balance=funded)
    bankroll = Bankroll.get(game)
    bankroll.owner = owner
    bankroll.save(update_fields=["owner"])

    if funded:
        services.deposit(game, owner, funded)
        bankroll.refresh_from_db()
    return bankroll


def wallet_balance(user) -> Decimal:
    return Wallet.objects.get(user=user).balance
