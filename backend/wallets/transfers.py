# wallets/transfers.py
"""
Native-asset movements between a player's wallet and a game bankroll.

Only this module touches Bankroll.held_balance. Callers must already be
inside transaction.atomic with the bankroll row locked.
"""
import logging
import uuid
from decimal import Decimal

from django.dispatch import Signal

from bankroll.defaults import MAX_AMOUNT
from bankroll.exceptions import AmountTooLarge, InsufficientFunds, TransferFailed
from .models import Wallet, WalletTransaction

logger = logging.getLogger(__name__)

# Fired while a push is still in flight, before it returns to the caller.
# kwargs: bankroll, user, amount, transaction
funds_received = Signal()


def new_reference(game: str, reason: str) -> str:
    return f"{game}:{reason}:{uuid.uuid4().hex[:24]}"


def _get_wallet_for_update(user):
    wallet, _ = Wallet.objects.select_for_update().get_or_create(user=user)
    return wallet


def pull(bankroll, user, amount: Decimal, reason: str) -> WalletTransaction:
    """Move amount from the user's wallet into the bankroll."""
    wallet = _get_wallet_for_update(user)

    if wallet.balance < amount:
        raise InsufficientFunds()
    if bankroll.held_balance + amount > MAX_AMOUNT:
        raise AmountTooLarge()

    wallet.balance -= amount
    wallet.save(update_fields=["balance", "updated_at"])

    bankroll.held_balance += amount
    bankroll.save(update_fields=["held_balance", "updated_at"])

    return WalletTransaction.objects.create(
        user=user,
        amount=amount,
        tx_type=WalletTransaction.DEBIT,
        reference=new_reference(bankroll.game, reason),
        meta={"reason": reason, "game": bankroll.game},
    )


def push(bankroll, user, amount: Decimal, reason: str) -> WalletTransaction:
    """
    Move amount from the bankroll to the user's wallet.
    Any exception from a funds_received receiver fails the transfer.
    """
    if amount <= 0 or bankroll.held_balance < amount:
        raise TransferFailed()

    wallet = _get_wallet_for_update(user)
    if wallet.balance + amount > MAX_AMOUNT:
        raise AmountTooLarge()

    bankroll.held_balance -= amount
    bankroll.save(update_fields=["held_balance", "updated_at"])

    wallet.balance += amount
    wallet.save(update_fields=["balance", "updated_at"])

    tx = WalletTransaction.objects.create(
        user=user,
        amount=amount,
        tx_type=WalletTransaction.CREDIT,
        reference=new_reference(bankroll.game, reason),
        meta={"reason": reason, "game": bankroll.game},
    )

    logger.info(f"Pushed {amount} from {bankroll.game} bankroll to user {user.pk} ({reason})")

    funds_received.send(
        sender=bankroll.__class__,
        bankroll=bankroll,
        user=user,
        amount=amount,
        transaction=tx,
    )
    return tx
