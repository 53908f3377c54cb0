# bankroll/services.py
import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction

from engine.entropy import EntropySource
from engine.guard import nonreentrant
from engine.strategy import Outcome, OutcomeEngine
from wallets.transfers import pull, push
from .defaults import MAX_AMOUNT
from .exceptions import (
    InvalidBet,
    InvalidDeposit,
    InsufficientBankroll,
    NothingToClaim,
    NotOwner,
)
from .models import Bankroll, PendingPrize, PlayerStats

logger = logging.getLogger(__name__)


def to_amount(value, error_cls=InvalidBet) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise error_cls("Amount must be a whole number")

    if not amount.is_finite() or amount != amount.to_integral_value():
        raise error_cls("Amount must be a whole number")

    if amount > MAX_AMOUNT:
        raise error_cls(f"Amount must not exceed {MAX_AMOUNT}")
    return amount


# ======================================================
# ACCESS
# ======================================================
def require_owner(bankroll: Bankroll, user) -> None:
    if user is None or bankroll.owner_id is None or bankroll.owner_id != user.pk:
        raise NotOwner()


# ======================================================
# STAKE VALIDATION
# ======================================================
def validate_stake(bet: Decimal, transferred: Decimal, min_bet: Decimal, max_bet: Decimal) -> None:
    if transferred != bet:
        raise InvalidBet("Transferred amount must equal the bet")

    if bet < min_bet or bet > max_bet:
        raise InvalidBet(f"Bet must be between {min_bet} and {max_bet}")


def ensure_solvent(bankroll: Bankroll, max_payout: Decimal) -> None:
    if max_payout > bankroll.available:
        raise InsufficientBankroll()


# ======================================================
# ESCROW
# ======================================================
def reserve(bankroll: Bankroll, user, amount: Decimal) -> PendingPrize:
    """
    Escrow a prize for later claim. Solvency must already be checked;
    this only refuses to leave available below zero.
    """
    if amount > bankroll.available:
        raise InsufficientBankroll()

    prize, _ = PendingPrize.objects.select_for_update().get_or_create(
        bankroll=bankroll, user=user
    )
    prize.amount += amount
    prize.save(update_fields=["amount", "updated_at"])

    bankroll.total_pending += amount
    bankroll.save(update_fields=["total_pending", "updated_at"])
    return prize


def pending_for(bankroll: Bankroll, user) -> Decimal:
    prize = PendingPrize.objects.filter(bankroll=bankroll, user=user).first()
    return prize.amount if prize else Decimal("0")


# ======================================================
# DEPOSIT / CLAIM / WITHDRAW
# ======================================================
@nonreentrant
@transaction.atomic
def deposit(game: str, user, amount) -> Bankroll:
    amount = to_amount(amount, InvalidDeposit)
    if amount <= 0:
        raise InvalidDeposit()

    bankroll = Bankroll.for_update(game)
    pull(bankroll, user, amount, reason="deposit")

    logger.info(f"Deposit of {amount} into {game} bankroll by user {user.pk}")
    return bankroll


@nonreentrant
@transaction.atomic
def claim(game: str, user) -> Decimal:
    bankroll = Bankroll.for_update(game)

    prize = (
        PendingPrize.objects
        .select_for_update()
        .filter(bankroll=bankroll, user=user)
        .first()
    )
    if prize is None or prize.amount <= 0:
        raise NothingToClaim()

    amount = prize.amount

    # Zero the escrow before the transfer goes out
    prize.amount = Decimal("0")
    prize.save(update_fields=["amount", "updated_at"])

    bankroll.total_pending -= amount
    bankroll.save(update_fields=["total_pending", "updated_at"])

    push(bankroll, user, amount, reason="claim")

    logger.info(f"User {user.pk} claimed {amount} from {game} bankroll")
    return amount


@nonreentrant
@transaction.atomic
def withdraw(game: str, user) -> Decimal:
    bankroll = Bankroll.for_update(game)
    require_owner(bankroll, user)

    amount = bankroll.available
    if amount <= 0:
        raise InsufficientBankroll()

    push(bankroll, user, amount, reason="withdraw")

    logger.info(f"Owner {user.pk} withdrew {amount} from {game} bankroll")
    return amount


# ======================================================
# BETTING
# ======================================================
def record_stats(bankroll: Bankroll, user, bet: Decimal, outcome: Outcome) -> PlayerStats:
    stats, _ = PlayerStats.objects.select_for_update().get_or_create(
        bankroll=bankroll, user=user
    )
    stats.total_bet += bet
    if outcome.won:
        stats.total_won += outcome.payout
    else:
        stats.total_lost += bet
    stats.save(update_fields=["total_bet", "total_won", "total_lost", "updated_at"])

    bankroll.global_total_bet += bet
    bankroll.save(update_fields=["global_total_bet", "updated_at"])
    return stats


@nonreentrant
@transaction.atomic
def place_bet(engine: OutcomeEngine, user, bet, value=None, entropy=None, **params) -> Outcome:
    """
    Shared bet pipeline for every game.

    The stake is in the bankroll before the worst-case check runs, and the
    check runs before any entropy is drawn. Any failure rolls back all of it.
    """
    bet = to_amount(bet)
    value = bet if value is None else to_amount(value)

    bankroll = Bankroll.for_update(engine.game)

    try:
        validate_stake(bet, value, bankroll.min_bet, bankroll.max_bet)
        engine.validate(bet, **params)

        pull(bankroll, user, value, reason="bet")
        ensure_solvent(bankroll, engine.max_payout(bet, **params))
    except Exception as e:
        logger.warning(f"Rejected {engine.game} bet of {bet} by user {user.pk}: {e}")
        raise

    if entropy is None:
        entropy = EntropySource(engine.game)

    outcome = engine.resolve(bankroll, user, bet, entropy, **params)

    if outcome.payout > 0:
        reserve(bankroll, user, outcome.payout)

    record_stats(bankroll, user, bet, outcome)
    engine.record(bankroll, user, bet, outcome, **params)

    logger.info(
        f"{engine.game} bet {bet} by user {user.pk}: "
        f"{'won' if outcome.won else 'lost'} payout={outcome.payout}"
    )
    return outcome
