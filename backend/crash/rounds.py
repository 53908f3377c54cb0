# crash/rounds.py
"""
Round lifecycle: Betting (now < betting_ends_at) -> Closed -> superseded
by the next round. A round is replaced, never reused.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from bankroll.models import Bankroll
from bankroll.exceptions import RoundStillOpen
from bankroll.services import require_owner
from engine.entropy import EntropySource, SYSTEM_CALLER, caller_key
from .models import Round

logger = logging.getLogger(__name__)

CRASH_DRAW_RANGE = 10 ** 9
MIN_CRASH_TENTHS = 10    # 1.0x
MAX_CRASH_TENTHS = 300   # 30.0x


def crash_multiplier_from_draw(u: int) -> int:
    """
    Inverse-uniform transform: 1.0x / (1 - u), in tenths.
    Heavy right tail, clamped to [1.0x, 30.0x].
    """
    u = max(u, 1)
    tenths = (10 * CRASH_DRAW_RANGE) // (CRASH_DRAW_RANGE - u)
    return max(MIN_CRASH_TENTHS, min(MAX_CRASH_TENTHS, tenths))


def draw_crash_multiplier(entropy, caller: str) -> int:
    return crash_multiplier_from_draw(entropy.draw_bounded(CRASH_DRAW_RANGE, caller))


def _create_round(round_id: int, caller: str, entropy=None) -> Round:
    if entropy is None:
        entropy = EntropySource(Bankroll.GAME_CRASH)

    now = timezone.now()
    round_obj = Round.objects.create(
        round_id=round_id,
        start_time=now,
        betting_ends_at=now + timedelta(seconds=settings.CRASH_BETTING_WINDOW_SECONDS),
        crash_multiplier=draw_crash_multiplier(entropy, caller),
    )

    logger.info(f"Crash round {round_id} open until {round_obj.betting_ends_at:%H:%M:%S}")
    return round_obj


def _latest_for_update():
    return Round.objects.select_for_update().order_by("-round_id").first()


@transaction.atomic
def current_round(entropy=None) -> Round:
    """Live round; the very first call creates round 1."""
    latest = _latest_for_update()
    if latest is None:
        try:
            with transaction.atomic():
                latest = _create_round(1, SYSTEM_CALLER, entropy)
        except IntegrityError:
            latest = _latest_for_update()
    return latest


def _open_round(round_id: int, caller: str, entropy=None) -> Round:
    # A concurrent opener may have taken this round_id after our read.
    try:
        with transaction.atomic():
            return _create_round(round_id, caller, entropy)
    except IntegrityError:
        logger.warning(f"Crash round {round_id} was opened concurrently")
        raise RoundStillOpen()


@transaction.atomic
def open_next_round(user=None, entropy=None) -> Round:
    latest = _latest_for_update()

    if latest is None:
        return _open_round(1, caller_key(user), entropy)
    if latest.is_betting():
        raise RoundStillOpen()

    return _open_round(latest.round_id + 1, caller_key(user), entropy)


@transaction.atomic
def force_close_betting(user) -> Round:
    require_owner(Bankroll.get(Bankroll.GAME_CRASH), user)

    round_obj = current_round()
    now = timezone.now()

    if round_obj.is_betting(now):
        round_obj.betting_ends_at = now
        round_obj.save(update_fields=["betting_ends_at"])
        logger.info(f"Betting force-closed on crash round {round_obj.round_id}")

    return round_obj
