from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.db import IntegrityError
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from bankroll.exceptions import (
    BettingClosed,
    InsufficientBankroll,
    InvalidBet,
    NotOwner,
    PayoutCapExceeded,
    RoundStillOpen,
)
from bankroll.models import Bankroll, PendingPrize, PlayerStats
from bankroll.testing import make_player, make_bankroll
from engine.testing import ScriptedEntropy
from .engine import CrashEngine, net_payout, play
from .models import CrashBet, Round
from .redis_lock import LockHeartbeat, LockLost
from .rounds import (
    CRASH_DRAW_RANGE,
    crash_multiplier_from_draw,
    current_round,
    force_close_betting,
    open_next_round,
)


def live_round(crash_multiplier, round_id=1, window=30):
    now = timezone.now()
    return Round.objects.create(
        round_id=round_id,
        start_time=now,
        betting_ends_at=now + timedelta(seconds=window),
        crash_multiplier=crash_multiplier,
    )


def later(seconds):
    return mock.patch("django.utils.timezone.now", return_value=timezone.now() + timedelta(seconds=seconds))


class MultiplierDistributionTests(TestCase):
    def test_zero_draw_is_clamped(self):
        self.assertEqual(crash_multiplier_from_draw(0), 10)
        self.assertEqual(crash_multiplier_from_draw(1), 10)

    def test_inverse_uniform_shape(self):
        self.assertEqual(crash_multiplier_from_draw(500_000_000), 20)
        self.assertEqual(crash_multiplier_from_draw(900_000_000), 100)
        self.assertEqual(crash_multiplier_from_draw(950_000_000), 200)

    def test_top_is_capped(self):
        self.assertEqual(crash_multiplier_from_draw(CRASH_DRAW_RANGE - 1), 300)
        self.assertEqual(crash_multiplier_from_draw(990_000_000), 300)


@override_settings(CRASH_BETTING_WINDOW_SECONDS=30)
class RoundLifecycleTests(TestCase):
    def setUp(self):
        self.owner = make_bankroll("crash").owner

    def test_first_round_created_on_demand(self):
        entropy = ScriptedEntropy(500_000_000)
        round_obj = current_round(entropy=entropy)

        self.assertEqual(round_obj.round_id, 1)
        self.assertEqual(round_obj.crash_multiplier, 20)
        self.assertEqual(round_obj.betting_ends_at - round_obj.start_time, timedelta(seconds=30))
        self.assertEqual(entropy.calls, [(CRASH_DRAW_RANGE, "system")])
        self.assertEqual(round_obj.phase(), Round.PHASE_BETTING)

        # no second draw once a round exists
        self.assertEqual(current_round(entropy=entropy).pk, round_obj.pk)
        self.assertEqual(len(entropy.calls), 1)

    def test_cannot_open_while_betting(self):
        current_round(entropy=ScriptedEntropy(0))
        with self.assertRaises(RoundStillOpen):
            open_next_round(self.owner, entropy=ScriptedEntropy(0))

    def test_round_ids_increase_by_one(self):
        player = make_player("alice")
        first = current_round(entropy=ScriptedEntropy(0))

        with later(31):
            second = open_next_round(player, entropy=ScriptedEntropy(950_000_000))
        with later(62):
            third = open_next_round(entropy=ScriptedEntropy(0))

        self.assertEqual([r.round_id for r in (first, second, third)], [1, 2, 3])
        self.assertEqual(second.crash_multiplier, 200)

        # superseded rounds are left exactly as drawn
        first.refresh_from_db()
        self.assertEqual(first.crash_multiplier, 10)

    def test_multiplier_drawn_as_the_opener(self):
        player = make_player("bob")
        current_round(entropy=ScriptedEntropy(0))
        entropy = ScriptedEntropy(0)

        with later(31):
            open_next_round(player, entropy=entropy)

        self.assertEqual(entropy.calls, [(CRASH_DRAW_RANGE, f"user:{player.pk}")])

    def test_force_close(self):
        round_obj = current_round(entropy=ScriptedEntropy(0))

        closed = force_close_betting(self.owner)
        self.assertEqual(closed.pk, round_obj.pk)
        self.assertEqual(closed.phase(), Round.PHASE_CLOSED)

        ends_at = Round.objects.get(pk=round_obj.pk).betting_ends_at
        force_close_betting(self.owner)
        self.assertEqual(Round.objects.get(pk=round_obj.pk).betting_ends_at, ends_at)

        self.assertEqual(open_next_round(entropy=ScriptedEntropy(0)).round_id, 2)

    def test_force_close_owner_only(self):
        current_round(entropy=ScriptedEntropy(0))
        with self.assertRaises(NotOwner):
            force_close_betting(make_player("mallory"))

    def test_open_next_on_empty_history_opens_round_one(self):
        player = make_player("dave")
        entropy = ScriptedEntropy(500_000_000)

        round_obj = open_next_round(player, entropy=entropy)

        self.assertEqual(round_obj.round_id, 1)
        self.assertEqual(Round.objects.get().pk, round_obj.pk)
        self.assertEqual(entropy.calls, [(CRASH_DRAW_RANGE, f"user:{player.pk}")])

    def test_concurrent_opener_wins(self):
        current_round(entropy=ScriptedEntropy(0))

        with later(31), mock.patch("crash.rounds._create_round", side_effect=IntegrityError):
            with self.assertRaises(RoundStillOpen):
                open_next_round(entropy=ScriptedEntropy(0))

        self.assertEqual(Round.objects.count(), 1)


class PlayTests(TestCase):
    def setUp(self):
        self.round = live_round(crash_multiplier=150)
        self.player = make_player("alice", balance=1000)

    def test_net_payout_deducts_edge(self):
        self.assertEqual(net_payout(100, 120), 1176)
        # 7 x 1.1 = 7 (truncated), less 2% = 6
        self.assertEqual(net_payout(7, 11), 6)

    def test_target_below_crash_wins(self):
        make_bankroll("crash", funded=10000)

        outcome = play(self.player, 100, 120)

        self.assertTrue(outcome.won)
        # 100 x 12.0 = 1200, less 2%
        self.assertEqual(outcome.payout, 1176)
        self.assertEqual(PendingPrize.objects.get(user=self.player).amount, 1176)

        bet = CrashBet.objects.get(user=self.player)
        self.assertEqual((bet.round_id, bet.auto_cashout, bet.won), (self.round.pk, 120, True))

    def test_target_at_crash_wins(self):
        make_bankroll("crash", funded=10000)
        self.assertTrue(play(self.player, 100, 150).won)

    def test_target_above_crash_loses(self):
        bankroll = make_bankroll("crash", funded=10000)

        outcome = play(self.player, 100, 200)

        self.assertFalse(outcome.won)
        self.assertEqual(outcome.payout, 0)
        bankroll.refresh_from_db()
        self.assertEqual(bankroll.held_balance, 10100)
        self.assertEqual(PlayerStats.objects.get(user=self.player).total_lost, 100)

    def test_auto_cashout_range(self):
        make_bankroll("crash", funded=10000)
        for bad in (10, 301):
            with self.assertRaises(InvalidBet):
                play(self.player, 100, bad)

    def test_betting_window_elapsed(self):
        make_bankroll("crash", funded=10000)
        with later(31):
            with self.assertRaises(BettingClosed):
                play(self.player, 100, 120)

    def test_worst_case_precheck(self):
        # 30x of 100 cannot be covered by the stake alone
        make_bankroll("crash")
        with self.assertRaises(InsufficientBankroll) as ctx:
            play(self.player, 100, 120)
        self.assertNotIsInstance(ctx.exception, PayoutCapExceeded)

    def test_payout_cap_at_settlement(self):
        # 4100 available passes the 3000 worst-case check, but 1176 > 25% of it
        make_bankroll("crash", funded=4000)

        with self.assertRaises(PayoutCapExceeded):
            play(self.player, 100, 120)

        self.assertFalse(CrashBet.objects.exists())
        self.assertEqual(Bankroll.get("crash").held_balance, 4000)

    def test_late_bettor_hits_the_cap(self):
        make_bankroll("crash", funded=5000)
        late = make_player("bob", balance=1000)

        # 1176 <= 25% of 5100
        self.assertTrue(play(self.player, 100, 120).won)

        # 5200 held less 1176 pending leaves 4024; 25% of that is 1006
        with self.assertRaises(PayoutCapExceeded):
            play(late, 100, 120)

        bankroll = Bankroll.get("crash")
        self.assertTrue(bankroll.check_invariant())
        self.assertEqual(bankroll.total_pending, 1176)

    def test_settles_against_very_large_bankroll(self):
        bankroll = Bankroll(game="crash", held_balance=Decimal(10 ** 29))

        outcome = CrashEngine(self.round).resolve(
            bankroll, self.player, Decimal(100), entropy=None, auto_cashout=120
        )

        self.assertTrue(outcome.won)
        self.assertEqual(outcome.payout, 1176)


@override_settings(CRASH_BETTING_WINDOW_SECONDS=30)
class CrashApiTests(TestCase):
    def setUp(self):
        make_bankroll("crash", funded=10000)
        self.player = make_player("carol", balance=1000)
        self.client = APIClient()
        self.client.force_authenticate(self.player)

    def test_round_hides_multiplier_while_betting(self):
        live_round(crash_multiplier=150)

        res = self.client.get("/api/crash/round/")
        self.assertEqual(res.data["phase"], "BETTING")
        self.assertIsNone(res.data["crash_multiplier"])

        with later(31):
            res = self.client.get("/api/crash/round/")
        self.assertEqual(res.data["phase"], "CLOSED")
        self.assertEqual(res.data["crash_multiplier"], 150)

    def test_play(self):
        live_round(crash_multiplier=150)

        res = self.client.post("/api/crash/play/", {"bet_amount": "100", "auto_cashout": 120}, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data, {"round_id": 1, "won": True, "payout": "1176"})

    def test_my_bets_lists_live_round_only(self):
        old = live_round(crash_multiplier=150, round_id=1, window=-5)
        CrashBet.objects.create(user=self.player, round=old, bet_amount=100, auto_cashout=120)
        live_round(crash_multiplier=150, round_id=2)

        self.client.post("/api/crash/play/", {"bet_amount": "100", "auto_cashout": 120}, format="json")
        self.client.post("/api/crash/play/", {"bet_amount": "200", "auto_cashout": 200}, format="json")

        res = self.client.get("/api/crash/my-bets/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual([b["round_id"] for b in res.data], [2, 2])
        self.assertEqual([b["won"] for b in res.data], [True, False])
        self.assertEqual(res.data[0]["payout"], "1176")

    def test_open_next_on_fresh_install(self):
        res = self.client.post("/api/crash/open-next/")

        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["round_id"], 1)

    def test_play_rejects_out_of_range_target(self):
        live_round(crash_multiplier=150)
        res = self.client.post("/api/crash/play/", {"bet_amount": "100", "auto_cashout": 5}, format="json")
        self.assertEqual(res.status_code, 400)

    def test_open_next_too_early(self):
        live_round(crash_multiplier=150)

        res = self.client.post("/api/crash/open-next/")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "round_still_open")

    def test_force_close_requires_owner(self):
        live_round(crash_multiplier=150)
        self.assertEqual(self.client.post("/api/crash/force-close/").status_code, 403)

    def test_recent_rounds_lists_closed_only(self):
        live_round(crash_multiplier=150, round_id=1, window=-5)
        live_round(crash_multiplier=40, round_id=2)

        res = self.client.get("/api/crash/recent-rounds/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual([r["round_id"] for r in res.data], [1])


class HeartbeatTests(TestCase):
    def test_lost_lock_raises(self):
        lock = mock.Mock()
        lock.renew.return_value = False

        heartbeat = LockHeartbeat(lock, every_seconds=0)
        with self.assertRaises(LockLost):
            heartbeat.tick()

    def test_renews_when_due(self):
        lock = mock.Mock()
        lock.renew.return_value = True

        heartbeat = LockHeartbeat(lock, every_seconds=0)
        heartbeat.tick()
        lock.renew.assert_called_once()


@override_settings(CRASH_BETTING_WINDOW_SECONDS=30)
class RoundKeeperCommandTests(TestCase):
    def run_keeper(self, acquired=True):
        out = StringIO()
        with mock.patch("crash.management.commands.run_round_keeper.RedisKeeperLock") as lock_cls:
            lock_cls.return_value.acquire.return_value = acquired
            lock_cls.return_value.renew.return_value = True
            call_command("run_round_keeper", "--max-iterations", "1", stdout=out)
        return lock_cls.return_value, out.getvalue()

    def test_opens_next_round_when_closed(self):
        live_round(crash_multiplier=150, window=-1)

        lock, out = self.run_keeper()

        self.assertEqual(current_round().round_id, 2)
        self.assertIn("Opened round 2", out)
        lock.release.assert_called_once()

    def test_leaves_betting_round_alone(self):
        live_round(crash_multiplier=150)

        self.run_keeper()

        self.assertEqual(Round.objects.count(), 1)

    def test_second_keeper_exits(self):
        live_round(crash_multiplier=150, window=-1)

        lock, out = self.run_keeper(acquired=False)

        self.assertIn("Another keeper is running", out)
        self.assertEqual(Round.objects.count(), 1)
        lock.release.assert_not_called()

    def test_keeper_tolerates_a_player_opening_first(self):
        live_round(crash_multiplier=150, window=-1)

        with mock.patch(
            "crash.management.commands.run_round_keeper.open_next_round",
            side_effect=RoundStillOpen,
        ):
            lock, out = self.run_keeper()

        self.assertNotIn("Opened round", out)
        lock.release.assert_called_once()
