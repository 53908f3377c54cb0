from collections import Counter
from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from bankroll.exceptions import InsufficientBankroll
from bankroll.models import PendingPrize
from bankroll.testing import make_player, make_bankroll
from engine.testing import ScriptedEntropy
from .engine import (
    SEGMENT_MULTIPLIERS,
    SEGMENT_WEIGHTS,
    WEIGHT_TOTAL,
    payout_for,
    pick_segment,
    spin,
)
from .models import LastSpin, WheelGame


class SegmentTableTests(TestCase):
    def test_weights_sum_to_total(self):
        self.assertEqual(sum(SEGMENT_WEIGHTS), WEIGHT_TOTAL)
        self.assertEqual(len(SEGMENT_WEIGHTS), len(SEGMENT_MULTIPLIERS))

    def test_every_draw_maps_to_configured_frequency(self):
        counts = Counter(pick_segment(r) for r in range(WEIGHT_TOTAL))
        self.assertEqual([counts[i] for i in range(len(SEGMENT_WEIGHTS))], list(SEGMENT_WEIGHTS))

    def test_boundaries(self):
        self.assertEqual(pick_segment(0), 0)
        self.assertEqual(pick_segment(1899), 0)
        self.assertEqual(pick_segment(1900), 1)
        self.assertEqual(pick_segment(9699), 5)
        self.assertEqual(pick_segment(9700), 6)
        self.assertEqual(pick_segment(9999), 6)

    def test_out_of_range_draw(self):
        with self.assertRaises(ValueError):
            pick_segment(WEIGHT_TOTAL)

    def test_payout_truncates(self):
        self.assertEqual(payout_for(101, 15), 151)
        self.assertEqual(payout_for(100, 100), 1000)
        self.assertEqual(payout_for(100, 0), 0)

    def test_payout_exact_beyond_decimal_precision(self):
        self.assertEqual(payout_for(Decimal(10 ** 29 + 1), 15), Decimal(15 * 10 ** 28 + 1))


class SpinTests(TestCase):
    def setUp(self):
        make_bankroll("wheel", funded=5000)
        self.player = make_player("alice", balance=1000)

    def test_top_segment_pays_ten_times(self):
        entropy = ScriptedEntropy(9700)
        outcome = spin(self.player, 100, entropy=entropy)

        self.assertTrue(outcome.won)
        self.assertEqual(outcome.payout, 1000)
        self.assertEqual(outcome.detail["segment"], 6)
        self.assertEqual(entropy.calls, [(WEIGHT_TOTAL, f"user:{self.player.pk}")])
        self.assertEqual(PendingPrize.objects.get(user=self.player).amount, 1000)

    def test_fractional_multiplier(self):
        outcome = spin(self.player, 101, entropy=ScriptedEntropy(4000))

        self.assertEqual(outcome.detail["multiplier_tenths"], 15)
        self.assertEqual(outcome.payout, 151)

    def test_last_spin_advances_on_win_and_loss(self):
        spin(self.player, 100, entropy=ScriptedEntropy(9700))
        last = LastSpin.objects.get(user=self.player)
        self.assertEqual((last.outcome_index, last.won, last.amount, last.nonce), (6, True, 1000, 1))

        spin(self.player, 100, entropy=ScriptedEntropy(0))
        last.refresh_from_db()
        self.assertEqual((last.outcome_index, last.won, last.amount, last.nonce), (0, False, 0, 2))

        self.assertEqual(WheelGame.objects.filter(user=self.player).count(), 2)

    def test_rejected_spin_leaves_cache_alone(self):
        entropy = ScriptedEntropy(9700)
        # 10x of 1000 is more than the 5000 bankroll plus the stake
        with self.assertRaises(InsufficientBankroll):
            spin(self.player, 1000, entropy=entropy)

        self.assertEqual(entropy.calls, [])
        self.assertFalse(LastSpin.objects.filter(user=self.player).exists())


class WheelApiTests(TestCase):
    def setUp(self):
        make_bankroll("wheel", funded=5000)
        self.player = make_player("bob", balance=1000)
        self.client = APIClient()
        self.client.force_authenticate(self.player)

    def test_last_before_any_spin(self):
        self.assertEqual(self.client.get("/api/wheel/last/").status_code, 404)

    def test_spin_then_poll(self):
        res = self.client.post("/api/wheel/spin/", {"bet_amount": "100"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["nonce"], 1)

        res = self.client.get("/api/wheel/last/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["nonce"], 1)
        self.assertIn(res.data["outcome_index"], range(len(SEGMENT_WEIGHTS)))
