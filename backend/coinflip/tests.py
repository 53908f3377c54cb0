from unittest import mock

from django.test import TestCase
from rest_framework.test import APIClient

from bankroll.exceptions import InvalidBet, InsufficientBankroll
from bankroll.models import PendingPrize, PlayerStats
from bankroll.testing import make_player, make_bankroll, wallet_balance
from engine.testing import ScriptedEntropy
from .engine import flip
from .models import CoinFlipGame


class FlipTests(TestCase):
    def setUp(self):
        self.bankroll = make_bankroll("coinflip", funded=10000)
        self.player = make_player("alice", balance=1000)

    def test_matching_guess_wins_double(self):
        entropy = ScriptedEntropy(1)
        outcome = flip(self.player, True, 100, entropy=entropy)

        self.assertTrue(outcome.won)
        self.assertEqual(outcome.payout, 200)
        self.assertEqual(PendingPrize.objects.get(user=self.player).amount, 200)
        self.assertEqual(entropy.calls, [(2, f"user:{self.player.pk}")])

        # prize sits in escrow until claimed
        self.assertEqual(wallet_balance(self.player), 900)

    def test_wrong_guess_loses_stake(self):
        outcome = flip(self.player, False, 100, entropy=ScriptedEntropy(1))

        self.assertFalse(outcome.won)
        self.assertEqual(outcome.payout, 0)
        self.assertFalse(PendingPrize.objects.filter(user=self.player).exists())

        self.bankroll.refresh_from_db()
        self.assertEqual(self.bankroll.held_balance, 10100)
        self.assertEqual(PlayerStats.objects.get(user=self.player).total_lost, 100)

    def test_history_recorded(self):
        flip(self.player, False, 150, entropy=ScriptedEntropy(0))

        game = CoinFlipGame.objects.get(user=self.player)
        self.assertFalse(game.guess)
        self.assertFalse(game.result)
        self.assertTrue(game.won)
        self.assertEqual(game.payout, 300)

    def test_transferred_amount_must_match(self):
        with self.assertRaises(InvalidBet):
            flip(self.player, True, 100, value=90, entropy=ScriptedEntropy(1))
        self.assertEqual(wallet_balance(self.player), 1000)

    def test_bet_below_minimum(self):
        with self.assertRaises(InvalidBet):
            flip(self.player, True, 99, entropy=ScriptedEntropy(1))

    def test_worst_case_checked_before_drawing(self):
        entropy = ScriptedEntropy(1)
        whale = make_player("bob", balance=20002)

        # paying 2x on 20002 needs more than the 10000 bankroll plus the stake
        with self.assertRaises(InsufficientBankroll):
            flip(whale, True, 20002, entropy=entropy)
        self.assertEqual(entropy.calls, [])


class FlipApiTests(TestCase):
    def setUp(self):
        make_bankroll("coinflip", funded=10000)
        self.player = make_player("carol", balance=1000)
        self.client = APIClient()
        self.client.force_authenticate(self.player)

    def test_flip(self):
        with mock.patch("bankroll.services.EntropySource", return_value=ScriptedEntropy(1)):
            res = self.client.post(
                "/api/coinflip/flip/",
                {"guess": True, "bet_amount": "100"},
                format="json",
            )

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data, {"result": True, "won": True, "payout": "200"})

    def test_game_error_is_reported(self):
        res = self.client.post(
            "/api/coinflip/flip/",
            {"guess": True, "bet_amount": "100", "value": "50"},
            format="json",
        )

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "invalid_bet")

    def test_requires_login(self):
        res = APIClient().post("/api/coinflip/flip/", {"guess": True, "bet_amount": "100"}, format="json")
        self.assertIn(res.status_code, (401, 403))
