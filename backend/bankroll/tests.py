from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework.test import APIClient

from engine.testing import ScriptedEntropy
from coinflip.engine import CoinFlipEngine
from crash.models import Round
from wallets.transfers import funds_received
from .exceptions import (
    AmountTooLarge,
    InvalidBet,
    InvalidDeposit,
    InsufficientBankroll,
    NothingToClaim,
    NotOwner,
    Reentrancy,
    TransferFailed,
)
from .models import Bankroll, PendingPrize, PlayerStats
from .testing import make_player, make_bankroll, wallet_balance
from .defaults import MAX_AMOUNT
from . import services


class DepositTests(TestCase):
    def setUp(self):
        self.player = make_player("alice", balance=1000)

    def test_deposit_increases_held_balance(self):
        bankroll = services.deposit("wheel", self.player, 400)

        self.assertEqual(bankroll.held_balance, 400)
        self.assertEqual(bankroll.available, 400)
        self.assertEqual(wallet_balance(self.player), 600)

    def test_zero_deposit_rejected(self):
        with self.assertRaises(InvalidDeposit):
            services.deposit("wheel", self.player, 0)

    def test_fractional_deposit_rejected(self):
        with self.assertRaises(InvalidDeposit):
            services.deposit("wheel", self.player, "1.5")

    def test_unknown_game(self):
        with self.assertRaises(ValueError):
            services.deposit("roulette", self.player, 10)


class EscrowTests(TestCase):
    def setUp(self):
        self.bankroll = make_bankroll("coinflip", funded=1000)
        self.player = make_player("bob")

    def _win(self, amount):
        bankroll = Bankroll.for_update("coinflip")
        services.reserve(bankroll, self.player, Decimal(amount))

    def test_reserve_tracks_total_pending(self):
        self._win(300)
        self._win(200)

        self.bankroll.refresh_from_db()
        self.assertEqual(self.bankroll.total_pending, 500)
        self.assertEqual(self.bankroll.available, 500)
        self.assertEqual(PendingPrize.objects.get(user=self.player).amount, 500)
        self.assertTrue(self.bankroll.check_invariant())

    def test_reserve_beyond_available_fails(self):
        with self.assertRaises(InsufficientBankroll):
            self._win(1001)

    def test_claim_pays_once(self):
        self._win(300)

        self.assertEqual(services.claim("coinflip", self.player), 300)
        with self.assertRaises(NothingToClaim):
            services.claim("coinflip", self.player)

        self.bankroll.refresh_from_db()
        self.assertEqual(wallet_balance(self.player), 300)
        self.assertEqual(self.bankroll.held_balance, 700)
        self.assertEqual(self.bankroll.total_pending, 0)
        self.assertTrue(self.bankroll.check_invariant())

    def test_claim_without_any_win(self):
        with self.assertRaises(NothingToClaim):
            services.claim("coinflip", self.player)

    def test_failed_transfer_keeps_escrow(self):
        self._win(300)

        def receiver(sender, **kwargs):
            raise TransferFailed("wallet offline")

        funds_received.connect(receiver)
        try:
            with self.assertRaises(TransferFailed):
                services.claim("coinflip", self.player)
        finally:
            funds_received.disconnect(receiver)

        self.bankroll.refresh_from_db()
        self.assertEqual(PendingPrize.objects.get(user=self.player).amount, 300)
        self.assertEqual(self.bankroll.total_pending, 300)
        self.assertEqual(self.bankroll.held_balance, 1000)
        self.assertEqual(wallet_balance(self.player), 0)


class WithdrawTests(TestCase):
    def setUp(self):
        self.bankroll = make_bankroll("wheel", funded=1000)
        self.owner = self.bankroll.owner

    def test_owner_withdraws_only_unreserved_funds(self):
        winner = make_player("carol")
        services.reserve(Bankroll.for_update("wheel"), winner, Decimal("250"))

        self.assertEqual(services.withdraw("wheel", self.owner), 750)

        self.bankroll.refresh_from_db()
        self.assertEqual(self.bankroll.held_balance, 250)
        self.assertEqual(self.bankroll.available, 0)
        self.assertTrue(self.bankroll.check_invariant())

        # escrowed prize is still claimable in full
        self.assertEqual(services.claim("wheel", winner), 250)

    def test_non_owner_rejected(self):
        with self.assertRaises(NotOwner):
            services.withdraw("wheel", make_player("mallory"))

    def test_empty_bankroll(self):
        services.withdraw("wheel", self.owner)
        with self.assertRaises(InsufficientBankroll):
            services.withdraw("wheel", self.owner)


class ReentrancyTests(TestCase):
    def setUp(self):
        self.bankroll = make_bankroll("coinflip", funded=1000)
        self.player = make_player("eve", balance=500)
        services.reserve(Bankroll.for_update("coinflip"), self.player, Decimal("300"))

    def test_reentrant_calls_from_recipient_are_rejected(self):
        attempts = {}

        def receiver(sender, user, **kwargs):
            for name, call in (
                ("claim", lambda: services.claim("coinflip", user)),
                ("deposit", lambda: services.deposit("coinflip", user, 100)),
                ("withdraw", lambda: services.withdraw("coinflip", user)),
                ("bet", lambda: services.place_bet(CoinFlipEngine(), user, 100, guess=True)),
            ):
                try:
                    call()
                except Reentrancy as e:
                    attempts[name] = e

        funds_received.connect(receiver)
        try:
            amount = services.claim("coinflip", self.player)
        finally:
            funds_received.disconnect(receiver)

        self.assertEqual(amount, 300)
        self.assertEqual(set(attempts), {"claim", "deposit", "withdraw", "bet"})
        self.assertEqual(wallet_balance(self.player), 800)

        self.bankroll.refresh_from_db()
        self.assertEqual(self.bankroll.total_pending, 0)
        self.assertTrue(self.bankroll.check_invariant())

    def test_uncaught_reentrancy_rolls_back_claim(self):
        def receiver(sender, user, **kwargs):
            services.claim("coinflip", user)

        funds_received.connect(receiver)
        try:
            with self.assertRaises(Reentrancy):
                services.claim("coinflip", self.player)
        finally:
            funds_received.disconnect(receiver)

        self.assertEqual(PendingPrize.objects.get(user=self.player).amount, 300)
        self.assertEqual(wallet_balance(self.player), 500)


class StakeValidationTests(TestCase):
    def test_transfer_must_match_bet(self):
        with self.assertRaises(InvalidBet):
            services.validate_stake(Decimal(100), Decimal(99), Decimal(10), Decimal(1000))

    def test_bounds_are_inclusive(self):
        services.validate_stake(Decimal(10), Decimal(10), Decimal(10), Decimal(1000))
        services.validate_stake(Decimal(1000), Decimal(1000), Decimal(10), Decimal(1000))

        with self.assertRaises(InvalidBet):
            services.validate_stake(Decimal(9), Decimal(9), Decimal(10), Decimal(1000))
        with self.assertRaises(InvalidBet):
            services.validate_stake(Decimal(1001), Decimal(1001), Decimal(10), Decimal(1000))

    def test_ensure_solvent(self):
        bankroll = make_bankroll("crash", funded=500)
        services.ensure_solvent(bankroll, Decimal(500))
        with self.assertRaises(InsufficientBankroll):
            services.ensure_solvent(bankroll, Decimal(501))


class PlaceBetTests(TestCase):
    def setUp(self):
        self.player = make_player("frank", balance=1000)

    def test_rejected_bet_draws_nothing_and_moves_nothing(self):
        # empty bankroll: the stake alone cannot cover a 2x payout
        entropy = ScriptedEntropy(1)
        with self.assertRaises(InsufficientBankroll):
            services.place_bet(CoinFlipEngine(), self.player, 100, entropy=entropy, guess=True)

        self.assertEqual(entropy.calls, [])
        self.assertEqual(wallet_balance(self.player), 1000)
        self.assertEqual(Bankroll.get("coinflip").held_balance, 0)
        self.assertFalse(PlayerStats.objects.exists())

    def test_stats_accumulate(self):
        make_bankroll("coinflip", funded=10000)
        entropy = ScriptedEntropy(1, 0)

        services.place_bet(CoinFlipEngine(), self.player, 100, entropy=entropy, guess=True)
        services.place_bet(CoinFlipEngine(), self.player, 200, entropy=entropy, guess=True)

        stats = PlayerStats.objects.get(user=self.player)
        self.assertEqual(stats.total_bet, 300)
        self.assertEqual(stats.total_won, 200)
        self.assertEqual(stats.total_lost, 200)
        self.assertEqual(Bankroll.get("coinflip").global_total_bet, 300)

    def test_invariant_holds_through_mixed_activity(self):
        bankroll = make_bankroll("coinflip", funded=5000)
        other = make_player("grace", balance=1000)
        entropy = ScriptedEntropy(1, 1, 0)

        services.place_bet(CoinFlipEngine(), self.player, 100, entropy=entropy, guess=True)
        services.place_bet(CoinFlipEngine(), other, 300, entropy=entropy, guess=True)
        services.claim("coinflip", self.player)
        services.place_bet(CoinFlipEngine(), self.player, 100, entropy=entropy, guess=True)
        services.withdraw("coinflip", bankroll.owner)

        bankroll.refresh_from_db()
        self.assertTrue(bankroll.check_invariant())
        self.assertEqual(bankroll.total_pending, 600)
        self.assertEqual(bankroll.held_balance, 600)

        # fully reserved: even a minimum bet cannot be covered now
        with self.assertRaises(InsufficientBankroll):
            services.place_bet(CoinFlipEngine(), other, 100, entropy=entropy, guess=False)


class LedgerBoundsTests(TestCase):
    def test_largest_amount_round_trips_exactly(self):
        whale = make_player("whale", balance=MAX_AMOUNT)

        services.deposit("wheel", whale, MAX_AMOUNT)

        bankroll = Bankroll.get("wheel")
        self.assertEqual(bankroll.held_balance, MAX_AMOUNT)
        self.assertEqual(bankroll.available, MAX_AMOUNT)
        self.assertEqual(wallet_balance(whale), 0)

    def test_oversized_deposit_rejected(self):
        whale = make_player("whale", balance=MAX_AMOUNT)

        with self.assertRaises(InvalidDeposit):
            services.deposit("wheel", whale, 10 ** 30 + 1)

        self.assertEqual(wallet_balance(whale), MAX_AMOUNT)
        self.assertEqual(Bankroll.get("wheel").held_balance, 0)

    def test_bankroll_cannot_grow_past_bound(self):
        services.deposit("wheel", make_player("whale", balance=MAX_AMOUNT), MAX_AMOUNT - 10)
        minnow = make_player("minnow", balance=100)

        with self.assertRaises(AmountTooLarge):
            services.deposit("wheel", minnow, 11)

        self.assertEqual(wallet_balance(minnow), 100)
        self.assertEqual(Bankroll.get("wheel").held_balance, MAX_AMOUNT - 10)

    def test_claim_into_full_wallet_keeps_escrow(self):
        make_bankroll("coinflip", funded=1000)
        whale = make_player("whale", balance=MAX_AMOUNT)
        services.reserve(Bankroll.for_update("coinflip"), whale, Decimal("300"))

        with self.assertRaises(AmountTooLarge):
            services.claim("coinflip", whale)

        self.assertEqual(PendingPrize.objects.get(user=whale).amount, 300)
        self.assertEqual(Bankroll.get("coinflip").held_balance, 1000)

class BankrollApiTests(TestCase):
    def setUp(self):
        self.bankroll = make_bankroll("wheel", funded=1000)
        self.player = make_player("henry", balance=500)
        self.client = APIClient()
        self.client.force_authenticate(self.player)

    def test_state(self):
        res = self.client.get("/api/bankroll/wheel/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["bankroll"]["available"], "1000")
        self.assertEqual(res.data["pending_prize"], "0")
        self.assertIsNone(res.data["stats"])

    def test_unknown_game(self):
        self.assertEqual(self.client.get("/api/bankroll/roulette/").status_code, 404)

    def test_deposit(self):
        res = self.client.post("/api/bankroll/wheel/deposit/", {"amount": "200"}, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["held_balance"], "1200")

    def test_deposit_above_ledger_bound(self):
        res = self.client.post(
            "/api/bankroll/wheel/deposit/", {"amount": str(10 ** 30 + 1)}, format="json"
        )
        self.assertEqual(res.status_code, 400)

    def test_claim_nothing(self):
        res = self.client.post("/api/bankroll/wheel/claim/")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "nothing_to_claim")

    def test_withdraw_requires_owner(self):
        res = self.client.post("/api/bankroll/wheel/withdraw/")
        self.assertEqual(res.status_code, 403)

        self.client.force_authenticate(self.bankroll.owner)
        res = self.client.post("/api/bankroll/wheel/withdraw/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["withdrawn"], "1000")


class BootstrapCommandTests(TestCase):
    def test_assigns_owner_everywhere_and_opens_first_round(self):
        owner = make_player("house")
        out = StringIO()
        call_command("bootstrap_games", "--owner", "house", stdout=out)

        self.assertEqual(
            set(Bankroll.objects.filter(owner=owner).values_list("game", flat=True)),
            {"coinflip", "wheel", "crash"},
        )
        self.assertEqual(Round.objects.get().round_id, 1)
        self.assertIn("Crash round 1 is live", out.getvalue())

    def test_unknown_owner(self):
        with self.assertRaises(CommandError):
            call_command("bootstrap_games", "--owner", "nobody")
