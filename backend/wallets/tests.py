from decimal import Decimal

from django.test import TestCase

from bankroll.exceptions import InsufficientFunds, TransferFailed
from bankroll.models import Bankroll
from bankroll.testing import make_player, wallet_balance
from .models import WalletTransaction
from .transfers import pull, push, funds_received


class TransferTests(TestCase):
    def setUp(self):
        self.player = make_player("alice", balance=500)
        self.bankroll = Bankroll.get("coinflip")

    def test_pull_moves_funds_into_bankroll(self):
        tx = pull(self.bankroll, self.player, Decimal("200"), reason="bet")

        self.bankroll.refresh_from_db()
        self.assertEqual(self.bankroll.held_balance, 200)
        self.assertEqual(wallet_balance(self.player), 300)
        self.assertEqual(tx.tx_type, WalletTransaction.DEBIT)
        self.assertTrue(tx.reference.startswith("coinflip:bet:"))

    def test_pull_more_than_wallet_fails(self):
        with self.assertRaises(InsufficientFunds):
            pull(self.bankroll, self.player, Decimal("501"), reason="bet")

    def test_push_more_than_held_fails(self):
        with self.assertRaises(TransferFailed):
            push(self.bankroll, self.player, Decimal("1"), reason="claim")

    def test_push_credits_wallet_and_notifies_recipient(self):
        pull(self.bankroll, self.player, Decimal("200"), reason="deposit")
        seen = []

        def receiver(sender, user, amount, **kwargs):
            seen.append((user.pk, amount))

        funds_received.connect(receiver)
        try:
            push(self.bankroll, self.player, Decimal("150"), reason="claim")
        finally:
            funds_received.disconnect(receiver)

        self.assertEqual(seen, [(self.player.pk, Decimal("150"))])
        self.assertEqual(wallet_balance(self.player), 450)
        self.assertEqual(self.bankroll.held_balance, 50)

    def test_failing_recipient_fails_the_push(self):
        pull(self.bankroll, self.player, Decimal("200"), reason="deposit")

        def receiver(sender, **kwargs):
            raise TransferFailed("recipient rejected funds")

        funds_received.connect(receiver)
        try:
            with self.assertRaises(TransferFailed):
                push(self.bankroll, self.player, Decimal("150"), reason="claim")
        finally:
            funds_received.disconnect(receiver)
