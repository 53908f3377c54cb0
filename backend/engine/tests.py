from collections import Counter
from unittest import mock

from django.test import TestCase

from bankroll.exceptions import Reentrancy
from .entropy import EntropySource, MAX_UINT256, mix, caller_key, SYSTEM_CALLER
from .guard import non_reentrant, nonreentrant, is_locked
from .models import EntropyPool, CallerNonce
from .testing import FixedInputs


class MixTests(TestCase):
    def test_same_parts_same_digest(self):
        self.assertEqual(mix(1, b"a", "b"), mix(1, b"a", "b"))

    def test_parts_are_length_prefixed(self):
        self.assertNotEqual(mix("ab", "c"), mix("a", "bc"))

    def test_digest_fits_in_256_bits(self):
        self.assertLessEqual(mix(MAX_UINT256, "x"), MAX_UINT256)

    def test_caller_key(self):
        self.assertEqual(caller_key(None), SYSTEM_CALLER)


class DrawRawTests(TestCase):
    def setUp(self):
        self.source = EntropySource("test", inputs=FixedInputs())

    def test_nonce_makes_repeated_draws_differ(self):
        first = self.source.draw_raw("user:1")
        second = self.source.draw_raw("user:1")

        self.assertNotEqual(first, second)
        self.assertEqual(CallerNonce.objects.get(domain="test", caller="user:1").value, 2)

    def test_accumulator_absorbs_every_draw(self):
        first = self.source.draw_raw("user:1")
        second = self.source.draw_raw("user:2")

        pool = EntropyPool.objects.get(domain="test")
        self.assertEqual(int(pool.accumulator, 16), first ^ second)
        self.assertEqual(pool.draws, 2)

    def test_nonces_are_per_caller(self):
        self.source.draw_raw("user:1")
        self.source.draw_raw("user:2")

        self.assertEqual(CallerNonce.objects.get(caller="user:1").value, 1)
        self.assertEqual(CallerNonce.objects.get(caller="user:2").value, 1)


class DrawBoundedTests(TestCase):
    def test_rejects_non_positive_mod(self):
        with self.assertRaises(ValueError):
            EntropySource("test").draw_bounded(0, "user:1")

    def test_stays_in_range(self):
        source = EntropySource("test")
        for mod in (1, 2, 7, 10000):
            value = source.draw_bounded(mod, "user:1")
            self.assertTrue(0 <= value < mod)

    def test_biased_high_draw_is_rehashed(self):
        # 2**256 - 1 leaves remainder 5 mod 10, so the top 6 values are rejected
        source = EntropySource("test", inputs=FixedInputs())
        with mock.patch("engine.entropy.mix", side_effect=[MAX_UINT256, 7]) as mixer:
            value = source.draw_bounded(10, "user:1")

        self.assertEqual(value, 7)
        self.assertEqual(mixer.call_count, 2)

    def test_draw_below_limit_is_reduced_directly(self):
        source = EntropySource("test", inputs=FixedInputs())
        with mock.patch("engine.entropy.mix", return_value=123) as mixer:
            value = source.draw_bounded(10, "user:1")

        self.assertEqual(value, 3)
        self.assertEqual(mixer.call_count, 1)

    def test_roughly_uniform(self):
        source = EntropySource("uniform")
        draws = 3000
        counts = Counter(source.draw_bounded(3, "user:1") for _ in range(draws))

        self.assertEqual(set(counts), {0, 1, 2})
        for residue in range(3):
            # ~5.8 standard deviations either side of 1000
            self.assertLess(abs(counts[residue] - draws / 3), 150)


class GuardTests(TestCase):
    def test_nested_entry_is_rejected(self):
        with non_reentrant():
            with self.assertRaises(Reentrancy):
                with non_reentrant():
                    pass

    def test_lock_released_after_failure(self):
        @nonreentrant
        def explode():
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            explode()

        self.assertFalse(is_locked())

    def test_decorated_function_reentering_itself(self):
        @nonreentrant
        def recurse(depth):
            if depth:
                return recurse(depth - 1)
            return "done"

        self.assertEqual(recurse(0), "done")
        with self.assertRaises(Reentrancy):
            recurse(1)
        self.assertFalse(is_locked())
