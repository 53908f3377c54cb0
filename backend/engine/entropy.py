# engine/entropy.py
"""
Best-effort unpredictable integers for game outcomes.

Not provably fair: nothing here can be verified by a third party.
"""
import hashlib
import secrets
import time

from django.conf import settings
from django.db import transaction

from wallets.models import WalletTransaction
from .models import EntropyPool, CallerNonce

MAX_UINT256 = 2 ** 256 - 1
SYSTEM_CALLER = "system"


def caller_key(user) -> str:
    if user is None:
        return SYSTEM_CALLER
    return f"user:{user.pk}"


def mix(*parts) -> int:
    """
    SHA-256 over length-prefixed parts. ints are packed as 32-byte big endian.
    """
    h = hashlib.sha256()
    for part in parts:
        if isinstance(part, int):
            part = part.to_bytes(32, "big")
        elif isinstance(part, str):
            part = part.encode("utf-8")
        h.update(len(part).to_bytes(4, "big"))
        h.update(part)
    return int.from_bytes(h.digest(), "big")


class PlatformInputs:
    """
    Ambient inputs mixed into every draw. Swap for a fixed implementation in tests.
    """

    def beacon(self) -> bytes:
        return secrets.token_bytes(32)

    def previous_hash(self) -> bytes:
        # newest ledger entry stands in for the previous block
        last = (
            WalletTransaction.objects
            .order_by("-id")
            .values_list("id", "reference")
            .first()
        )
        if last is None:
            return bytes(32)
        return hashlib.sha256(f"{last[0]}:{last[1]}".encode("utf-8")).digest()

    def system_identity(self) -> str:
        return settings.HOUSE_IDENTITY

    def remaining_budget(self) -> int:
        return time.perf_counter_ns()


class EntropySource:
    def __init__(self, domain: str, inputs: PlatformInputs = None):
        self.domain = domain
        self.inputs = inputs or PlatformInputs()

    @transaction.atomic
    def draw_raw(self, caller: str) -> int:
        pool, _ = EntropyPool.objects.select_for_update().get_or_create(domain=self.domain)
        nonce, _ = CallerNonce.objects.select_for_update().get_or_create(
            domain=self.domain, caller=caller
        )

        nonce.value += 1
        nonce.save(update_fields=["value"])

        accumulator = int(pool.accumulator, 16)
        draw = mix(
            accumulator,
            self.inputs.beacon(),
            self.inputs.previous_hash(),
            caller,
            self.inputs.system_identity(),
            nonce.value,
            self.inputs.remaining_budget(),
        )

        pool.accumulator = f"{accumulator ^ draw:064x}"
        pool.draws += 1
        pool.save(update_fields=["accumulator", "draws", "updated_at"])
        return draw

    def draw_bounded(self, mod: int, caller: str) -> int:
        """
        Uniform integer in [0, mod). Draws at or above the largest multiple
        of mod are re-hashed instead of reduced, so no residue is favoured.
        """
        if mod < 1:
            raise ValueError("mod must be positive")

        limit = MAX_UINT256 - (MAX_UINT256 % mod)
        draw = self.draw_raw(caller)
        previous = self.inputs.previous_hash()

        while draw >= limit:
            draw = mix(draw, previous, caller, self.inputs.remaining_budget())

        return draw % mod
