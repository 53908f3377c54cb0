# engine/testing.py
"""Deterministic stand-ins for the entropy source, for tests and simulations."""
from .entropy import PlatformInputs


class FixedInputs(PlatformInputs):
    def __init__(self, beacon=b"\x01" * 32, previous=b"\x02" * 32, identity="test-house", budget=1000):
        self._beacon = beacon
        self._previous = previous
        self._identity = identity
        self._budget = budget

    def beacon(self) -> bytes:
        return self._beacon

    def previous_hash(self) -> bytes:
        return self._previous

    def system_identity(self) -> str:
        return self._identity

    def remaining_budget(self) -> int:
        return self._budget


class ScriptedEntropy:
    """Hands out queued draw_bounded results and records every request."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = []

    def draw_bounded(self, mod: int, caller: str) -> int:
        self.calls.append((mod, caller))
        return self.values.pop(0)
