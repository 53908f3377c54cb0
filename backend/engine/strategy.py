# engine/strategy.py
"""
Pluggable odds/payout strategy. The bankroll drives every bet through
place_bet(); a game only decides how big the worst case is and who wins.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class Outcome:
    won: bool
    payout: Decimal
    detail: dict = field(default_factory=dict)


class OutcomeEngine(ABC):
    game: str = "base"

    def validate(self, bet: Decimal, **params) -> None:
        """Reject game-specific parameters before any funds move."""

    @abstractmethod
    def max_payout(self, bet: Decimal, **params) -> Decimal:
        """Largest payout this bet could ever produce."""
        ...

    @abstractmethod
    def resolve(self, bankroll, user, bet: Decimal, entropy, **params) -> Outcome:
        """Decide the bet. May raise to veto settlement."""
        ...

    def record(self, bankroll, user, bet: Decimal, outcome: Outcome, **params) -> None:
        """Persist game-specific history after settlement."""
