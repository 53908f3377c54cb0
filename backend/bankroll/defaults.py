# bankroll/defaults.py
from decimal import Decimal

# Largest ledger amount stored exactly. SQLite keeps 15 significant digits
# of a decimal column, so wallet and bankroll balances never exceed this.
MAX_AMOUNT = Decimal(10 ** 15 - 1)

# Amounts are in the smallest currency unit.
DEFAULT_LIMITS = {
    "coinflip": {
        "min_bet": Decimal("100"),
        "max_bet": Decimal("1000000"),
    },
    "wheel": {
        "min_bet": Decimal("100"),
        "max_bet": Decimal("1000000"),
    },
    "crash": {
        "min_bet": Decimal("100"),
        "max_bet": Decimal("1000000"),
    },
}
