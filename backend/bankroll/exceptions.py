# bankroll/exceptions.py


class GameError(Exception):
    """
    Base for every failure that aborts a game or ledger operation.
    Raised inside transaction.atomic, so nothing is partially applied.
    """
    code = "game_error"
    status_code = 400
    default_message = "Operation failed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidBet(GameError):
    code = "invalid_bet"
    default_message = "Invalid bet"


class InvalidDeposit(GameError):
    code = "invalid_deposit"
    default_message = "Deposit amount must be positive"


class InsufficientFunds(GameError):
    code = "insufficient_funds"
    default_message = "Insufficient wallet balance"


class InsufficientBankroll(GameError):
    code = "insufficient_bankroll"
    default_message = "Insufficient bankroll"


class PayoutCapExceeded(InsufficientBankroll):
    code = "payout_cap_exceeded"
    default_message = "Payout exceeds the per-bet bankroll cap"


class NothingToClaim(GameError):
    code = "nothing_to_claim"
    default_message = "Nothing to claim"


class NotOwner(GameError):
    code = "not_owner"
    status_code = 403
    default_message = "Only the bankroll owner can do this"


class Reentrancy(GameError):
    code = "reentrancy"
    status_code = 409
    default_message = "Reentrant call rejected"


class BettingClosed(GameError):
    code = "betting_closed"
    default_message = "Betting is closed for this round"


class RoundStillOpen(GameError):
    code = "round_still_open"
    default_message = "Current round is still open for betting"


class TransferFailed(GameError):
    code = "transfer_failed"
    default_message = "Transfer failed"


class AmountTooLarge(GameError):
    code = "amount_too_large"
    default_message = "Amount exceeds the largest balance the ledger can hold"
