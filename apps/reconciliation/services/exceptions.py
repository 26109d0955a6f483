"""
Domain-specific exceptions for reconciliation app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class ReconciliationServiceError(Exception):
    """Base exception for all reconciliation service errors."""
    pass


class StatementNotFoundError(ReconciliationServiceError):
    """Raised when a bank statement does not exist in the account."""
    pass


class BankTransactionNotFoundError(ReconciliationServiceError):
    """Raised when a bank transaction does not exist in the account."""
    pass


class MatchTargetNotFoundError(ReconciliationServiceError):
    """Raised when the transaction to match is missing or in another account."""
    pass


class AlreadyMatchedError(ReconciliationServiceError):
    """Raised when a transaction is already linked to another bank line."""
    pass


class SessionNotFoundError(ReconciliationServiceError):
    """Raised when a reconciliation session does not exist in the account."""
    pass


class SessionStateError(ReconciliationServiceError):
    """Raised when a session is not in a state that allows the action."""
    pass


class StatementParseError(ReconciliationServiceError):
    """
    Raised when a statement file has unreadable lines.

    ``errors`` holds ``{'row', 'field', 'message'}`` dicts with 1-based
    line numbers.
    """

    def __init__(self, errors):
        self.errors = errors
        super().__init__(f"{len(errors)} error(s) in statement file")
