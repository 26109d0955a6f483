"""
Reconciliation services.

Business logic for statement import, matching and reconciliation sessions.
"""

from .statement_import import (
    parse_statement_csv,
    import_statement,
)
from .matching import (
    get_statement,
    match_confidence,
    find_match_candidates,
    auto_match_statement,
    manual_match,
    unmatch,
    ignore,
    reconciliation_summary,
)
from .sessions import (
    start_session,
    complete_session,
    abandon_session,
)
from .exceptions import (
    ReconciliationServiceError,
    StatementNotFoundError,
    BankTransactionNotFoundError,
    MatchTargetNotFoundError,
    AlreadyMatchedError,
    SessionNotFoundError,
    SessionStateError,
    StatementParseError,
)

__all__ = [
    # Import
    'parse_statement_csv',
    'import_statement',
    # Matching
    'get_statement',
    'match_confidence',
    'find_match_candidates',
    'auto_match_statement',
    'manual_match',
    'unmatch',
    'ignore',
    'reconciliation_summary',
    # Sessions
    'start_session',
    'complete_session',
    'abandon_session',
    # Exceptions
    'ReconciliationServiceError',
    'StatementNotFoundError',
    'BankTransactionNotFoundError',
    'MatchTargetNotFoundError',
    'AlreadyMatchedError',
    'SessionNotFoundError',
    'SessionStateError',
    'StatementParseError',
]
