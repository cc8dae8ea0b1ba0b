"""
Ledger service exceptions.

Referral problems (unknown referrer, self-referral, double credit) are
outcomes, not exceptions. Only storage failures abort a call.
"""


class LedgerError(Exception):
    """Base exception for referral ledger errors"""
    pass


class StorageUnavailableError(LedgerError):
    """Raised when the document store cannot be reached or a read/write fails"""
    pass
