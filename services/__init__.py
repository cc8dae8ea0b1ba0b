"""
Service layer for DripCoin Quest bot.
"""

from services.exceptions import LedgerError, StorageUnavailableError
from services.referral_service import ReferralLedgerService

__all__ = [
    "LedgerError",
    "StorageUnavailableError",
    "ReferralLedgerService",
]
