# models/__init__.py
"""
Export commonly used models for easy import.
Usage:
    from models import UserRecord, OnboardingResult, ReferralOutcome
"""

from .user_model import UserRecord
from .referral_model import OnboardingResult, ReferralOutcome

__all__ = [
    "UserRecord",
    "OnboardingResult",
    "ReferralOutcome",
]
