# models/referral_model.py
"""
Referral models:
- ReferralOutcome: what happened to the referral code on a /start call
- OnboardingResult: what the /start handler gets back from the ledger
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .user_model import UserRecord


class ReferralOutcome(str, Enum):
    NONE = "none"                              # no usable code supplied
    CREDITED = "credited"                      # referrer found and paid
    ALREADY_REFERRED = "already_referred"      # referred_by was set before this call
    REFERRER_NOT_FOUND = "referrer_not_found"  # code names no existing user
    ALREADY_CREDITED = "already_credited"      # pair (referrer, referred) paid earlier
    REJECTED_SELF = "rejected_self"
    REJECTED_CYCLE = "rejected_cycle"


class OnboardingResult(BaseModel):
    user: UserRecord
    is_new_user: bool
    referral: ReferralOutcome = ReferralOutcome.NONE
    referrer_id: Optional[str] = None

    @property
    def credited(self) -> bool:
        return self.referral is ReferralOutcome.CREDITED
