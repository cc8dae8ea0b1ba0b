# models/user_model.py
"""
User model:
- UserRecord: one document per chat participant in the "Users" collection
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any


class UserRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    user_id: str
    user_name: Optional[str] = None
    first_name: str = ""
    avatar: str = ""
    balance: int = Field(default=5000, ge=0)
    total_coins: int = Field(default=5000, ge=0)
    referrals: List[str] = Field(default_factory=list)
    referred_by: Optional[str] = None
    # auxiliary reward state, mutated by the claim flows only
    daily_reward: int = 1000
    streak_claims: int = 0
    streak_reward_amount: int = 5000
    last_claimed: str = ""
    friend_count: int = 10
    created_at: str = ""

    @classmethod
    def from_document(cls, doc: Dict[str, Any], key: Optional[str] = None) -> "UserRecord":
        data = dict(doc)
        # document id wins over a missing or stale user_id field
        data["user_id"] = str(key if key is not None else data.get("user_id", ""))
        # legacy docs stored numeric ids in referrals
        data["referrals"] = [str(r) for r in data.get("referrals") or []]
        if data.get("referred_by") is not None:
            data["referred_by"] = str(data["referred_by"]) or None
        return cls.model_validate(data)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump()
