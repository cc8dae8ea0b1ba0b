# core/helpers.py
"""
DripCoin Quest - helper utilities

Contains:
- datetime helpers (UTC-safe)
- referral code normalisation
- referral deep-link builder

All pure, no DB access.
"""

from typing import Optional, Any
from datetime import datetime, timezone
import logging
import re

logger = logging.getLogger("dripcoin_bot.helpers")

# ---------- Time helpers (UTC) ----------
UTC = timezone.utc


def now_utc() -> datetime:
    """Return timezone-aware current UTC datetime."""
    return datetime.now(UTC)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Convert datetime to ISO string (UTC). If None -> None."""
    if not dt:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.isoformat()


# ---------- Referral helpers ----------
# Telegram only delivers /start payloads matching this
_START_PAYLOAD_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def normalize_referral_code(raw: Optional[Any]) -> Optional[str]:
    """
    Turn a /start payload into a referral code, or None.
    Empty and malformed payloads mean "no referral".
    """
    if raw is None:
        return None
    code = str(raw).strip()
    if not code:
        return None
    if not _START_PAYLOAD_RE.match(code):
        logger.debug("Ignoring malformed referral payload %r", code)
        return None
    return code


def referral_link(bot_username: str, user_id: Any) -> str:
    """Deep link that starts the bot with `user_id` as payload."""
    return f"https://t.me/{bot_username}?start={user_id}"
