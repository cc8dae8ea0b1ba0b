# services/referral_service.py
"""
Referral Ledger Service

Runs once per /start. Creates the user's profile on first contact,
attributes the referral code, and pays the referrer.

Rules:
- a user document is created at most once (create-if-absent)
- referred_by is write-once; later codes are ignored
- a (referrer, referred) pair is paid at most once, and the payment is a
  single conditional update so concurrent referrals never lose a credit
- unknown referrers, self-referral and direct cycles (A -> B -> A) are
  outcomes, never errors
- storage failures raise StorageUnavailableError and abort the call; writes
  already made stay (no rollback)

No aiogram imports here.
"""

from typing import Any, Awaitable, Callable, Optional
import logging

from config import Settings
from core.helpers import normalize_referral_code, now_utc, referral_link, to_iso
from models import OnboardingResult, ReferralOutcome, UserRecord
from services.exceptions import StorageUnavailableError

logger = logging.getLogger("dripcoin_bot.referral_service")

AvatarLookup = Callable[[], Awaitable[Optional[str]]]


class ReferralLedgerService:
    def __init__(self, store: Any, settings: Settings):
        self.store = store
        self.settings = settings
        self.collection = settings.users_collection

    def referral_link(self, user_id: Any) -> str:
        return referral_link(self.settings.bot_username, user_id)

    async def on_user_start(
        self,
        user_id: Any,
        display_name: str,
        referral_code: Optional[Any] = None,
        *,
        username: Optional[str] = None,
        avatar_lookup: Optional[AvatarLookup] = None,
    ) -> OnboardingResult:
        """
        Handle a /start event for `user_id`.

        Args:
            user_id: acting user (Telegram id or its string form)
            display_name: first name, stored for presentation only
            referral_code: raw /start payload, may be None, malformed,
                the user's own id or an unknown id
            username: Telegram @username, stored as user_name
            avatar_lookup: awaited only when a new profile is created

        Returns:
            OnboardingResult with the user record as known after the call
        """
        uid = str(user_id).strip()
        if not uid:
            raise ValueError("user_id must be non-empty")
        code = normalize_referral_code(referral_code)
        logger.info("Start: user=%s referral=%s", uid, code)

        doc = await self.store.get(self.collection, uid)
        if doc is None:
            return await self._onboard_new_user(uid, display_name, username, code, avatar_lookup)

        logger.info("Returning user detected: %s", uid)
        return await self._attribute_returning_user(uid, UserRecord.from_document(doc, uid), code)

    # -------------------------
    # new user
    # -------------------------
    async def _onboard_new_user(
        self,
        uid: str,
        display_name: str,
        username: Optional[str],
        code: Optional[str],
        avatar_lookup: Optional[AvatarLookup],
    ) -> OnboardingResult:
        logger.info("New user detected. Creating profile for %s", uid)
        rejection = None
        if code:
            rejection = await self._check_referrer(uid, code)

        record = UserRecord(
            user_id=uid,
            user_name=username,
            first_name=display_name or "",
            avatar=await self._lookup_avatar(uid, avatar_lookup),
            balance=self.settings.starting_balance,
            total_coins=self.settings.starting_balance,
            referrals=[],
            referred_by=self._attributable_code(code, rejection),
            daily_reward=self.settings.daily_reward,
            streak_claims=0,
            streak_reward_amount=self.settings.streak_reward_amount,
            last_claimed="",
            friend_count=self.settings.friend_count,
            created_at=to_iso(now_utc()),
        )

        created = await self.store.create_if_absent(self.collection, uid, record.to_document())
        if not created:
            # lost a create race against another /start for the same user
            logger.warning("User %s was created concurrently; treating as returning user", uid)
            doc = await self.store.get(self.collection, uid)
            if doc is None:
                raise StorageUnavailableError(f"user {uid} reported existing but could not be read")
            return await self._attribute_returning_user(uid, UserRecord.from_document(doc, uid), code)

        if not code:
            return OnboardingResult(user=record, is_new_user=True)
        if rejection is not None:
            return OnboardingResult(user=record, is_new_user=True, referral=rejection)

        outcome = await self._credit_referrer(code, uid)
        return OnboardingResult(
            user=record,
            is_new_user=True,
            referral=outcome,
            referrer_id=code if outcome is ReferralOutcome.CREDITED else None,
        )

    # -------------------------
    # returning user
    # -------------------------
    async def _attribute_returning_user(self, uid: str, record: UserRecord, code: Optional[str]) -> OnboardingResult:
        if record.referred_by:
            logger.info("User %s already referred by %s", uid, record.referred_by)
            return OnboardingResult(user=record, is_new_user=False, referral=ReferralOutcome.ALREADY_REFERRED)
        if not code:
            return OnboardingResult(user=record, is_new_user=False)

        rejection = await self._check_referrer(uid, code)
        if self._attributable_code(code, rejection) is None:
            return OnboardingResult(user=record, is_new_user=False, referral=rejection)

        logger.info("User %s is being referred by %s", uid, code)
        claimed = await self.store.set_if_unset(self.collection, uid, "referred_by", code)
        if not claimed:
            logger.info("User %s was referred concurrently; ignoring code %s", uid, code)
            return OnboardingResult(user=record, is_new_user=False, referral=ReferralOutcome.ALREADY_REFERRED)
        record = record.model_copy(update={"referred_by": code})

        if rejection is not None:
            return OnboardingResult(user=record, is_new_user=False, referral=rejection)

        outcome = await self._credit_referrer(code, uid)
        return OnboardingResult(
            user=record,
            is_new_user=False,
            referral=outcome,
            referrer_id=code if outcome is ReferralOutcome.CREDITED else None,
        )

    # -------------------------
    # shared steps
    # -------------------------
    async def _check_referrer(self, uid: str, code: str) -> Optional[ReferralOutcome]:
        """Return why the code cannot be credited, or None when the referrer is valid."""
        if self.settings.reject_self_referral and code == uid:
            logger.warning("REFERRAL_SELF_ATTEMPT user=%s", uid)
            return ReferralOutcome.REJECTED_SELF

        referrer = await self.store.get(self.collection, code)
        if referrer is None:
            logger.warning("Invalid referral ID: %s (user=%s)", code, uid)
            return ReferralOutcome.REFERRER_NOT_FOUND

        # direct cycles only (A -> B -> A); longer chains are not walked
        if self.settings.reject_referral_cycles and str(referrer.get("referred_by") or "") == uid:
            logger.warning("REFERRAL_LOOP_DETECTED user=%s referrer=%s", uid, code)
            return ReferralOutcome.REJECTED_CYCLE

        return None

    def _attributable_code(self, code: Optional[str], rejection: Optional[ReferralOutcome]) -> Optional[str]:
        """Value to store in referred_by for this code, or None."""
        if not code:
            return None
        if rejection is None:
            return code
        if rejection is ReferralOutcome.REFERRER_NOT_FOUND and self.settings.keep_unresolved_referrer:
            return code
        return None

    async def _credit_referrer(self, referrer_id: str, uid: str) -> ReferralOutcome:
        bonus = self.settings.referral_bonus
        increments = {"balance": bonus}
        if self.settings.credit_total_coins:
            increments["total_coins"] = bonus

        credited = await self.store.increment_and_append(
            self.collection, referrer_id, increments, "referrals", uid
        )
        if credited:
            logger.info("Referral credited: %s -> %s (+%s)", referrer_id, uid, bonus)
            return ReferralOutcome.CREDITED

        # no match: either the pair is already listed or the referrer is gone
        referrer = await self.store.get(self.collection, referrer_id)
        if referrer is None:
            logger.warning("Referrer %s disappeared before crediting %s", referrer_id, uid)
            return ReferralOutcome.REFERRER_NOT_FOUND
        logger.info("Referral %s -> %s already credited; skipping", referrer_id, uid)
        return ReferralOutcome.ALREADY_CREDITED

    async def _lookup_avatar(self, uid: str, avatar_lookup: Optional[AvatarLookup]) -> str:
        if avatar_lookup is None:
            return ""
        try:
            return await avatar_lookup() or ""
        except Exception as e:
            logger.warning("Avatar lookup failed for %s: %s", uid, e)
            return ""
