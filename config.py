# config.py
"""
Settings for DripCoin Quest bot.

`.env` is loaded once and turned into a frozen Settings object by
Settings.from_env(). bot.py builds it at startup and passes it to the
store, the ledger service and the handlers. Nothing else reads os.environ.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw else default


@dataclass(frozen=True)
class Settings:
    bot_token: str = ""
    bot_username: str = "DripCoinBot"

    mongo_uri: str = ""
    mongo_db_name: Optional[str] = None
    users_collection: str = "Users"

    run_mode: str = "polling"        # polling | webhook
    webhook_url: str = ""
    webhook_path: str = "/telegram/update"
    webapp_host: str = "0.0.0.0"
    webapp_port: int = 3000

    log_level: str = "INFO"
    log_dir: str = "logs"

    # rewards
    starting_balance: int = 5000
    referral_bonus: int = 1000
    daily_reward: int = 1000
    streak_reward_amount: int = 5000
    friend_count: int = 10

    # referral policy
    credit_total_coins: bool = True
    keep_unresolved_referrer: bool = True
    reject_self_referral: bool = True
    reject_referral_cycles: bool = True

    # presentation
    welcome_photo_url: str = "https://i.postimg.cc/wTZCz4WB/drip-f.png"
    quest_url: str = "https://t.me/DripCoinBot/DripCoinQuest"
    channel_url: str = "https://t.me/dripcoinofficialchannel"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        load_dotenv(dotenv_path)

        bot_token = os.getenv("BOT_TOKEN")
        mongo_uri = os.getenv("MONGO_URI")
        # Safety checks
        if not bot_token:
            raise RuntimeError("BOT_TOKEN not set in .env")
        if not mongo_uri:
            raise RuntimeError("MONGO_URI not set in .env")

        defaults = cls()
        return cls(
            bot_token=bot_token,
            bot_username=os.getenv("BOT_USERNAME", defaults.bot_username),
            mongo_uri=mongo_uri,
            mongo_db_name=os.getenv("MONGO_DB_NAME") or None,
            users_collection=os.getenv("USERS_COLLECTION", defaults.users_collection),
            run_mode=os.getenv("RUN_MODE", defaults.run_mode).lower(),
            webhook_url=os.getenv("WEBHOOK_URL", ""),
            webhook_path=os.getenv("WEBHOOK_PATH", defaults.webhook_path),
            webapp_host=os.getenv("WEBAPP_HOST", defaults.webapp_host),
            webapp_port=_env_int("WEBAPP_PORT", _env_int("PORT", defaults.webapp_port)),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level),
            log_dir=os.getenv("LOG_DIR", defaults.log_dir),
            starting_balance=_env_int("STARTING_BALANCE", defaults.starting_balance),
            referral_bonus=_env_int("REFERRAL_BONUS", defaults.referral_bonus),
            daily_reward=_env_int("DAILY_REWARD", defaults.daily_reward),
            streak_reward_amount=_env_int("STREAK_REWARD_AMOUNT", defaults.streak_reward_amount),
            friend_count=_env_int("FRIEND_COUNT", defaults.friend_count),
            credit_total_coins=_env_bool("CREDIT_TOTAL_COINS", defaults.credit_total_coins),
            keep_unresolved_referrer=_env_bool("KEEP_UNRESOLVED_REFERRER", defaults.keep_unresolved_referrer),
            reject_self_referral=_env_bool("REJECT_SELF_REFERRAL", defaults.reject_self_referral),
            reject_referral_cycles=_env_bool("REJECT_REFERRAL_CYCLES", defaults.reject_referral_cycles),
            welcome_photo_url=os.getenv("WELCOME_PHOTO_URL", defaults.welcome_photo_url),
            quest_url=os.getenv("QUEST_URL", defaults.quest_url),
            channel_url=os.getenv("CHANNEL_URL", defaults.channel_url),
        )
