# keyboards/main_menu.py
from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from config import Settings
from core.constants import BUTTON_CHANNEL, BUTTON_SHARE, BUTTON_START_QUEST, CB_SHARE_REFERRAL


def build_welcome_keyboard(settings: Settings) -> InlineKeyboardMarkup:
    """Quest + channel links on the first row, referral share on the second."""
    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text=BUTTON_START_QUEST, url=settings.quest_url),
            InlineKeyboardButton(text=BUTTON_CHANNEL, url=settings.channel_url),
        ],
        [
            InlineKeyboardButton(text=BUTTON_SHARE, callback_data=CB_SHARE_REFERRAL),
        ],
    ])
