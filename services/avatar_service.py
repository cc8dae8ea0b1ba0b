# services/avatar_service.py
"""
Profile-picture lookup via the Bot API.

Returns a download URL for the user's newest profile photo, or "" when the
user has none. Callers treat any exception as "no avatar".
"""

import logging
from typing import Optional

from aiogram import Bot

logger = logging.getLogger("dripcoin_bot.avatar_service")

TELEGRAM_FILE_URL = "https://api.telegram.org/file/bot{token}/{path}"


async def fetch_avatar_url(bot: Bot, user_id: int) -> Optional[str]:
    photos = await bot.get_user_profile_photos(user_id, limit=1)
    if not photos.total_count or not photos.photos:
        return ""
    file_id = photos.photos[0][0].file_id
    file = await bot.get_file(file_id)
    if not file.file_path:
        return ""
    url = TELEGRAM_FILE_URL.format(token=bot.token, path=file.file_path)
    logger.debug("Avatar for %s resolved", user_id)
    return url
