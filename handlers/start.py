# handlers/start.py
import logging

from aiogram import Bot, F, Router
from aiogram.filters import CommandObject, CommandStart
from aiogram.types import CallbackQuery, Message
from aiogram.utils.text_decorations import markdown_decoration

from config import Settings
from core.constants import CB_SHARE_REFERRAL, ERROR_TEXT, SHARE_TEXT, WELCOME_TEXT
from keyboards.main_menu import build_welcome_keyboard
from services.avatar_service import fetch_avatar_url
from services.exceptions import StorageUnavailableError
from services.referral_service import ReferralLedgerService

logger = logging.getLogger("dripcoin_bot.handlers.start")
router = Router()


@router.message(CommandStart())
async def cmd_start(
    message: Message,
    command: CommandObject,
    bot: Bot,
    ledger: ReferralLedgerService,
    settings: Settings,
):
    """
    /start handler:
    - creates the profile on first contact
    - attributes the deep-link payload as referral code
    - replies with the welcome card
    """
    user = message.from_user
    logger.info("Start command from %s (%s)", user.id, user.username)
    try:
        result = await ledger.on_user_start(
            user.id,
            user.first_name,
            command.args,
            username=user.username,
            avatar_lookup=lambda: fetch_avatar_url(bot, user.id),
        )
        logger.debug("Start result for %s: new=%s referral=%s",
                     user.id, result.is_new_user, result.referral.value)
        await message.answer_photo(
            photo=settings.welcome_photo_url,
            caption=WELCOME_TEXT.format(first_name=markdown_decoration.quote(user.first_name or "")),
            parse_mode="MarkdownV2",
            reply_markup=build_welcome_keyboard(settings),
        )
    except StorageUnavailableError as e:
        logger.exception("Storage unavailable in start command: %s", e)
        await message.reply(ERROR_TEXT)
    except Exception as e:
        logger.exception("Error in start command: %s", e)
        await message.reply(ERROR_TEXT)


@router.callback_query(F.data == CB_SHARE_REFERRAL)
async def cb_share_referral(cb: CallbackQuery, ledger: ReferralLedgerService):
    link = ledger.referral_link(cb.from_user.id)
    await cb.answer()
    await cb.message.answer(SHARE_TEXT.format(first_name=cb.from_user.first_name, link=link))


def register(dp):
    dp.include_router(router)
