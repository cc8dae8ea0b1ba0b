"""
core/constants.py

Centralized constants and reusable messages for DripCoin Quest bot.
"""

BOT_NAME = "DripCoinQuest"

# callback data
CB_SHARE_REFERRAL = "share_referral_link"

# ---------------------------
# Messages
# ---------------------------
WELCOME_TEXT = (  # MarkdownV2, first_name must be quoted
    "Welcome {first_name} to *" + BOT_NAME + "*\\! 🎮💰\n\n"
    "🌟 *Complete Quests*: Participate in fun tasks to earn coins and unlock rewards\\.\n"
    "🎁 *Claim Daily Rewards*: Return each day for your free daily coins\\!\n"
    "🔗 *Refer Friends*: Share your referral link and earn rewards when friends join\\.\n"
    "💎 *Earn Streak Bonuses*: Log in daily to increase your rewards\\!\n"
)

SHARE_TEXT = (
    "Hey {first_name}! 🎉\n"
    "Here’s your referral link: {link}\n"
    "Share it with your friends and earn exciting rewards! 🚀\n"
)

ERROR_TEXT = "An error occurred while processing your request. Please try again."

BUTTON_START_QUEST = "Start Quest"
BUTTON_CHANNEL = "Channel"
BUTTON_SHARE = "Share Referral Link"
