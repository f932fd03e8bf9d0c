# imposterbot/core/constants.py
import discord


class BotConfig:
    USER_AGENT = "Imposterbot/1.0"
    COGS_PACKAGE = "imposterbot.platforms.discord.cogs"


class MediaConfig:
    USER_CONTENT_DIRNAME = "user_content"
    ATTACHMENT_URL_PREFIX = "attachment://"
    DOWNLOAD_CHUNK_BYTES = 64 * 1024


class PlaceholderConfig:
    NAME = "name"
    MENTION = "mention"  # join notifications only
    USER_AVATAR = "user_avatar"
    MEMBER_COUNT = "member_count"
    ONLINE_MEMBER_COUNT = "online_member_count"


class BrandColors:
    # Use discord.Color objects for easy integration with Embeds
    JOIN = discord.Color.blue()
    LEAVE = discord.Color.dark_grey()
    HELP = discord.Color.blurple()
    ERROR = discord.Color.brand_red()
    SUCCESS = discord.Color.green()
