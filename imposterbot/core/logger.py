# imposterbot/core/logger.py

import json
import logging
import sys
import threading
import traceback
import urllib.request

from imposterbot.core.constants import BotConfig

_EMBED_TITLE_LIMIT = 256
_EMBED_DESCRIPTION_LIMIT = 4096


class DiscordWebhookHandler(logging.Handler):
    """
    Posts ERROR and CRITICAL records to a Discord webhook as an embed.
    Each post runs in a daemon thread so the event loop is never blocked.
    """

    def __init__(self, webhook_url: str, bot_name: str):
        super().__init__(level=logging.ERROR)
        self.webhook_url = webhook_url
        self.bot_name = bot_name

    def emit(self, record: logging.LogRecord) -> None:
        threading.Thread(target=self._post, args=(record,), daemon=True).start()

    def build_payload(self, record: logging.LogRecord) -> dict:
        description = f"**{record.getMessage()}**"
        if record.exc_info and record.exc_info[0] is not None:
            tb = "".join(traceback.format_exception(*record.exc_info))
            room = _EMBED_DESCRIPTION_LIMIT - len(description) - 20
            if len(tb) > room:
                tb = "..." + tb[-room:]
            description += f"\n```python\n{tb}\n```"

        return {
            "embeds": [
                {
                    "title": f"[{self.bot_name}] {record.levelname}: {record.name}"[
                        :_EMBED_TITLE_LIMIT
                    ],
                    "description": description[:_EMBED_DESCRIPTION_LIMIT],
                    "color": 0xCC0000 if record.levelno >= logging.CRITICAL else 0xFF4500,
                }
            ]
        }

    def _post(self, record: logging.LogRecord) -> None:
        try:
            req = urllib.request.Request(
                self.webhook_url,
                data=json.dumps(self.build_payload(record)).encode("utf-8"),
                headers={
                    "Content-Type": "application/json",
                    "User-Agent": BotConfig.USER_AGENT,
                },
                method="POST",
            )
            with urllib.request.urlopen(req, timeout=5):
                pass
        except Exception:
            self.handleError(record)


def setup_logging(
    level: int | str = logging.INFO,
    webhook_url: str | None = None,
    bot_name: str = "imposterbot",
):
    """
    Configures the root logger for the bot process.
    Call this once, before the bot connects.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    # Example: 2026-01-15 07:33:52 | INFO     | imposterbot.core.notifications.configurator | Saved join notification
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Calling setup_logging twice must not duplicate output
    if not any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stdout
        for h in root_logger.handlers
    ):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if webhook_url and not any(
        isinstance(h, DiscordWebhookHandler) for h in root_logger.handlers
    ):
        root_logger.addHandler(DiscordWebhookHandler(webhook_url, bot_name))

    for noisy in ("discord.gateway", "discord.http", "discord.client", "aiohttp.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    root_logger.info("Logging initialized at level %s.", logging.getLevelName(level))
    return root_logger
