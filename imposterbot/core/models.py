# imposterbot/core/models.py

from sqlalchemy import BigInteger, Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from imposterbot.core.db import Base


class MemberNotificationMessage(Base):
    """The stored join/leave message format for one guild and event type."""

    __tablename__ = "member_notification_messages"

    guild_id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False
    )
    event_type: Mapped[str] = mapped_column(String(16), primary_key=True)  # "join" | "leave"

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    author: Mapped[str] = mapped_column(Text, nullable=False, default="")
    footer: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Each image slot is either a web url or the name of a file under user_content/<guild_id>/
    thumbnail_is_file: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    thumbnail_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_is_file: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    author_icon_is_file: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    author_icon_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    footer_icon_is_file: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    footer_icon_url: Mapped[str] = mapped_column(Text, nullable=False, default="")


class MemberNotificationChannel(Base):
    __tablename__ = "member_notification_channels"

    guild_id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False
    )
    event_type: Mapped[str] = mapped_column(String(16), primary_key=True)
    channel_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
