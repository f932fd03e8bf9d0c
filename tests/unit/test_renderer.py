# tests/unit/test_renderer.py
import asyncio
import logging
from unittest.mock import MagicMock, patch

import pytest

from imposterbot.core.notifications.renderer import (
    NotificationRenderer,
    RenderContext,
    substitute,
)
from imposterbot.core.notifications.types import (
    EventType,
    LocalFile,
    NotificationConfig,
    UrlMedia,
)

GUILD = 123456789012345678

PLACEHOLDER_TOKENS = (
    "{name}",
    "{mention}",
    "{user_avatar}",
    "{member_count}",
    "{online_member_count}",
)


@pytest.fixture
def renderer(content_root):
    return NotificationRenderer(content_root)


def _config(**fields):
    return NotificationConfig(guild_id=GUILD, event_type=EventType.JOIN, **fields)


# ── substitute ────────────────────────────────────────────────────────────────

def test_substitute_replaces_known_placeholders():
    assert substitute("Hi {name}, you are #{member_count}", {"name": "a", "member_count": "3"}) == (
        "Hi a, you are #3"
    )


def test_substitute_leaves_unknown_placeholders():
    assert substitute("Hi {nickname}", {"name": "a"}) == "Hi {nickname}"


@pytest.mark.parametrize("template", ["{", "oops }", "{0}", "{name!z}"])
def test_substitute_returns_unparseable_template_verbatim(template):
    assert substitute(template, {"name": "a"}) == template


def test_substitute_empty_template():
    assert substitute("", {"name": "a"}) == ""


# ── RenderContext ─────────────────────────────────────────────────────────────

def test_join_context_offers_every_placeholder(join_context):
    assert set(join_context.placeholders()) == {
        "name",
        "mention",
        "user_avatar",
        "member_count",
        "online_member_count",
    }


def test_leave_context_has_no_mention(leave_context):
    values = leave_context.placeholders()
    assert "mention" not in values
    assert "online_member_count" not in values  # count unavailable
    assert values["member_count"] == "119"


def test_context_for_user_reads_discord_user():
    user = MagicMock()
    user.display_name = "amogus"
    user.mention = "<@42>"
    user.display_avatar.url = "https://cdn/a.png"
    ctx = RenderContext.for_user(user, EventType.JOIN, (10, 4))
    assert ctx == RenderContext(EventType.JOIN, "amogus", "<@42>", "https://cdn/a.png", 10, 4)


def test_context_name_is_display_name_not_username():
    member = MagicMock()
    member.name = "amogus_42"
    member.display_name = "Amogus"
    assert RenderContext.for_user(member, EventType.JOIN).name == "Amogus"


# ── render ────────────────────────────────────────────────────────────────────

async def test_render_expands_all_placeholders(renderer, join_context):
    template = " ".join(PLACEHOLDER_TOKENS)
    config = _config(
        content=template, title=template, description=template, author=template, footer=template
    )
    message = await renderer.render(config, join_context)
    for _, text in message.sections:
        assert not any(token in text for token in PLACEHOLDER_TOKENS)
    assert message.content == "amogus <@42> https://cdn.example.com/avatars/42.png 120 37"


async def test_render_leave_keeps_mention_literal(renderer, leave_context):
    message = await renderer.render(
        NotificationConfig(guild_id=GUILD, event_type=EventType.LEAVE, content="Bye {mention}"),
        leave_context,
    )
    assert message.content == "Bye {mention}"


async def test_render_section_order(renderer, join_context):
    config = _config(content="c", title="t", description="d", author="a", footer="f")
    message = await renderer.render(config, join_context)
    assert message.sections == [
        ("content", "c"),
        ("title", "t"),
        ("description", "d"),
        ("author", "a"),
        ("footer", "f"),
    ]


async def test_render_builds_embed(renderer, join_context):
    config = _config(
        title="Welcome!",
        description="**{name}** has joined",
        author="Cozy Cosmos",
        author_icon=UrlMedia("{user_avatar}"),
        footer="Member count: {member_count}",
        image=UrlMedia("https://x/banner.png"),
    )
    message = await renderer.render(config, join_context)
    embed = message.embed
    assert embed.title == "Welcome!"
    assert embed.description == "**amogus** has joined"
    assert embed.author.name == "Cozy Cosmos"
    assert embed.author.icon_url == "https://cdn.example.com/avatars/42.png"
    assert embed.footer.text == "Member count: 120"
    assert embed.image.url == "https://x/banner.png"
    assert message.files == []


async def test_render_content_only_has_no_embed(renderer, join_context):
    message = await renderer.render(_config(content="Welcome {name}!"), join_context)
    assert message.content == "Welcome amogus!"
    assert message.embed is None
    assert message.send_kwargs() == {"content": "Welcome amogus!"}


async def test_render_empty_config(renderer, join_context):
    message = await renderer.render(_config(), join_context)
    assert message.is_empty()
    assert message.send_kwargs() == {}


async def test_render_local_file_becomes_attachment(renderer, join_context, guild_dir):
    (guild_dir / "thumb.png").write_bytes(b"\x89PNG")
    message = await renderer.render(_config(thumbnail=LocalFile("thumb.png")), join_context)
    assert message.embed.thumbnail.url == "attachment://thumb.png"
    assert [f.filename for f in message.files] == ["thumb.png"]
    assert message.files[0].fp.read() == b"\x89PNG"


async def test_render_local_file_name_is_never_substituted(renderer, join_context, guild_dir):
    (guild_dir / "{name}.png").write_bytes(b"x")
    message = await renderer.render(_config(image=LocalFile("{name}.png")), join_context)
    assert message.embed.image.url == "attachment://{name}.png"


async def test_render_missing_local_file_drops_only_that_field(
    renderer, join_context, guild_dir, caplog
):
    (guild_dir / "author.gif").write_bytes(b"GIF89a")
    config = _config(
        description="still here",
        thumbnail=LocalFile("missing.png"),
        author="Cozy",
        author_icon=LocalFile("author.gif"),
    )
    with caplog.at_level(logging.WARNING):
        message = await renderer.render(config, join_context)

    assert message.embed.description == "still here"
    assert not message.embed.thumbnail
    assert message.embed.author.icon_url == "attachment://author.gif"
    assert [f.filename for f in message.files] == ["author.gif"]
    assert "missing.png" in caplog.text


async def test_render_icon_without_text_is_dropped(renderer, join_context, guild_dir):
    (guild_dir / "icon.png").write_bytes(b"x")
    message = await renderer.render(
        _config(description="d", footer_icon=LocalFile("icon.png")), join_context
    )
    assert not message.embed.footer
    assert message.files == []


async def test_render_uses_event_colour(renderer, join_context, leave_context):
    join = await renderer.render(_config(description="d"), join_context)
    leave = await renderer.render(
        NotificationConfig(guild_id=GUILD, event_type=EventType.LEAVE, description="d"),
        leave_context,
    )
    assert join.embed.colour != leave.embed.colour


async def test_render_reads_local_files_in_a_worker_thread(renderer, join_context, guild_dir):
    (guild_dir / "thumb.png").write_bytes(b"\x89PNG")
    offloaded = []
    to_thread = asyncio.to_thread

    async def _recording_to_thread(fn, *args, **kwargs):
        offloaded.append(fn.__name__)
        return await to_thread(fn, *args, **kwargs)

    with patch("asyncio.to_thread", _recording_to_thread):
        message = await renderer.render(_config(thumbnail=LocalFile("thumb.png")), join_context)

    assert offloaded == ["read_bytes"]
    assert message.files[0].fp.read() == b"\x89PNG"
