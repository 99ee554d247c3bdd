from typing import Any

from ligmir.app.config import CHARACTER_PREFIX, DEFAULT_SKILL, SKILL_PREFIX
from ligmir.infrastructure.data_models import (
    Command,
    InboundMessage,
    Malformed,
    RequestSource,
    SetDefaultCharacter,
    SkillCheck,
    Unrecognized,
)
from ligmir.infrastructure.errors import InvalidReferenceError
from ligmir.services.character_service import CharacterUrlPatterns, looks_like_link
from ligmir.services.renderer_service import MISSING_CHARACTER_URL, render_invalid_reference


def decode_update(transport: str, payload: dict[str, Any]) -> InboundMessage | None:
    """
    Normalize a transport payload into an InboundMessage.

    Returns None for updates that carry no message the bot could answer (unknown
    transport, non-message updates, messages posted by bots).
    """
    if transport == "telegram":
        return _decode_telegram_update(payload)
    if transport == "slack":
        return _decode_slack_event(payload)
    return None


def _decode_telegram_update(payload: dict[str, Any]) -> InboundMessage | None:
    message = payload.get("message")
    if not isinstance(message, dict):
        return None

    chat = message.get("chat") or {}
    chat_id = chat.get("id")
    message_id = message.get("message_id")
    if chat_id is None or message_id is None:
        return None

    sender = message.get("from") or {}
    user_id = sender.get("id")
    text = message.get("text")

    return InboundMessage(
        source=RequestSource(
            transport="telegram",
            chat_id=str(chat_id),
            message_id=str(message_id),
            user_id=str(user_id) if user_id is not None else None,
        ),
        text=text if isinstance(text, str) else None,
        is_private=chat.get("type") == "private",
    )


def _decode_slack_event(payload: dict[str, Any]) -> InboundMessage | None:
    event = payload.get("event")
    if not isinstance(event, dict):
        return None

    # Ignore our own posts and edits/joins/other message subtypes
    if event.get("bot_id") or event.get("subtype"):
        return None
    # Channel mentions also arrive as "message" events; answer those via app_mention only
    is_direct = event.get("channel_type") == "im"
    if event.get("type") == "message" and not is_direct:
        return None
    if event.get("type") not in ("message", "app_mention"):
        return None

    channel_id = event.get("channel")
    ts = event.get("ts")
    if not channel_id or not ts:
        return None

    user_id = event.get("user")
    text = event.get("text")

    return InboundMessage(
        source=RequestSource(
            transport="slack",
            chat_id=str(channel_id),
            message_id=str(ts),
            user_id=str(user_id) if user_id else None,
        ),
        text=text if isinstance(text, str) else None,
        is_private=is_direct,
    )


def get_slack_bot_handle(payload: dict[str, Any]) -> str:
    """Return the bot's mention token ("<@U123>") from the event authorizations."""
    authorizations = payload.get("authorizations", []) or []
    for auth in authorizations:
        if auth.get("is_bot") and auth.get("user_id"):
            return f"<@{auth['user_id']}>"
    return ""


def interpret(
    message: InboundMessage | None,
    bot_handle: str,
    patterns: CharacterUrlPatterns,
    *,
    skill_prefix: str = SKILL_PREFIX,
    character_prefix: str = CHARACTER_PREFIX,
    default_skill: str = DEFAULT_SKILL,
) -> Command:
    """
    Turn an inbound chat message into a command.

    Recognized forms (the bot handle may appear anywhere and is ignored):
        /skill [skill] [character link]
        /character <character link>
        <skill> [character link]    (private chats, or when the bot is mentioned)

    Args:
        message (InboundMessage | None): Decoded message, None for non-message updates.
        bot_handle (str): Token that addresses the bot (e.g. "@ligmir_bot", "<@U123>").
        patterns (CharacterUrlPatterns): Character-sheet URL matchers.

    Returns:
        Command: Exactly one command; Unrecognized when the bot should stay silent.
    """
    if message is None or not message.text:
        return Unrecognized()

    raw_tokens = message.text.split()
    tokens = [token for token in raw_tokens if not bot_handle or token != bot_handle]
    mentioned = len(tokens) != len(raw_tokens)
    directed = mentioned or message.is_private
    source = message.source

    if tokens and tokens[0].startswith("/"):
        name, _, target = tokens[0].partition("@")
        # Telegram group commands may name another bot ("/skill@other_bot")
        if target and bot_handle and f"@{target}" != bot_handle:
            return Unrecognized()
        if name == skill_prefix:
            return _skill_check(tokens[1:3], source, patterns, default_skill)
        if name == character_prefix:
            return _set_default_character(tokens[1:2], source, patterns)
        return Unrecognized()

    if directed:
        return _skill_check(tokens[:2], source, patterns, default_skill)
    return Unrecognized()


def _skill_check(
    args: list[str],
    source: RequestSource,
    patterns: CharacterUrlPatterns,
    default_skill: str,
) -> Command:
    # A lone link means "default skill for this character"
    if len(args) == 1 and looks_like_link(args[0]):
        args = [default_skill, args[0]]

    skill = args[0] if args else default_skill
    if len(args) < 2 or not looks_like_link(args[1]):
        return SkillCheck(skill=skill, source=source)

    try:
        reference = patterns.parse(args[1])
    except InvalidReferenceError as e:
        return Malformed(source=source, error=render_invalid_reference(e.url))
    return SkillCheck(skill=skill, source=source, reference=reference)


def _set_default_character(
    args: list[str], source: RequestSource, patterns: CharacterUrlPatterns
) -> Command:
    if not args:
        return Malformed(source=source, error=MISSING_CHARACTER_URL)
    try:
        reference = patterns.parse(args[0])
    except InvalidReferenceError as e:
        return Malformed(source=source, error=render_invalid_reference(e.url))
    return SetDefaultCharacter(reference=reference, source=source)
