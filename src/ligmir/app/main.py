import threading
from typing import Any

from ligmir.app.config import BotSettings, get_settings
from ligmir.app.logging import log_command
from ligmir.app.process_event import decode_update, get_slack_bot_handle, interpret
from ligmir.infrastructure.browser_manager import SkillExtractor
from ligmir.infrastructure.data_models import CharacterReference, RequestSource
from ligmir.infrastructure.errors import TransportError
from ligmir.infrastructure.platform_manager import create_logger
from ligmir.infrastructure.redis_manager import build_redis_manager
from ligmir.infrastructure.slack_manager import post_to_slack
from ligmir.infrastructure.telegram_manager import send_message
from ligmir.services.skill_check_service import RequestOrchestrator

logger = create_logger(logger_name="ligmir")

_orchestrator: RequestOrchestrator | None = None
_orchestrator_lock = threading.Lock()


def build_orchestrator(settings: BotSettings) -> RequestOrchestrator:
    """Wire the orchestrator to the browser and Redis named in the settings."""
    return RequestOrchestrator(
        extractor=SkillExtractor(settings.browser_url, settings.browser_timeout),
        store=build_redis_manager(settings.redis_url),
        default_reference=CharacterReference(settings.default_character_id),
        timeout=settings.browser_timeout,
        logger=logger,
    )


def get_orchestrator() -> RequestOrchestrator:
    """Return the shared orchestrator, building it on first use by any worker."""
    global _orchestrator
    if _orchestrator is None:
        with _orchestrator_lock:
            if _orchestrator is None:
                _orchestrator = build_orchestrator(get_settings())
    return _orchestrator


def send_reply(token: str, source: RequestSource, text: str) -> None:
    """
    Deliver `text` as a reply to the message identified by `source`.

    Delivery failures are logged only; there is no other channel to report them on.
    """
    try:
        if source.transport == "telegram":
            send_message(
                token=token, chat_id=source.chat_id, text=text, reply_to=source.message_id
            )
        elif source.transport == "slack":
            post_to_slack(
                channel_id=source.chat_id,
                slack_bot_token=token,
                message=text,
                thread_ts=source.message_id,
            )
        else:
            raise TransportError(f"Unknown transport: {source.transport}")
        logger.info(f"Reply sent to {source.transport} chat {source.chat_id}")
    except TransportError as e:
        logger.error(
            f'Failed to send message "{text}" in reply to {source.message_id} '
            f"in chat {source.chat_id}: {e}"
        )


def process_update(
    transport: str,
    token: str,
    payload: dict[str, Any],
    *,
    settings: BotSettings | None = None,
    orchestrator: RequestOrchestrator | None = None,
) -> str | None:
    """
    Handle one inbound update end to end and reply to it.

    Runs on a worker thread; blocking browser work happens here, never on the
    server's event loop.

    Returns:
        str | None: The reply that was sent, or None if the update was ignored.
    """
    settings = settings or get_settings()
    orchestrator = orchestrator or get_orchestrator()

    message = decode_update(transport, payload)
    if transport == "slack":
        bot_handle = get_slack_bot_handle(payload)
    else:
        bot_handle = settings.telegram_bot_name

    command = interpret(message, bot_handle, settings.url_patterns)
    log_command(command, logger)

    reply = orchestrator.handle(command)
    if reply is None or message is None:
        return None

    send_reply(token, message.source, reply)
    return reply
