from typing import Any

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from ligmir.infrastructure.errors import TransportError


def post_to_slack(
    *, channel_id: str, slack_bot_token: str, message: str, thread_ts: str | None = None
) -> dict[str, Any]:
    """
    Post a message to Slack, threaded under `thread_ts` when given.

    Raises:
        TransportError: If the arguments are missing or Slack rejects the post.
    """
    if not channel_id:
        raise TransportError(
            "Argument 'channel_id' is not set. You must provide a channel ID to post to Slack."
        )
    if not message:
        raise TransportError(
            "Argument 'message' is not set. You must provide a message to post to Slack."
        )
    if not slack_bot_token:
        raise TransportError("Slack bot token is not set")

    try:
        client = WebClient(token=slack_bot_token)
        response = client.chat_postMessage(channel=channel_id, text=message, thread_ts=thread_ts)
    except SlackApiError as e:
        error = e.response.get("error", str(e)) if e.response else str(e)
        raise TransportError(f"Slack API error: {error}") from e

    # Slack SDK returns a SlackResponse; convert minimal fields to dict-like for caller
    if not response.get("ok"):
        raise TransportError(f"Slack API error: {response.get('error')}")
    return {"ok": True, "ts": response.get("ts"), "channel": response.get("channel")}
