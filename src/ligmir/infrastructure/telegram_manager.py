from typing import Any

import requests

from ligmir.infrastructure.errors import TransportError

TELEGRAM_API_URL = "https://api.telegram.org"
SEND_MESSAGE_TIMEOUT = 10


def send_message(*, token: str, chat_id: str, text: str, reply_to: str) -> dict[str, Any]:
    """
    Reply to a Telegram message through the Bot API.

    Args:
        token (str): Bot token, as received in the webhook path.
        chat_id (str): Target chat.
        text (str): Plain-text reply.
        reply_to (str): Id of the message being answered.

    Returns:
        dict[str, Any]: The sent message as returned by Telegram.

    Raises:
        TransportError: If the request fails or Telegram reports an error.
    """
    if not chat_id:
        raise TransportError("Argument 'chat_id' is not set")
    if not text:
        raise TransportError("Argument 'text' is not set")

    url = f"{TELEGRAM_API_URL}/bot{token}/sendMessage"
    payload = {"chat_id": chat_id, "text": text, "reply_to_message_id": reply_to}
    try:
        response = requests.post(url, json=payload, timeout=SEND_MESSAGE_TIMEOUT)
        body = response.json()
    except (requests.RequestException, ValueError) as e:
        raise TransportError(f"Exception while posting to Telegram: {e}") from e

    if not response.ok or not body.get("ok"):
        raise TransportError(
            f"Telegram API error ({response.status_code}): {body.get('description')}"
        )

    result = body.get("result")
    return result if isinstance(result, dict) else {}
