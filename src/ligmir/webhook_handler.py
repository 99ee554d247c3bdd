import json
from typing import Any

from ligmir.app.config import TRANSPORTS
from ligmir.app.main import process_update
from ligmir.infrastructure.platform_manager import WorkerPool, create_logger

logger = create_logger(logger_name="ligmir-webhook")


def create_response(
    status_code: int, body: str, content_type: str = "text/plain"
) -> dict[str, Any]:
    """
    Create a standard HTTP response.
    """
    return {
        "statusCode": status_code,
        "body": body,
        "headers": {"Content-Type": content_type},
        "isBase64Encoded": False,
    }


def parse_body(body_raw: Any) -> dict[str, Any]:
    """Parse a webhook body (str, bytes or pre-parsed dict) into a dict."""
    if isinstance(body_raw, dict):
        return body_raw  # Possibly pre-parsed during testing
    try:
        if isinstance(body_raw, bytes):
            body_json = json.loads(body_raw.decode("utf-8"))
        elif isinstance(body_raw, str):
            body_json = json.loads(body_raw)
        else:
            body_json = {}
    except (json.JSONDecodeError, UnicodeDecodeError):
        body_json = {}
    return body_json if isinstance(body_json, dict) else {}


def webhook_handler(event: dict[str, Any], pool: WorkerPool) -> dict[str, Any]:
    """
    Accept one chat update and hand it to the worker pool.

    The response is returned as soon as the update is queued; scraping and the
    reply happen in the background. The path token is passed through to the reply
    call unchanged.

    Args:
        event (dict): Lambda-style event with "pathParameters" (transport, token)
            and "body".
        pool (WorkerPool): Pool running `process_update`.

    Returns:
        dict: Lambda-style response with status code and body.
    """
    path_parameters = event.get("pathParameters", {})
    transport = path_parameters.get("transport", "")
    token = path_parameters.get("token", "")

    if transport not in TRANSPORTS:
        logger.error(f"Unsupported transport: {transport}")
        return create_response(404, "Not Found")

    body_json = parse_body(event.get("body", ""))
    logger.debug(f"Received {transport} update: {body_json}")

    # Slack's initial API verification challenge
    if transport == "slack" and body_json.get("type") == "url_verification":
        logger.info("Returning Slack challenge")
        challenge = {"challenge": body_json.get("challenge")}
        return create_response(200, json.dumps(challenge), "application/json")

    try:
        accepted = pool.submit(process_update, transport, token, body_json)
    except RuntimeError as e:
        logger.error(f"Error dispatching update: {e}")
        return create_response(500, "Internal Server Error")

    if not accepted:
        return create_response(503, "Busy")

    logger.debug(f"Dispatched {transport} update")
    return create_response(200, "ok")
