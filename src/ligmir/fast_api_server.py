# HTTP entry point for chat webhooks.
# Run with: ligmir  (or: uvicorn ligmir.fast_api_server:app --port 8000)
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ligmir.app.config import ENV_PREFIX, get_settings
from ligmir.infrastructure.platform_manager import (
    WorkerPool,
    create_logger,
    get_parameters,
    set_log_level,
)
from ligmir.webhook_handler import webhook_handler

logger = create_logger(logger_name="ligmir-server")


def _lambda_to_fastapi_response(lambda_resp: dict[str, Any]) -> Response | JSONResponse:
    """Convert an AWS Lambda-style proxy response into a FastAPI Response."""
    status_code = lambda_resp.get("statusCode", 200)
    content_type = lambda_resp.get("headers", {}).get("Content-Type", "text/plain")
    body = lambda_resp.get("body", "")

    # Handle dict content as JSON
    if isinstance(body, dict):
        return JSONResponse(content=body, status_code=status_code)

    return Response(content=body, status_code=status_code, media_type=content_type)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Missing configuration raises here and aborts startup
    settings = get_settings()
    # Component loggers are created at import time with the default level
    set_log_level(settings.log_level)
    app.state.pool = WorkerPool(settings.workers, settings.queue_size)
    logger.info(f"Started {settings.workers} workers (queue size {settings.queue_size})")
    try:
        yield
    finally:
        app.state.pool.shutdown(wait=False)


app = FastAPI(title="Ligmir", lifespan=lifespan)


@app.post("/{transport}/update/{token}")
async def update(transport: str, token: str, request: Request) -> Response:
    body = await request.body()
    event = {
        "body": body,
        "headers": request.headers,
        "pathParameters": {"transport": transport, "token": token},
        "requestContext": {"http": {"method": request.method, "path": request.url.path}},
    }
    lambda_response = webhook_handler(event, request.app.state.pool)
    return _lambda_to_fastapi_response(lambda_response)


@app.get("/health")
def health() -> PlainTextResponse:
    return PlainTextResponse("OK")


def main() -> None:
    settings = get_settings()
    server = get_parameters(["host", "port"], ENV_PREFIX)
    logger.info(f"Browser endpoint: {settings.browser_url}")
    uvicorn.run(
        app,
        host=server["host"] or "0.0.0.0",
        port=int(server["port"] or 8000),
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
