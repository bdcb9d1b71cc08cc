from __future__ import annotations

import json
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

INVALID_INPUT_BODY = json.dumps({"error": "Invalid input."}).encode("utf-8")


class ValidationNormalizeMiddleware:
    """Turn FastAPI 422 validation responses into 400 with a short error body.

    Other responses stream through untouched; only the 422 body is dropped
    and replaced.
    """

    def __init__(self, app: Any) -> None:
        self.app = app

    async def __call__(self, scope: Dict[str, Any], receive: Any, send: Any) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        replaced = False

        async def send_wrapper(message: Dict[str, Any]) -> None:
            nonlocal replaced
            if message["type"] == "http.response.start" and message.get("status") == 422:
                replaced = True
                logger.debug("Normalizing validation error for %s", scope.get("path"))
                await send(
                    {
                        "type": "http.response.start",
                        "status": 400,
                        "headers": [
                            (b"content-type", b"application/json"),
                            (b"content-length", str(len(INVALID_INPUT_BODY)).encode("ascii")),
                        ],
                    }
                )
                await send({"type": "http.response.body", "body": INVALID_INPUT_BODY})
                return
            if replaced:
                return
            await send(message)

        await self.app(scope, receive, send_wrapper)
