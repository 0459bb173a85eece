"""FastAPI transport for the weather bot.

Channels post one activity per request to ``/api/messages`` and receive the
bot's replies for that turn in the response body, in send order. If the
channel drops the connection mid-turn, the turn's cancellation token is set
and the bot stops at its next checkpoint.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from app.main import build_bot, configure_logging
from core.activity import Activity
from core.bot import WeatherBot
from core.turn_context import CancellationToken, TurnCancelledError, TurnContext

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.1


async def cancel_on_disconnect(
    request: Request,
    token: CancellationToken,
    *,
    interval: float = DISCONNECT_POLL_SECONDS,
) -> None:
    """Set ``token`` once the client behind ``request`` disconnects."""
    while not token.cancelled:
        if await request.is_disconnected():
            logger.info("Client disconnected; cancelling the turn.")
            token.cancel()
            return
        await asyncio.sleep(interval)


def create_app(bot: Optional[WeatherBot] = None) -> FastAPI:
    """Build the FastAPI app; ``bot`` overrides the configured one (tests)."""
    app = FastAPI(title="WeatherBot", version="1.0.0")
    app.state.bot = bot or build_bot()

    @app.post("/api/messages")
    async def post_activity(activity: Activity, request: Request) -> Dict[str, Any]:
        context = TurnContext(activity)
        watcher = asyncio.create_task(cancel_on_disconnect(request, context.cancellation))
        try:
            # The bot is synchronous; one threadpool worker per turn.
            await run_in_threadpool(app.state.bot.on_turn, context)
        except TurnCancelledError as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        except Exception as exc:
            logger.exception("Unhandled error while processing a %s activity", activity.type)
            raise HTTPException(status_code=500, detail="The bot failed to process the activity.") from exc
        finally:
            watcher.cancel()
        return {"activities": [reply.to_wire() for reply in context.sent_activities]}

    @app.get("/api/health")
    def health_check() -> Dict[str, Any]:
        return {
            "status": "ok",
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        }

    return app


if __name__ == "__main__":
    import uvicorn
    from app.config import get_web_host, get_web_port

    configure_logging()
    uvicorn.run(
        "app.web_api:create_app",
        factory=True,
        host=get_web_host(),
        port=get_web_port(),
        reload=False,
    )
