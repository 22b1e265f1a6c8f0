"""
Events API (HTTP) listener for Slack Agent.
Slack gets its 200 as soon as the event is accepted; generation runs in the background.

Usage:
    python -m slack_agent.main_ingest
"""
import sys
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from .config import Settings, get_settings
from .dispatcher import Dispatcher, build_dispatcher
from .errors import ConfigInvalid
from .log import setup_logging, get_logger
from .slack.verify import verify_slack_signature
from .store.dedup import DedupSweeper

logger = get_logger("ingest")

def create_app(settings: Settings, dispatcher: Dispatcher) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = DedupSweeper(dispatcher.guard).start()
        yield
        sweeper.stop()

    app = FastAPI(lifespan=lifespan)

    @app.post("/slack/events")
    async def slack_events(request: Request):
        # 1. Verify Signature
        await verify_slack_signature(request, settings.SLACK_SIGNING_SECRET)

        # 2. Parse Body
        try:
            payload = await request.json()
        except Exception:
            return {"status": "error", "message": "Invalid JSON"}

        # 3. Handle URL Verification (Handshake)
        if payload.get("type") == "url_verification":
            return {"challenge": payload.get("challenge")}

        # 4. Handle Event Callback
        if payload.get("type") == "event_callback":
            if dispatcher.handle_event(payload) is None:
                return {"status": "ignored"}
            return {"status": "ok"}

        return {"status": "ignored"}

    return app

def main():
    try:
        settings = get_settings()
    except ConfigInvalid as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(settings.LOG_LEVEL)
    logger.info(f"Starting Slack Agent in Events API mode on port {settings.PORT}...")
    app = create_app(settings, build_dispatcher(settings))
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)

if __name__ == "__main__":
    main()
