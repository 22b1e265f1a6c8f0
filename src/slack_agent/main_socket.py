"""
Socket Mode event listener for Slack Agent.
Connects to Slack via WebSocket - no public URL needed.

Usage:
    python -m slack_agent.main_socket
"""
import signal
import sys
import threading
from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler
from .config import Settings, get_settings
from .dispatcher import Dispatcher, build_dispatcher
from .errors import ConfigInvalid
from .log import setup_logging, get_logger
from .store.dedup import DedupSweeper

logger = get_logger("socket_listener")

def create_app(settings: Settings, dispatcher: Dispatcher, **kwargs) -> App:
    """Bolt app whose listeners only forward events; Bolt acks them before they run."""
    app = App(token=settings.SLACK_BOT_TOKEN, **kwargs)

    @app.event("message")
    def handle_message_events(event):
        dispatcher.handle_event(event)

    @app.event("app_mention")
    def handle_app_mention(event):
        dispatcher.handle_event(event)

    return app

def on_transport_error(error: Exception):
    # The socket client reconnects by itself; keep the loop running.
    logger.error(f"Connection failed, retrying later: {error}")

def make_signal_handler(stop: threading.Event):
    def handle_signal(signum, frame):
        logger.info("Shutting down...")
        stop.set()
    return handle_signal

def run_until_stopped(handler, sweeper: DedupSweeper, stop: threading.Event):
    """Connect, block until `stop` is set, then close intake and the sweeper."""
    handler.connect()
    stop.wait()

    # In-flight dispatch threads are daemons and are not awaited.
    handler.close()
    sweeper.stop()

def main():
    """Start the Socket Mode handler and block until SIGINT/SIGTERM."""
    try:
        settings = get_settings()
    except ConfigInvalid as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(settings.LOG_LEVEL)
    if not settings.socket_mode:
        logger.error("SLACK_APP_TOKEN is not set; use slack_agent.main_ingest for Events API mode")
        sys.exit(1)

    logger.info("Starting Slack Agent in Socket Mode...")
    dispatcher = build_dispatcher(settings)
    sweeper = DedupSweeper(dispatcher.guard).start()

    app = create_app(settings, dispatcher)
    handler = SocketModeHandler(app, settings.SLACK_APP_TOKEN)
    handler.client.on_error_listeners.append(on_transport_error)

    stop = threading.Event()
    handle_signal = make_signal_handler(stop)
    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    run_until_stopped(handler, sweeper, stop)

if __name__ == "__main__":
    main()
