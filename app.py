"""
RF Online - Lobby and Match Relay Server

Flask-SocketIO backend that coordinates rooms for the browser football
game: room lifecycle, ready checks, relay of gameplay state between the
two peers, the online leaderboard and the friend-request mailbox.
All state is in memory and lives as long as the process.
"""

import logging
import signal
from flask import Flask
from flask_socketio import SocketIO
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from config import settings
from lobby import (
    ConnectionManager, FriendMailbox, Leaderboard, Reaper, RelayRouter,
    RoomManager, SocketNotifier
)
from handlers import register_socket_handlers, register_api_handlers
from utils.rate_limit import RateLimiter

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def create_app(testing=False, static_dir=None):
    """
    Application factory that creates and configures the Flask app.

    Args:
        testing: Use the threading async mode and skip background tasks
        static_dir: Client asset folder (defaults to settings.STATIC_DIR)

    Returns:
        Tuple of (app, socketio, room_manager)
    """

    # Flask configuration
    app = Flask(__name__, static_folder=None)
    app.config['SECRET_KEY'] = settings.SECRET_KEY
    app.config['TESTING'] = testing

    origins = settings.cors_origins()

    # CORS configuration for the browser client
    CORS(app, origins=origins)

    # ProxyFix for deployment behind reverse proxy
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    # SocketIO configuration
    socketio = SocketIO(
        app,
        cors_allowed_origins=origins,
        async_mode='threading' if testing else 'eventlet',
        ping_timeout=60,
        ping_interval=25
    )

    # Initialize lobby managers
    logger.info("Initializing lobby managers...")
    notifier = SocketNotifier(socketio)
    connection_manager = ConnectionManager()
    leaderboard = Leaderboard()
    mailbox = FriendMailbox(connection_manager, notifier,
                            retention_days=settings.MAILBOX_RETENTION_DAYS)
    room_manager = RoomManager(connection_manager, notifier, leaderboard, mailbox)
    relay_router = RelayRouter(connection_manager, room_manager, notifier)

    access_guard = None
    if settings.RATE_LIMIT_MAX_MESSAGES > 0 and not testing:
        access_guard = RateLimiter(window_sec=settings.RATE_LIMIT_WINDOW_SEC,
                                   max_messages=settings.RATE_LIMIT_MAX_MESSAGES)

    # Register handlers (pure routing layer)
    logger.info("Registering handlers...")
    register_socket_handlers(socketio, room_manager, relay_router, access_guard)
    register_api_handlers(app, room_manager,
                          static_dir=settings.STATIC_DIR if static_dir is None else static_dir)

    if not testing:
        reaper = Reaper(room_manager,
                        waiting_timeout_sec=settings.ROOM_WAITING_TIMEOUT_SEC,
                        playing_timeout_sec=settings.ROOM_PLAYING_TIMEOUT_SEC)
        socketio.start_background_task(
            reaper.run, socketio,
            interval_sec=settings.REAPER_INTERVAL_SEC,
            mailbox_interval_sec=settings.MAILBOX_PRUNE_INTERVAL_SEC
        )

    logger.info("Application initialization complete")

    return app, socketio, room_manager

def main():
    """Main entry point for the game server."""

    app, socketio, _ = create_app()

    def shutdown(signum, frame):
        logger.info(f"Received signal {signum}, shutting down server...")
        socketio.stop()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    logger.info(f"Starting RF Online server on port {settings.PORT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"CORS origins: {settings.CORS_ORIGINS}")
    logger.info(f"Serving client files from {settings.STATIC_DIR}")

    socketio.run(app, debug=settings.DEBUG, port=settings.PORT, host='0.0.0.0')

if __name__ == '__main__':
    main()
