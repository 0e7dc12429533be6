import os
from dotenv import load_dotenv

# Only load the .env file if we're not on Render (i.e., we are in a local environment)
if os.environ.get("RENDER") != "true":
    load_dotenv()

# Flask Configuration
SECRET_KEY = os.getenv('SECRET_KEY', 'a_very_secret_key_that_should_be_changed')
CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

# Static client assets served from the same port
STATIC_DIR = os.getenv('STATIC_DIR', os.getcwd())

# Server Configuration
PORT = int(os.getenv('PORT', 3000))
DEBUG = os.getenv('FLASK_ENV', 'production') == 'development'

# Reaper Configuration (seconds unless noted)
ROOM_WAITING_TIMEOUT_SEC = int(os.getenv('ROOM_WAITING_TIMEOUT_SEC', 30 * 60))
ROOM_PLAYING_TIMEOUT_SEC = int(os.getenv('ROOM_PLAYING_TIMEOUT_SEC', 2 * 60 * 60))
REAPER_INTERVAL_SEC = int(os.getenv('REAPER_INTERVAL_SEC', 60))
MAILBOX_RETENTION_DAYS = int(os.getenv('MAILBOX_RETENTION_DAYS', 7))
MAILBOX_PRUNE_INTERVAL_SEC = int(os.getenv('MAILBOX_PRUNE_INTERVAL_SEC', 60 * 60))

# Access guard; RATE_LIMIT_MAX_MESSAGES=0 disables it
RATE_LIMIT_WINDOW_SEC = float(os.getenv('RATE_LIMIT_WINDOW_SEC', 1.0))
RATE_LIMIT_MAX_MESSAGES = int(os.getenv('RATE_LIMIT_MAX_MESSAGES', 120))

def cors_origins():
    """CORS origins as a list (or '*' for any)."""
    if CORS_ORIGINS.strip() == '*':
        return '*'
    return [origin.strip() for origin in CORS_ORIGINS.split(',') if origin.strip()]
