import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO: empty picks a default per platform (see server.create_app)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Rooms
    ROOM_CODE_LENGTH = int(os.environ.get("ROOM_CODE_LENGTH", "6"))
    ROOM_CODE_ATTEMPTS = int(os.environ.get("ROOM_CODE_ATTEMPTS", "5"))
    MAX_NAME_LENGTH = int(os.environ.get("MAX_NAME_LENGTH", "24"))

    # Game
    DEFAULT_GAME_MODE = os.environ.get("DEFAULT_GAME_MODE", "standard")
    MAX_COMMENT_LENGTH = int(os.environ.get("MAX_COMMENT_LENGTH", "280"))
    # 0 (default) disables the per-room room:tick task
    TICK_INTERVAL_SEC = float(os.environ.get("TICK_INTERVAL_SEC", "0"))
