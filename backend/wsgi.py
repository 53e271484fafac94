from dotenv import load_dotenv

load_dotenv()

try:
    from backend.gangup.server import create_app
except ImportError:  # pragma: no cover
    from gangup.server import create_app

# e.g. gunicorn -k eventlet -w 1 wsgi:app (rooms live in process memory)
app, socketio = create_app()
