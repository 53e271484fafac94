import os
import sys

import pytest

# Ensure the backend root (containing the `gangup` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from gangup.config import Config
from gangup.game import service
from gangup.server import create_app


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SOCKETIO_ASYNC_MODE = 'threading'
    TRUST_PROXY_HEADERS = False
    TICK_INTERVAL_SEC = 0
    LOG_LEVEL = 'WARNING'


def _clear_rooms():
    for room in service.list_rooms():
        service.delete_room(room.code)


@pytest.fixture(autouse=True)
def clean_rooms():
    _clear_rooms()
    yield
    _clear_rooms()


@pytest.fixture()
def app_and_socketio():
    return create_app(TestConfig)


@pytest.fixture()
def flask_app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(app_and_socketio):
    flask_app, socketio = app_and_socketio
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
