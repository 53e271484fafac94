from __future__ import annotations

from flask import Blueprint, jsonify

from ..game import errors, service
from ..game.errors import RoomError

bp = Blueprint("rooms", __name__)


@bp.post("/rooms")
def create_room():
    # The creator still has to join over the socket to become host.
    try:
        room = service.create_room()
    except RoomError as exc:
        return jsonify({"error": exc.code}), 503
    return jsonify({"roomCode": room.code}), 201


@bp.get("/rooms/<code>")
def get_room(code: str):
    room = service.get_room(code)
    if not room:
        return jsonify({"error": errors.ROOM_NOT_FOUND}), 404
    return jsonify(service.room_public_state(room))


@bp.get("/rooms/<code>/results")
def get_results(code: str):
    room = service.get_room(code)
    if not room:
        return jsonify({"error": errors.ROOM_NOT_FOUND}), 404
    try:
        board = service.leaderboard(room)
    except RoomError as exc:
        return jsonify({"error": exc.code}), 409
    return jsonify({"code": room.code, **board})
