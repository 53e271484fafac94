from __future__ import annotations

import logging
from typing import Any

from flask import current_app, request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..game import errors, service
from ..game.errors import RoomError
from ..game.models import Room


logger = logging.getLogger(__name__)

# room code -> room object its tick task was started for
_room_tasks: dict[str, Room] = {}


def _payload(data: Any) -> dict:
    return data if isinstance(data, dict) else {}


def _fail(code: str) -> dict:
    emit("room:error", {"error": code})
    return {"ok": False, "error": code}


def register_socketio_handlers(socketio: SocketIO) -> None:
    def _broadcast_room_state(room_code: str, draft: bool = False) -> None:
        room = service.get_room(room_code)
        if not room:
            return
        socketio.emit("room:state", service.room_public_state(room), to=room_code)
        if draft:
            socketio.emit("draft:state", service.draft_public_state(room), to=room_code)

    def _safe_broadcast_room_state(room_code: str, draft: bool = False) -> None:
        try:
            _broadcast_room_state(room_code, draft=draft)
        except Exception:
            logger.exception(f"[broadcast] code={room_code} failed")

    def _send_reveal_roles(room: Room) -> None:
        for pid in list(room.players):
            try:
                roles = service.reveal_roles(room, pid)
            except RoomError:
                return
            socketio.emit("reveal:roles", {"roles": roles}, to=pid)

    def _ensure_room_task(room: Room) -> None:
        interval = float(current_app.config.get("TICK_INTERVAL_SEC", 0) or 0)
        if interval <= 0 or _room_tasks.get(room.code) is room:
            return
        _room_tasks[room.code] = room
        room_code = room.code

        def _runner() -> None:
            try:
                # Teardown removes the room from the registry, which stops the loop.
                while service.get_room(room_code) is room:
                    socketio.emit("room:tick", {"code": room_code, "nowMs": service.now_ms()}, to=room_code)
                    socketio.sleep(interval)
            finally:
                if _room_tasks.get(room_code) is room:
                    del _room_tasks[room_code]
                logger.debug(f"[tick-stop] code={room_code}")

        socketio.start_background_task(_runner)

    def _leave_current(sid: str, disconnecting: bool = False) -> dict:
        code, room = service.leave_room(sid)
        if code is None:
            return {"ok": True}
        if not disconnecting:
            leave_room(code)
        if room is None:
            logger.info(f"[room-empty] code={code} torn down after {sid} left")
            return {"ok": True}
        _safe_broadcast_room_state(code, draft=True)
        return {"ok": True}

    @socketio.on("room:create")
    def room_create(data=None):
        try:
            room = service.create_room()
        except RoomError as exc:
            return _fail(exc.code)
        return {"ok": True, "code": room.code}

    @socketio.on("room:join")
    def room_join(data=None):
        payload = _payload(data)
        room_code = str(payload.get("code", "")).strip()
        name = payload.get("name", "")

        room = service.get_room(room_code)
        if not room:
            return _fail(errors.ROOM_NOT_FOUND)

        try:
            previous = service.room_for(request.sid).code
        except RoomError:
            previous = None

        # join_room validates before it moves the participant out of ``previous``.
        try:
            room = service.join_room(room_code, request.sid, name)
        except RoomError as exc:
            return _fail(exc.code)

        if previous is not None and previous != room.code:
            leave_room(previous)
            if service.get_room(previous) is None:
                logger.info(f"[room-empty] code={previous} torn down after {request.sid} left")
            else:
                _safe_broadcast_room_state(previous, draft=True)

        join_room(room.code)
        _ensure_room_task(room)
        _safe_broadcast_room_state(room.code)
        return {"ok": True, "room": service.room_public_state(room), "selfId": request.sid}

    @socketio.on("room:leave")
    def room_leave(data=None):
        return _leave_current(request.sid)

    @socketio.on("room:setGameMode")
    def room_set_game_mode(data=None):
        payload = _payload(data)
        try:
            room = service.room_for(request.sid)
            service.set_game_mode(room, request.sid, payload.get("mode"))
        except RoomError as exc:
            return _fail(exc.code)
        _safe_broadcast_room_state(room.code)
        return {"ok": True}

    @socketio.on("draft:start")
    def draft_start(data=None):
        try:
            room = service.room_for(request.sid)
            service.start_draft(room, request.sid)
        except RoomError as exc:
            return _fail(exc.code)
        _safe_broadcast_room_state(room.code, draft=True)
        return {"ok": True}

    @socketio.on("draft:pick")
    def draft_pick(data=None):
        payload = _payload(data)
        try:
            room = service.room_for(request.sid)
            pick = service.submit_pick(
                room,
                request.sid,
                payload.get("teammates"),
                payload.get("secondInCommand"),
            )
        except RoomError as exc:
            return _fail(exc.code)
        _safe_broadcast_room_state(room.code, draft=True)
        return {"ok": True, "pick": pick.to_dict()}

    @socketio.on("draft:end")
    def draft_end(data=None):
        try:
            room = service.room_for(request.sid)
            service.end_draft(room, request.sid)
        except RoomError as exc:
            return _fail(exc.code)
        _safe_broadcast_room_state(room.code, draft=True)
        _send_reveal_roles(room)
        return {"ok": True}

    @socketio.on("reveal:roles")
    def reveal_roles(data=None):
        try:
            room = service.room_for(request.sid)
            roles = service.reveal_roles(room, request.sid)
        except RoomError as exc:
            return _fail(exc.code)
        return {"ok": True, "roles": roles}

    @socketio.on("reveal:continue")
    def reveal_continue(data=None):
        try:
            room = service.room_for(request.sid)
            service.continue_reveal(room, request.sid)
        except RoomError as exc:
            return _fail(exc.code)
        _safe_broadcast_room_state(room.code, draft=True)
        return {"ok": True}

    @socketio.on("voting:next")
    def voting_next(data=None):
        try:
            room = service.room_for(request.sid)
            phase = service.advance_voting(room, request.sid)
        except RoomError as exc:
            return _fail(exc.code)
        _safe_broadcast_room_state(room.code, draft=True)
        return {"ok": True, "phase": phase.value}

    def _cast(payload: dict, choice_key: str, comment_key: str, invalid_code: str) -> str:
        raw_round = payload.get("round")
        round_index = raw_round if isinstance(raw_round, int) and not isinstance(raw_round, bool) else None
        room = service.room_for(request.sid)
        choice = service.cast_vote(
            room,
            request.sid,
            payload.get(choice_key),
            comment=payload.get(comment_key),
            round_index=round_index,
            invalid_code=invalid_code,
        )
        _safe_broadcast_room_state(room.code, draft=True)
        return choice

    @socketio.on("vote:cast")
    def vote_cast(data=None):
        try:
            _cast(_payload(data), "choice", "comment", errors.INVALID_CHOICE)
        except RoomError as exc:
            return _fail(exc.code)
        return {"ok": True}

    @socketio.on("voting:vote")
    def voting_vote(data=None):
        payload = _payload(data)
        payload.pop("round", None)
        try:
            choice = _cast(payload, "pick", "because", errors.INVALID_PICK)
        except RoomError as exc:
            return _fail(exc.code)
        return {"ok": True, "yourVote": choice}

    @socketio.on("vote:results")
    def vote_results(data=None):
        try:
            room = service.room_for(request.sid)
            service.show_tally(room, request.sid)
        except RoomError as exc:
            return _fail(exc.code)
        _safe_broadcast_room_state(room.code, draft=True)
        return {"ok": True}

    @socketio.on("voting:complete")
    def voting_complete(data=None):
        try:
            room = service.room_for(request.sid)
            service.complete_voting(room, request.sid)
        except RoomError as exc:
            return _fail(exc.code)
        _safe_broadcast_room_state(room.code, draft=True)
        return {"ok": True}

    @socketio.on("admin:backToLobby")
    def admin_back_to_lobby(data=None):
        try:
            room = service.room_for(request.sid)
            service.back_to_lobby(room, request.sid)
        except RoomError as exc:
            return _fail(exc.code)
        _safe_broadcast_room_state(room.code, draft=True)
        return {"ok": True}

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        _leave_current(request.sid, disconnecting=True)
