from __future__ import annotations

import logging
import random
import secrets
import time
from collections.abc import Iterable
from threading import RLock

from ..config import Config
from . import errors, phases
from .errors import RoomError
from .models import GameMode, Matchup, Phase, Pick, Player, Room, VotingState
from .prompts import pick_prompt, render_prompt
from .schedule import candidate_counts, generate_schedule, has_repeats, planned_rounds
from .scoring import Scores, score


logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


_lock = RLock()
_rooms: dict[str, Room] = {}
# participant id -> code of the room they are currently in
_memberships: dict[str, str] = {}


def _generate_code(length: int) -> str:
    return "".join(secrets.choice("0123456789") for _ in range(length))


def create_room(mode: GameMode | None = None) -> Room:
    with _lock:
        for _ in range(max(1, Config.ROOM_CODE_ATTEMPTS)):
            code = _generate_code(Config.ROOM_CODE_LENGTH)
            if code not in _rooms:
                break
        else:
            logger.warning(f"[room-create] no free code after {Config.ROOM_CODE_ATTEMPTS} attempts")
            raise RoomError(errors.ROOM_CREATE_FAILED)

        room = Room(
            code=code,
            mode=mode or GameMode.parse(Config.DEFAULT_GAME_MODE) or GameMode.STANDARD,
        )
        _rooms[code] = room
        logger.info(f"[room-create] code={code} mode={room.mode.value}")
        return room


def get_room(code: str) -> Room | None:
    with _lock:
        return _rooms.get(str(code or "").strip())


def delete_room(code: str) -> bool:
    with _lock:
        room = _rooms.pop(code, None)
        if room is None:
            return False
        for pid in list(room.players):
            if _memberships.get(pid) == code:
                del _memberships[pid]
        logger.info(f"[room-destroy] code={code}")
        return True


def list_rooms() -> list[Room]:
    with _lock:
        return list(_rooms.values())


def room_for(participant_id: str) -> Room:
    """Return the room ``participant_id`` is in, or raise NOT_IN_ROOM."""
    with _lock:
        code = _memberships.get(participant_id)
        if code is None:
            raise RoomError(errors.NOT_IN_ROOM)
        room = _rooms.get(code)
        if room is None:
            _memberships.pop(participant_id, None)
            raise RoomError(errors.ROOM_NOT_FOUND)
        return room


def _clean_name(raw: object) -> str:
    name = str(raw or "").strip()
    return name[: Config.MAX_NAME_LENGTH]


def join_room(code: str, participant_id: str, name: object) -> Room:
    with _lock:
        room = get_room(code)
        if room is None:
            raise RoomError(errors.ROOM_NOT_FOUND)
        clean = _clean_name(name)
        if not clean:
            raise RoomError(errors.NAME_REQUIRED)

        previous = _memberships.get(participant_id)
        if previous is not None and previous != room.code:
            leave_room(participant_id)

        player = room.players.get(participant_id)
        if player is None:
            room.players[participant_id] = Player(id=participant_id, name=clean)
        else:
            player.name = clean
        _memberships[participant_id] = room.code

        if room.host_id is None:
            room.host_id = participant_id
        return room


def leave_room(participant_id: str) -> tuple[str | None, Room | None]:
    """Remove ``participant_id`` from its room.

    Returns ``(code, room)``; ``room`` is None when it was torn down because
    nobody is left, and ``code`` is None when the participant was in no room.
    """
    with _lock:
        code = _memberships.pop(participant_id, None)
        if code is None:
            return None, None
        room = _rooms.get(code)
        if room is None:
            return code, None

        room.players.pop(participant_id, None)
        room.picks.pop(participant_id, None)
        if room.host_id == participant_id:
            room.host_id = next(iter(room.players), None)

        if not room.players:
            delete_room(code)
            return code, None
        return code, room


def set_game_mode(room: Room, actor_id: str, raw_mode: object) -> GameMode:
    with _lock:
        phases.require(room, actor_id, "set_mode")
        mode = GameMode.parse(raw_mode)
        if mode is None:
            raise RoomError(errors.INVALID_MODE)
        room.mode = mode
        return mode


def _clear_game(room: Room) -> None:
    room.picks = {}
    room.schedule = []
    room.voting = None
    room.results = None


def start_draft(room: Room, actor_id: str) -> None:
    with _lock:
        phases.require(room, actor_id, "start_draft")
        _clear_game(room)
        phases.enter(room, "start_draft")
        logger.info(f"[phase] code={room.code} -> draft players={len(room.players)}")


def sanitize_pick(
    leader_id: str,
    teammates: object,
    second_in_command: object,
    roster: Iterable[str],
) -> Pick:
    valid = set(roster)
    valid.discard(leader_id)

    cleaned: list[str] = []
    if isinstance(teammates, (list, tuple)):
        for pid in teammates:
            if isinstance(pid, str) and pid in valid and pid not in cleaned:
                cleaned.append(pid)
    cleaned = cleaned[:2]

    second = second_in_command if isinstance(second_in_command, str) and second_in_command in valid else None
    if second is not None:
        cleaned = [pid for pid in cleaned if pid != second]
    return Pick(teammates=tuple(cleaned), second_in_command=second)


def submit_pick(room: Room, actor_id: str, teammates: object, second_in_command: object) -> Pick:
    with _lock:
        phases.require(room, actor_id, "submit_pick")
        pick = sanitize_pick(actor_id, teammates, second_in_command, room.players)
        room.picks[actor_id] = pick
        return pick


def end_draft(
    room: Room,
    actor_id: str,
    rng: random.Random | None = None,
    prompts: list[str] | None = None,
) -> list[Matchup]:
    with _lock:
        phases.require(room, actor_id, "end_draft")
        pairs = generate_schedule(room.mode, room.players, rng=rng)
        room.schedule = [
            Matchup(contender_a=a, contender_b=b, prompt_template=pick_prompt(prompts, rng=rng))
            for a, b in pairs
        ]
        room.voting = None
        room.results = None
        phases.enter(room, "end_draft")
        logger.info(
            f"[phase] code={room.code} -> reveal mode={room.mode.value} "
            f"rounds={len(room.schedule)} repeats={has_repeats(pairs)}"
        )
        return room.schedule


def continue_reveal(room: Room, actor_id: str) -> None:
    with _lock:
        phases.require(room, actor_id, "continue_reveal")
        room.voting = VotingState()
        phases.enter(room, "continue_reveal")
        logger.info(f"[phase] code={room.code} -> voting rounds={len(room.schedule)}")


def cast_vote(
    room: Room,
    voter_id: str,
    choice: object,
    comment: object = None,
    round_index: object = None,
    invalid_code: str = errors.INVALID_CHOICE,
) -> str:
    with _lock:
        phases.require(room, voter_id, "cast_vote")
        voting = room.voting
        if voting is None:
            raise RoomError(errors.NOT_IN_VOTING)

        current = voting.current_round_index
        if round_index is not None and round_index != current:
            raise RoomError(errors.NO_MATCHUP)
        matchup = room.current_matchup()
        if matchup is None:
            raise RoomError(errors.NO_MATCHUP)

        if voter_id in matchup.contenders:
            raise RoomError(errors.CANNOT_VOTE_SELF_MATCHUP)
        if choice not in matchup.contenders:
            raise RoomError(invalid_code)

        round_votes = voting.votes.setdefault(current, {})
        if voter_id in round_votes:
            raise RoomError(errors.ALREADY_VOTED)
        round_votes[voter_id] = choice

        if isinstance(comment, str) and comment.strip():
            voting.comments.setdefault(current, {})[voter_id] = comment[: Config.MAX_COMMENT_LENGTH]
        return choice


def show_tally(room: Room, actor_id: str) -> None:
    with _lock:
        phases.require(room, actor_id, "show_tally")
        if room.voting is None:
            raise RoomError(errors.NOT_IN_VOTING)


def _finish_voting(room: Room) -> Scores:
    votes = room.voting.votes if room.voting else {}
    try:
        results = score(room.picks, room.schedule, votes)
    except Exception:
        logger.exception(f"[scoring] code={room.code} failed, storing empty results")
        results = Scores()
    room.results = results
    phases.enter(room, "complete_voting")
    logger.info(f"[phase] code={room.code} -> results")
    return results


def advance_voting(room: Room, actor_id: str) -> Phase:
    """Move to the next matchup, or score the game after the last one."""
    with _lock:
        phases.require(room, actor_id, "advance_voting")
        voting = room.voting
        if voting is None:
            raise RoomError(errors.NOT_IN_VOTING)
        if voting.current_round_index < len(room.schedule) - 1:
            voting.current_round_index += 1
            return room.phase
        _finish_voting(room)
        return room.phase


def complete_voting(room: Room, actor_id: str) -> Scores:
    with _lock:
        phases.require(room, actor_id, "complete_voting")
        if room.voting is None:
            raise RoomError(errors.NOT_IN_VOTING)
        return _finish_voting(room)


def back_to_lobby(room: Room, actor_id: str) -> None:
    with _lock:
        phases.require(room, actor_id, "back_to_lobby")
        _clear_game(room)
        phases.enter(room, "back_to_lobby")
        logger.info(f"[phase] code={room.code} -> lobby")


def reveal_roles(room: Room, viewer_id: str) -> list[dict]:
    """Leaders who picked ``viewer_id``, with the role they were picked for."""
    with _lock:
        phases.require(room, viewer_id, "view_roles")
        roles = []
        for leader_id, pick in room.picks.items():
            if pick.second_in_command == viewer_id:
                role = "2ic"
            elif viewer_id in pick.teammates:
                role = "member"
            else:
                continue
            roles.append({
                "leaderId": leader_id,
                "leaderName": room.player_name(leader_id) or leader_id,
                "role": role,
            })
        roles.sort(key=lambda r: r["leaderName"].lower())
        return roles


def leaderboard(room: Room) -> dict:
    with _lock:
        if room.results is None:
            raise RoomError(errors.NOT_IN_RESULTS)

        def ranked(totals: dict[str, float]) -> list[dict]:
            rows = [
                {"id": pid, "name": room.player_name(pid) or pid, "total": total}
                for pid, total in totals.items()
            ]
            rows.sort(key=lambda r: (-r["total"], r["name"].lower()))
            return rows

        return {
            "teams": ranked(room.results.team_totals),
            "players": ranked(room.results.personal_totals),
        }


def _voting_public_state(room: Room) -> dict | None:
    voting = room.voting
    if voting is None:
        return None

    idx = voting.current_round_index
    round_votes = voting.votes.get(idx, {})
    matchup = room.current_matchup()
    current = None
    tally = None
    prompt = None
    if matchup is not None:
        a, b = matchup.contenders
        current = [a, b]
        tally = {a: 0, b: 0}
        for choice in round_votes.values():
            if choice in tally:
                tally[choice] += 1
        prompt = render_prompt(
            matchup.prompt_template,
            room.player_name(a) or a,
            room.player_name(b) or b,
        )

    return {
        "index": idx,
        "total": len(room.schedule),
        "current": current,
        "prompt": prompt,
        "votesReceived": len(round_votes),
        "votesTotal": len(room.players),
        "tally": tally,
        "voters": list(round_votes),
    }


def _schedule_meta(room: Room) -> dict | None:
    if room.voting is None:
        return None
    pairs = [m.contenders for m in room.schedule]
    return {
        "candidateCounts": candidate_counts(pairs, roster=room.players),
        "usedRepeats": has_repeats(pairs),
        "totalRounds": len(pairs),
        "mode": room.mode.value,
    }


def draft_public_state(room: Room) -> dict:
    with _lock:
        return {
            "phase": room.phase.value,
            "picks": {leader_id: pick.to_dict() for leader_id, pick in room.picks.items()},
            "voting": _voting_public_state(room),
            "meta": _schedule_meta(room),
        }


def room_public_state(room: Room) -> dict:
    with _lock:
        return {
            "code": room.code,
            "hostId": room.host_id,
            "hostName": room.player_name(room.host_id),
            "players": [{"id": p.id, "name": p.name} for p in room.players.values()],
            "game": {
                "mode": room.mode.value,
                "plannedRounds": planned_rounds(room.mode, len(room.players)),
            },
            "draft": draft_public_state(room),
            "results": room.results.to_dict() if room.results is not None else None,
        }
