from __future__ import annotations

from dataclasses import dataclass

from . import errors
from .errors import RoomError
from .models import Phase, Room


ANY_PHASE = frozenset(Phase)


@dataclass(frozen=True)
class Action:
    sources: frozenset[Phase]
    # None: the operation stays in its phase or picks the target itself.
    target: Phase | None = None
    host_only: bool = True


# Error reported when an action is attempted outside its source phases.
_WRONG_PHASE = {
    Phase.LOBBY: errors.NOT_IN_LOBBY,
    Phase.DRAFT: errors.NOT_IN_DRAFT,
    Phase.REVEAL: errors.NOT_IN_REVEAL,
    Phase.VOTING: errors.NOT_IN_VOTING,
    Phase.RESULTS: errors.NOT_IN_RESULTS,
}


ACTIONS: dict[str, Action] = {
    "set_mode": Action(frozenset({Phase.LOBBY})),
    "start_draft": Action(ANY_PHASE, Phase.DRAFT),
    "submit_pick": Action(frozenset({Phase.DRAFT}), host_only=False),
    "end_draft": Action(frozenset({Phase.DRAFT}), Phase.REVEAL),
    "continue_reveal": Action(frozenset({Phase.REVEAL}), Phase.VOTING),
    "cast_vote": Action(frozenset({Phase.VOTING}), host_only=False),
    "show_tally": Action(frozenset({Phase.VOTING})),
    "advance_voting": Action(frozenset({Phase.VOTING})),
    "complete_voting": Action(frozenset({Phase.VOTING}), Phase.RESULTS),
    "back_to_lobby": Action(ANY_PHASE, Phase.LOBBY),
    "view_roles": Action(
        frozenset({Phase.REVEAL, Phase.VOTING, Phase.RESULTS}), host_only=False
    ),
}


def require(room: Room, actor_id: str, action: str) -> Action:
    """Check host and phase preconditions for ``action``. Host is checked first."""
    rule = ACTIONS[action]
    if rule.host_only and actor_id != room.host_id:
        raise RoomError(errors.NOT_HOST)
    if room.phase not in rule.sources:
        raise RoomError(wrong_phase_error(rule))
    return rule


def wrong_phase_error(rule: Action) -> str:
    order = list(Phase)
    return _WRONG_PHASE[min(rule.sources, key=order.index)]


def enter(room: Room, action: str) -> Phase:
    phase = ACTIONS[action].target
    if phase is None:
        return room.phase
    room.phase = phase
    return phase
