from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .scoring import Scores


class Phase(str, Enum):
    LOBBY = "lobby"
    DRAFT = "draft"
    REVEAL = "reveal"
    VOTING = "voting"
    RESULTS = "results"


class GameMode(str, Enum):
    STANDARD = "standard"
    EXTENDED = "extended"
    ROUND_ROBIN = "round_robin"

    @classmethod
    def parse(cls, raw: object) -> GameMode | None:
        value = str(raw or "").strip().lower()
        for mode in cls:
            if mode.value == value:
                return mode
        return None


@dataclass
class Player:
    id: str
    name: str


@dataclass(frozen=True)
class Pick:
    teammates: tuple[str, ...] = ()
    second_in_command: str | None = None

    def has_member(self, participant_id: str | None) -> bool:
        if participant_id is None:
            return False
        return participant_id == self.second_in_command or participant_id in self.teammates

    def to_dict(self) -> dict:
        return {
            "teammates": list(self.teammates),
            "secondInCommand": self.second_in_command,
        }


@dataclass(frozen=True)
class Matchup:
    contender_a: str
    contender_b: str
    prompt_template: str = "{A} vs {B}"

    @property
    def contenders(self) -> tuple[str, str]:
        return self.contender_a, self.contender_b


@dataclass
class VotingState:
    current_round_index: int = 0
    # round index -> voter id -> chosen contender id
    votes: dict[int, dict[str, str]] = field(default_factory=dict)
    comments: dict[int, dict[str, str]] = field(default_factory=dict)


@dataclass
class Room:
    code: str
    host_id: str | None = None
    mode: GameMode = GameMode.STANDARD
    phase: Phase = Phase.LOBBY
    players: dict[str, Player] = field(default_factory=dict)
    picks: dict[str, Pick] = field(default_factory=dict)
    schedule: list[Matchup] = field(default_factory=list)
    voting: VotingState | None = None
    results: Scores | None = None

    def player_name(self, participant_id: str | None) -> str | None:
        if participant_id is None:
            return None
        player = self.players.get(participant_id)
        return player.name if player else None

    def current_matchup(self) -> Matchup | None:
        if self.voting is None:
            return None
        idx = self.voting.current_round_index
        if 0 <= idx < len(self.schedule):
            return self.schedule[idx]
        return None
