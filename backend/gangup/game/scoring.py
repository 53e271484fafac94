"""Scoring for a finished (or cut short) voting phase.

Pre-round points:
  +1 to every teammate a leader picked, +2 to the leader's 2IC.
Per round, for matchup (a, b):
  +1 to a contender for every vote they receive;
  +0.5 to every voter who backed a winner (on a tie both contenders win);
  +1 to every leader with a winner on their team (teammate or 2IC), once per
  round however many of their members won. Leaders who are contenders
  themselves still qualify.
Team totals:
  sum of the teammates' personal totals plus 1.5x the 2IC's. The leader's own
  personal total is not part of their team total.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from .models import Matchup, Pick


TEAMMATE_PICK_POINTS = 1.0
SECOND_PICK_POINTS = 2.0
VOTE_RECEIVED_POINTS = 1.0
VOTER_WIN_POINTS = 0.5
LEADER_WIN_POINTS = 1.0
SECOND_TEAM_MULTIPLIER = 1.5


@dataclass(frozen=True)
class Scores:
    personal_totals: dict[str, float] = field(default_factory=dict)
    team_totals: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "personalTotals": dict(self.personal_totals),
            "teamTotals": dict(self.team_totals),
        }


def _participants(
    teams: Mapping[str, Pick],
    schedule: Sequence[Matchup],
    votes: Mapping[int, Mapping[str, str]],
) -> list[str]:
    seen: dict[str, None] = {}
    for leader_id, pick in teams.items():
        seen[leader_id] = None
        for pid in pick.teammates:
            seen[pid] = None
        if pick.second_in_command:
            seen[pick.second_in_command] = None
    for matchup in schedule:
        seen[matchup.contender_a] = None
        seen[matchup.contender_b] = None
    for vote_map in votes.values():
        for voter_id, choice in vote_map.items():
            seen[voter_id] = None
            seen[choice] = None
    return list(seen)


def score(
    teams: Mapping[str, Pick],
    schedule: Sequence[Matchup],
    votes: Mapping[int, Mapping[str, str]],
) -> Scores:
    personal = {pid: 0.0 for pid in _participants(teams, schedule, votes)}

    for pick in teams.values():
        for pid in pick.teammates:
            personal[pid] += TEAMMATE_PICK_POINTS
        if pick.second_in_command:
            personal[pick.second_in_command] += SECOND_PICK_POINTS

    for round_index, matchup in enumerate(schedule):
        a, b = matchup.contenders
        vote_map = votes.get(round_index) or {}

        tally = {a: 0, b: 0}
        for choice in vote_map.values():
            if choice not in tally:
                continue
            tally[choice] += 1
            personal[choice] += VOTE_RECEIVED_POINTS

        if tally[a] > tally[b]:
            winners = {a}
        elif tally[b] > tally[a]:
            winners = {b}
        else:
            winners = {a, b}

        for voter_id, choice in vote_map.items():
            if choice in winners:
                personal[voter_id] += VOTER_WIN_POINTS

        for leader_id, pick in teams.items():
            if any(pick.has_member(pid) for pid in winners):
                personal[leader_id] += LEADER_WIN_POINTS

    team_totals: dict[str, float] = {}
    for leader_id, pick in teams.items():
        total = sum(personal.get(pid, 0.0) for pid in pick.teammates)
        if pick.second_in_command:
            total += SECOND_TEAM_MULTIPLIER * personal.get(pick.second_in_command, 0.0)
        team_totals[leader_id] = total

    return Scores(personal_totals=personal, team_totals=team_totals)
