import copy

import pytest

from gangup.game.models import Matchup, Pick
from gangup.game.scoring import Scores, score


@pytest.fixture()
def reference():
    teams = {
        'L1': Pick(teammates=('P4',), second_in_command='P3'),
        'L2': Pick(teammates=('P5',), second_in_command=None),
    }
    schedule = [Matchup('P3', 'P4'), Matchup('P5', 'P3')]
    votes = {
        0: {'L1': 'P3', 'L2': 'P4', 'P5': 'P3'},
        1: {'L1': 'P3', 'L2': 'P5', 'P4': 'P5'},
    }
    return teams, schedule, votes


def test_reference_game(reference):
    result = score(*reference)
    assert result.personal_totals == {'L1': 1.5, 'L2': 1.5, 'P3': 5, 'P4': 2.5, 'P5': 3.5}
    assert result.team_totals == {'L1': 10, 'L2': 3.5}


def test_score_is_pure(reference):
    before = copy.deepcopy(reference)
    first = score(*reference)
    second = score(*reference)
    assert first == second
    assert reference == before


def test_tie_rewards_both_sides():
    teams = {'L': Pick(teammates=('A',))}
    schedule = [Matchup('A', 'B')]
    votes = {0: {'V1': 'A', 'V2': 'B'}}

    result = score(teams, schedule, votes)

    assert result.personal_totals['V1'] == 0.5
    assert result.personal_totals['V2'] == 0.5
    assert result.personal_totals['A'] == 2
    assert result.personal_totals['B'] == 1
    # A tied, which counts as a win for A's leader
    assert result.personal_totals['L'] == 1
    assert result.team_totals == {'L': 2}


def test_tie_between_two_teammates_pays_leader_once():
    teams = {'L': Pick(teammates=('A',), second_in_command='B')}
    schedule = [Matchup('A', 'B')]
    votes = {0: {'V1': 'A', 'V2': 'B'}}

    result = score(teams, schedule, votes)

    assert result.personal_totals['L'] == 1
    assert result.team_totals['L'] == result.personal_totals['A'] + 1.5 * result.personal_totals['B']


def test_round_without_votes_is_a_tie():
    teams = {'L': Pick(second_in_command='A')}
    result = score(teams, [Matchup('A', 'B')], {})
    assert result.personal_totals == {'L': 1, 'A': 2, 'B': 0}
    assert result.team_totals == {'L': 3}


def test_leader_bonus_only_when_teammate_wins():
    teams = {'L': Pick(teammates=('A',))}
    result = score(teams, [Matchup('A', 'B')], {0: {'V1': 'B', 'V2': 'B', 'V3': 'A'}})
    assert result.personal_totals['L'] == 0
    assert result.personal_totals['B'] == 2
    assert result.personal_totals['V3'] == 0


def test_leader_who_is_a_contender_still_gets_bonus():
    teams = {'L': Pick(teammates=('T',))}
    result = score(teams, [Matchup('L', 'T')], {0: {'V': 'T'}})
    assert result.personal_totals['L'] == 1
    assert result.personal_totals['T'] == 2
    assert result.personal_totals['V'] == 0.5


def test_second_in_command_counts_one_and_a_half_in_team_total():
    teams = {'L': Pick(teammates=('A', 'B'), second_in_command='C')}
    result = score(teams, [], {})
    assert result.personal_totals == {'L': 0, 'A': 1, 'B': 1, 'C': 2}
    assert result.team_totals == {'L': 1 + 1 + 1.5 * 2}


def test_pre_round_points_accumulate_across_leaders():
    teams = {
        'L1': Pick(teammates=('X',)),
        'L2': Pick(second_in_command='X'),
        'L3': Pick(teammates=('X',), second_in_command='Y'),
    }
    result = score(teams, [], {})
    assert result.personal_totals['X'] == 4
    assert result.personal_totals['Y'] == 2


def test_votes_for_non_contenders_are_ignored():
    result = score({}, [Matchup('A', 'B')], {0: {'V1': 'Z', 'V2': 'A'}})
    assert result.personal_totals['Z'] == 0
    assert result.personal_totals['A'] == 1
    assert result.personal_totals['V1'] == 0
    assert result.personal_totals['V2'] == 0.5


def test_empty_inputs():
    assert score({}, [], {}) == Scores()


def test_to_dict_uses_wire_names(reference):
    payload = score(*reference).to_dict()
    assert set(payload) == {'personalTotals', 'teamTotals'}
    assert payload['teamTotals']['L1'] == 10
