"""
Unit tests for bracket assembly.

Builds whole competitions from fixture snapshots and checks:
- Empty and group-only inputs give an empty bracket
- A Final always terminates the bracket (placeholder if needed)
- Feeder ties line up with the tie they produced in every round
- Sparse rounds are padded, anomalies are recorded in diagnostics
- The result is deterministic
"""

import json

import pytest

from futbracket.assembler import assemble, round_labels_from
from futbracket.config import Settings

# Four-round competition, winners listed first in each pair.
#   R16 -> QF -> SF -> F
R16_PAIRS = [(1, 2), (3, 4), (5, 6), (7, 8), (9, 10), (11, 12), (13, 14), (15, 16)]
QF_PAIRS = [(2, 8), (3, 5), (10, 15), (12, 14)]
SF_PAIRS = [(3, 15), (8, 12)]
FINAL_PAIR = (3, 12)


@pytest.fixture
def full_competition(two_legs, make_fixture):
    """Two-legged R16/QF/SF and a single-leg Final, fed in scrambled order."""
    fixtures = []
    for a, b in reversed(R16_PAIRS):
        fixtures.extend(two_legs("Round of 16", a, b, first=(2, 0), second=(1, 1)))
    for a, b in QF_PAIRS[::2] + QF_PAIRS[1::2]:
        fixtures.extend(two_legs("Quarter-finals", a, b, first=(1, 0), second=(0, 0)))
    for a, b in reversed(SF_PAIRS):
        fixtures.extend(two_legs("Semi-finals", a, b, first=(3, 1), second=(2, 2)))
    fixtures.append(make_fixture("Final", *FINAL_PAIR, 1, 0))
    fixtures.append(make_fixture("Group A", 1, 3, 0, 0))
    return fixtures


def _pairs(positioned_ties):
    return [p.tie.pair_key for p in positioned_ties]


def _columns(positioned_ties):
    return [p.slot.column for p in positioned_ties]


class TestEmptyInputs:
    """Inputs that yield no bracket."""

    def test_no_fixtures_no_labels(self, engine_settings):
        bracket = assemble([], [], engine_settings)

        assert bracket.is_empty
        assert bracket.rounds == ()
        assert bracket.final is None

    def test_group_stage_only(self, make_fixture, engine_settings):
        fixtures = [make_fixture("Group A", 1, 2, 1, 0), make_fixture("Group B", 3, 4, 0, 0)]

        bracket = assemble(fixtures, ["Group A", "Group B"], engine_settings)

        assert bracket.is_empty
        assert bracket.diagnostics.excluded_labels == ("Group A", "Group B")


class TestFullCompetition:
    """A complete 16-team competition."""

    def test_rounds_in_order(self, full_competition, engine_settings):
        bracket = assemble(full_competition, settings=engine_settings)

        assert [r.round.key for r in bracket.rounds] == [
            "Round of 16", "Quarter-finals", "Semi-finals", "Final",
        ]
        assert bracket.final is bracket.rounds[-1]

    def test_feeders_line_up_with_later_rounds(self, full_competition, engine_settings):
        r16, qf, sf, final = assemble(full_competition, settings=engine_settings).rounds

        assert _pairs(final.top) == [(3, 12)]
        assert final.bottom == ()
        assert _pairs(sf.top) == [(3, 15)]
        assert _pairs(sf.bottom) == [(8, 12)]
        assert _pairs(qf.top) == [(3, 5), (10, 15)]
        assert _pairs(qf.bottom) == [(2, 8), (12, 14)]
        assert _pairs(r16.top) == [(3, 4), (5, 6), (9, 10), (15, 16)]
        assert _pairs(r16.bottom) == [(1, 2), (7, 8), (11, 12), (13, 14)]

    def test_slots(self, full_competition, engine_settings):
        r16, qf, sf, final = assemble(full_competition, settings=engine_settings).rounds

        assert _columns(r16.top) == _columns(r16.bottom) == [0, 1, 2, 3]
        assert _columns(qf.top) == _columns(qf.bottom) == [1, 3]
        assert _columns(sf.top) == _columns(sf.bottom) == [2]
        assert _columns(final.top) == [2]
        for index, bracket_round in enumerate((r16, qf, sf, final)):
            assert {p.slot.round_index for p in bracket_round.ties} == {index}

    def test_aggregates_and_no_placeholders(self, full_competition, engine_settings):
        bracket = assemble(full_competition, settings=engine_settings)
        r16, qf, sf, final = bracket.rounds

        # 3 hosted leg 1 (2-0) and drew leg 2 away (1-1)
        first = r16.top[0].tie
        assert first.pair_key == (3, 4)
        assert (first.left_aggregate, first.right_aggregate) == (3, 1)
        assert first.fixture_ids and first.legs == 2

        # 3 hosted leg 1 (3-1), 15 hosted leg 2 (2-2)
        semi = sf.top[0].tie
        assert (semi.left_aggregate, semi.right_aggregate) == (5, 3)

        assert final.top[0].tie.leader.id == 3
        assert not any(p.tie.is_placeholder for r in bracket.rounds for p in r.ties)
        assert not bracket.diagnostics.has_warnings

    def test_canonical_orientation(self, full_competition, engine_settings):
        bracket = assemble(full_competition, settings=engine_settings)

        for bracket_round in bracket.rounds:
            for positioned in bracket_round.ties:
                assert positioned.tie.left.id < positioned.tie.right.id

    def test_deterministic(self, full_competition, engine_settings):
        first = assemble(full_competition, settings=engine_settings)
        second = assemble(list(full_competition), settings=engine_settings)

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_serialises_to_json(self, full_competition, engine_settings):
        payload = assemble(full_competition, settings=engine_settings).to_dict()

        decoded = json.loads(json.dumps(payload))
        assert decoded["rounds"][0]["round"] == "Round of 16"
        assert decoded["rounds"][-1]["top"][0]["column"] == 2


class TestPlaceholders:
    """Sparse data is padded rather than omitted."""

    def test_empty_final_gets_placeholder(self, make_fixture, engine_settings):
        fixtures = [make_fixture("Semi-finals", 1, 2, 2, 1)]

        bracket = assemble(fixtures, ["Semi-finals", "Final"], engine_settings)

        final = bracket.final
        assert final is not None
        assert len(final.top) == 1
        placeholder = final.top[0].tie
        assert placeholder.is_placeholder
        assert placeholder.left.name == placeholder.right.name == "TBD"
        assert (placeholder.left_aggregate, placeholder.right_aggregate) == (0, 0)
        assert final.bottom == ()

    def test_final_added_when_not_listed(self, make_fixture, engine_settings):
        fixtures = [make_fixture("Semi-finals", 1, 2, 2, 1)]

        bracket = assemble(fixtures, ["Semi-finals"], engine_settings)

        assert [r.round.key for r in bracket.rounds] == ["Semi-finals", "Final"]
        assert bracket.final.top[0].tie.is_placeholder
        assert bracket.diagnostics.synthesized_rounds == ("Final",)

    def test_unlisted_stages_before_final_are_drawn(self, make_fixture, engine_settings):
        fixtures = [make_fixture("Quarter-finals", 1, 2, 1, 0)]

        bracket = assemble(fixtures, ["Round of 16", "Quarter-finals"], engine_settings)

        assert [r.round.key for r in bracket.rounds] == [
            "Round of 16", "Quarter-finals", "Semi-finals", "Final",
        ]
        semi = bracket.rounds[2]
        assert semi.round.rank == 90
        assert len(semi.top) == len(semi.bottom) == 1
        assert all(p.tie.is_placeholder for p in semi.ties)
        assert _columns(semi.top) == _columns(semi.bottom) == [2]
        assert bracket.diagnostics.synthesized_rounds == ("Semi-finals", "Final")
        assert not bracket.diagnostics.has_warnings

    def test_listed_rounds_are_not_synthesized(self, full_competition, engine_settings):
        bracket = assemble(full_competition, settings=engine_settings)

        assert bracket.diagnostics.synthesized_rounds == ()

    def test_semi_final_half_without_ties(self, make_fixture, engine_settings):
        fixtures = [make_fixture("Semi-finals", 1, 2, 2, 1)]

        semi = assemble(fixtures, ["Semi-finals", "Final"], engine_settings).rounds[0]

        assert _pairs(semi.top) == [(1, 2)]
        assert len(semi.bottom) == 1
        assert semi.bottom[0].tie.is_placeholder
        assert _columns(semi.bottom) == [2]

    def test_sparse_round_of_16_is_padded(self, make_fixture, engine_settings):
        fixtures = [
            make_fixture("Round of 16", 1, 2, 1, 0),
            make_fixture("Round of 16", 3, 4, 1, 0),
            make_fixture("Round of 16", 5, 6, 1, 0),
        ]

        r16 = assemble(fixtures, ["Round of 16", "Final"], engine_settings).rounds[0]

        assert len(r16.top) == len(r16.bottom) == 4
        assert _pairs(r16.top)[:2] == [(1, 2), (3, 4)]
        assert _pairs(r16.bottom)[0] == (5, 6)
        assert sum(p.tie.is_placeholder for p in r16.ties) == 5

    def test_custom_placeholder_name(self, make_fixture):
        settings = Settings(_env_file=None, placeholder_team_name="To be decided")

        bracket = assemble([], ["Final"], settings)

        assert bracket.final.top[0].tie.left.name == "To be decided"


class TestDegradation:
    """Anomalies are resolved silently and recorded in diagnostics."""

    def test_extra_final_ties_dropped(self, make_fixture, engine_settings):
        fixtures = [make_fixture("Final", 5, 9, 1, 0), make_fixture("Final", 1, 2, 0, 0)]

        bracket = assemble(fixtures, ["Final"], engine_settings)

        assert _pairs(bracket.final.top) == [(1, 2)]
        assert [t.pair_key for t in bracket.diagnostics.dropped_final_ties] == [(5, 9)]
        assert bracket.diagnostics.has_warnings

    def test_duplicate_fixture_reports_not_double_counted(self, make_fixture, engine_settings):
        fixtures = [
            make_fixture("Final", 1, 2, None, None, status="NS", fixture_id=10),
            make_fixture("Final", 1, 2, 2, 0, status="FT", fixture_id=10),
            make_fixture("Final", 1, 2, 2, 0, status="FT", fixture_id=10),
        ]

        bracket = assemble(fixtures, ["Final"], engine_settings)

        tie = bracket.final.top[0].tie
        assert (tie.left_aggregate, tie.right_aggregate) == (2, 0)
        assert tie.fixture_ids == (10,)
        assert tie.finished
        assert bracket.diagnostics.duplicate_fixture_reports == 2

    def test_fallback_for_small_cup(self, make_fixture, engine_settings):
        fixtures = [
            make_fixture("Round of 64", 1, 2, 1, 0),
            make_fixture("Round of 32", 1, 3, 1, 0),
        ]

        bracket = assemble(fixtures, ["Round of 32", "Round of 64"], engine_settings)

        assert bracket.diagnostics.fallback_used
        assert [r.round.key for r in bracket.rounds] == [
            "Round of 64", "Round of 32", "Round of 16", "Quarter-finals", "Semi-finals", "Final",
        ]
        assert bracket.diagnostics.synthesized_rounds == (
            "Round of 16", "Quarter-finals", "Semi-finals", "Final",
        )

    def test_ties_beyond_grid_recorded_as_overflow(self, make_fixture, engine_settings):
        fixtures = [
            make_fixture("Round of 16", n, n + 1, 1, 0) for n in range(1, 21, 2)
        ]

        bracket = assemble(fixtures, ["Round of 16", "Final"], engine_settings)
        r16 = bracket.rounds[0]

        assert len(r16.top) == len(r16.bottom) == 4
        assert len(bracket.diagnostics.overflow_ties) == 2


def test_round_labels_from_fixtures(make_fixture):
    fixtures = [
        make_fixture("Round of 16 - 1st Leg", 1, 2),
        make_fixture("Group A", 1, 3),
        make_fixture("Round of 16 - 1st Leg", 3, 4),
        make_fixture("Final", 1, 4),
    ]

    assert round_labels_from(fixtures) == ["Round of 16 - 1st Leg", "Group A", "Final"]
