"""Season standings tests."""

from __future__ import annotations

from parlayleague.parlays.store import ParlayStore
from parlayleague.stats import engine
from parlayleague.stats.engine import ParlayOutcome

NAMES = {1: "alice", 2: "bob", 3: "carol", 4: "dave"}


def _outcome(user_id: int, week: int, odds, result: str = "won", legs_won=0, legs_lost=0) -> ParlayOutcome:
    return ParlayOutcome(
        user_id=user_id,
        username=NAMES[user_id],
        week=week,
        total_odds=odds,
        result=result,
        legs_won=legs_won,
        legs_lost=legs_lost,
    )


def _points(rows) -> dict[str, int]:
    return {row.username: row.points for row in rows}


def test_weekly_bonus_goes_to_every_tied_winner() -> None:
    rows = engine.compute_standings(
        [
            _outcome(1, 3, 5.0),
            _outcome(2, 3, 5.0),
            _outcome(3, 3, 3.0),
        ]
    )
    points = _points(rows)
    # 1 for the win, 2 weekly, 5 season (the season max is also tied)
    assert points == {"alice": 8, "bob": 8, "carol": 1}


def test_season_bonus_goes_to_every_tied_winner_across_weeks() -> None:
    rows = engine.compute_standings(
        [
            _outcome(1, 1, 5.0),
            _outcome(3, 1, 2.0),
            _outcome(2, 2, 5.0),
            _outcome(3, 2, 4.0),
        ]
    )
    points = _points(rows)
    assert points["alice"] == 1 + 2 + 5
    assert points["bob"] == 1 + 2 + 5
    assert points["carol"] == 2


def test_point_accumulation_scenario() -> None:
    rows = engine.compute_standings(
        [
            _outcome(1, 1, 4.0, legs_won=3, legs_lost=0),
            _outcome(2, 1, 4.5, legs_won=3, legs_lost=0),
            _outcome(1, 2, 5.0, legs_won=2, legs_lost=0),
            _outcome(1, 3, 7.5, result="lost", legs_won=1, legs_lost=2),
        ]
    )
    alice = next(row for row in rows if row.username == "alice")
    assert alice.points == 9
    assert (alice.parlay_wins, alice.parlay_losses) == (2, 1)
    assert (alice.legs_won, alice.legs_lost) == (6, 2)
    assert rows[0].username == "alice"


def test_pending_parlays_count_legs_only() -> None:
    rows = engine.compute_standings([_outcome(1, 1, 9.0, result="pending", legs_won=2, legs_lost=1)])
    assert len(rows) == 1
    assert (rows[0].points, rows[0].parlay_wins, rows[0].parlay_losses) == (0, 0, 0)
    assert (rows[0].legs_won, rows[0].legs_lost) == (2, 1)


def test_sort_is_stable_for_equal_points() -> None:
    rows = engine.compute_standings(
        [
            _outcome(3, 1, 2.0, result="lost"),
            _outcome(4, 1, 2.0, result="lost"),
            _outcome(1, 1, 3.0),
            _outcome(2, 1, 2.0, result="lost"),
        ]
    )
    assert [row.username for row in rows] == ["alice", "carol", "dave", "bob"]


def test_non_numeric_odds_count_as_zero_but_never_match() -> None:
    rows = engine.compute_standings(
        [
            _outcome(1, 1, "n/a"),
            _outcome(2, 1, None),
        ]
    )
    assert _points(rows) == {"alice": 1, "bob": 1}

    rows = engine.compute_standings(
        [
            _outcome(1, 1, "n/a"),
            _outcome(2, 1, 0.0),
        ]
    )
    assert _points(rows) == {"bob": 8, "alice": 1}

    rows = engine.compute_standings(
        [
            _outcome(1, 1, None),
            _outcome(2, 1, 0.0),
        ]
    )
    assert _points(rows) == {"bob": 8, "alice": 1}


def test_missing_leg_counts_are_zero() -> None:
    rows = engine.compute_standings([_outcome(1, 1, 2.0, legs_won=None, legs_lost=float("nan"))])
    assert (rows[0].legs_won, rows[0].legs_lost) == (0, 0)


def test_empty_league_has_no_rows() -> None:
    assert engine.compute_standings([]) == []


def test_compute_league_standings_resolves_usernames(session, make_user, make_league) -> None:
    alice, bob = make_user("alice"), make_user("bob")
    league = make_league(alice)
    store = ParlayStore(session)
    pick = [{"team": "Eagles", "type": "h2h", "odds": 130}]
    store.update_result(store.upsert_parlay(alice.id, league.id, 1, pick, 2.3), "won", 2, 0)
    store.update_result(store.upsert_parlay(bob.id, league.id, 1, pick, 6.0), "won", 3, 0)

    rows = engine.compute_league_standings(session, league.id)

    assert [(row.username, row.points) for row in rows] == [("bob", 8), ("alice", 1)]
