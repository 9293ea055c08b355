"""HTTP-level tests for the FastAPI app."""

from __future__ import annotations

from parlayleague.security import create_access_token

PICKS = [
    {"team": "Buffalo Bills", "type": "spreads", "side": "Bills", "line": -3.5, "odds": -110},
    {"team": "Josh Allen", "type": "player_anytime_td", "odds": 180},
]


def _register(client, username: str) -> dict:
    assert client.post("/register", json={"username": username, "password": "hunter2"}).status_code == 201
    response = client.post("/login", json={"username": username, "password": "hunter2"})
    assert response.status_code == 200
    body = response.json()
    return {"id": body["userId"], "headers": {"Authorization": f"Bearer {body['token']}"}}


def _league(client, creator: dict, name: str = "Sunday Sharps") -> int:
    response = client.post("/create-league", json={"leagueName": name, "passkey": "letmein"}, headers=creator["headers"])
    assert response.status_code == 201
    return response.json()["leagueId"]


def _submit(client, user: dict, league_id: int, week: int, odds: float):
    return client.post(
        "/api/parlay/submit",
        json={"leagueId": league_id, "week": week, "picks": PICKS, "odds": odds},
        headers=user["headers"],
    )


def _settle(client, actor: dict, league_id: int, target: dict, week: int, result: str, **extra):
    payload = {"leagueId": league_id, "targetUserId": target["id"], "week": week, "result": result, **extra}
    return client.post("/api/parlay/settle", json=payload, headers=actor["headers"])


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_register_and_login_errors(client) -> None:
    _register(client, "alice")
    assert client.post("/register", json={"username": "alice", "password": "x"}).status_code == 409
    assert client.post("/login", json={"username": "ghost", "password": "x"}).status_code == 404
    response = client.post("/login", json={"username": "alice", "password": "wrong"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_login_reports_default_league(client) -> None:
    alice = _register(client, "alice")
    league_id = _league(client, alice)
    body = client.post("/login", json={"username": "alice", "password": "hunter2"}).json()
    assert body["leagueId"] == league_id
    assert body["leagueName"] == "Sunday Sharps"


def test_create_league_requires_token_and_unique_name(client) -> None:
    alice = _register(client, "alice")
    assert client.post("/create-league", json={"leagueName": "X", "passkey": "y"}).status_code == 401
    _league(client, alice)
    response = client.post(
        "/create-league",
        json={"leagueName": "SUNDAY sharps", "passkey": "y"},
        headers=alice["headers"],
    )
    assert response.status_code == 409


def test_league_lookup_join_and_settings(client) -> None:
    alice, bob = _register(client, "alice"), _register(client, "bob")
    league_id = _league(client, alice)

    join = client.post("/api/leagues/join", json={"leagueId": league_id, "passkey": "nope"}, headers=bob["headers"])
    assert join.status_code == 403
    join = client.post("/api/leagues/join", json={"leagueId": league_id, "passkey": "letmein"}, headers=bob["headers"])
    assert join.json() == {"message": "Successfully joined the league!"}

    league = client.get(f"/league/{league_id}").json()
    assert league["creator"]["username"] == "alice"
    assert sorted(league["members"]) == sorted([alice["id"], bob["id"]])
    assert client.get("/league/999").status_code == 404

    settings = {
        "leagueId": league_id,
        "leagueType": "classic",
        "startingBucs": 2500,
        "minTotalOdds": 300,
        "minLegOdds": -200,
        "numLegs": 4,
        "submissionDeadline": "Sunday 1:00 PM",
    }
    assert client.post("/api/league-settings", json=settings, headers=bob["headers"]).status_code == 403
    assert client.post("/api/league-settings", json=settings, headers=alice["headers"]).status_code == 200
    assert client.get(f"/league/{league_id}").json()["settings"]["startingBucs"] == 2500

    assert [lg["name"] for lg in client.get("/api/leagues/search", params={"name": "sharps"}).json()] == ["Sunday Sharps"]
    assert client.get("/api/leagues/search").status_code == 400
    assert len(client.get("/api/user-leagues", params={"username": "bob"}).json()) == 1


def test_submit_requires_credentials(client) -> None:
    alice = _register(client, "alice")
    league_id = _league(client, alice)
    response = client.post("/api/parlay/submit", json={"leagueId": league_id, "week": 1, "picks": PICKS, "odds": 3.2})
    assert response.status_code == 401
    assert "log in again" in response.json()["error"]

    bad_token = {"Authorization": "Bearer not-a-jwt"}
    response = client.post(
        "/api/parlay/submit",
        json={"leagueId": league_id, "week": 1, "picks": PICKS, "odds": 3.2},
        headers=bad_token,
    )
    assert response.status_code == 401


def test_submit_rejects_invalid_fields(client) -> None:
    alice = _register(client, "alice")
    league_id = _league(client, alice)

    response = client.post(
        "/api/parlay/submit",
        json={"leagueId": league_id, "week": "three", "picks": PICKS, "odds": 3.2},
        headers=alice["headers"],
    )
    assert response.status_code == 400
    assert "week" in response.json()["error"]

    response = client.post(
        "/api/parlay/submit",
        json={"leagueId": league_id, "week": 1, "picks": [], "odds": 3.2},
        headers=alice["headers"],
    )
    assert response.status_code == 400
    assert "picks" in response.json()["error"]

    response = client.post(
        "/api/parlay/submit",
        json={"leagueId": league_id, "week": 1, "picks": [{"team": "Jets"}], "odds": 3.2},
        headers=alice["headers"],
    )
    assert response.status_code == 400
    assert "picks[0].odds" in response.json()["error"]


def test_submission_flow_and_week_visibility(client) -> None:
    alice, bob = _register(client, "alice"), _register(client, "bob")
    league_id = _league(client, alice)

    first = _submit(client, bob, league_id, 1, 3.2)
    assert first.status_code == 200
    second = _submit(client, bob, league_id, 1, 4.1)
    assert second.json()["parlayId"] == first.json()["parlayId"]

    assert client.get(f"/api/parlay/mine/{league_id}/1", headers=bob["headers"]).json() == {"submitted": True}
    assert client.get(f"/api/parlay/mine/{league_id}/1", headers=alice["headers"]).json() == {"submitted": False}
    assert client.get(f"/api/parlay/week/{league_id}/1", headers=alice["headers"]).status_code == 403
    assert client.get(f"/api/parlay/week/{league_id}/1").status_code == 401

    _submit(client, alice, league_id, 1, 2.0)
    week = client.get(f"/api/parlay/week/{league_id}/1", headers=alice["headers"]).json()
    assert [p["username"] for p in week] == ["bob", "alice"]
    bob_parlay = week[0]
    assert bob_parlay["odds"] == 4.1
    assert bob_parlay["picks"][1] == {
        "team": "Josh Allen",
        "type": "player_anytime_td",
        "side": None,
        "line": None,
        "odds": 180.0,
        "matchup": None,
        "result": "pending",
    }


def test_settlement_and_stats(client) -> None:
    alice, bob, carol = _register(client, "alice"), _register(client, "bob"), _register(client, "carol")
    league_id = _league(client, alice)
    _submit(client, bob, league_id, 1, 6.5)
    _submit(client, carol, league_id, 1, 3.0)
    _submit(client, carol, league_id, 2, 4.0)

    assert _settle(client, bob, league_id, bob, 1, "won").status_code == 403
    assert _settle(client, bob, league_id, bob, 1, "bogus").status_code == 403
    anonymous = client.post(
        "/api/parlay/settle",
        json={"leagueId": league_id, "targetUserId": bob["id"], "week": 1, "result": "won"},
    )
    assert anonymous.status_code == 401
    assert _settle(client, alice, league_id, bob, 1, "bogus").status_code == 400
    assert _settle(client, alice, league_id, alice, 1, "won").status_code == 404
    assert _settle(client, alice, 999, bob, 1, "won").status_code == 404

    assert _settle(client, alice, league_id, bob, 1, "won", legsWon=2, legsLost=0).json()["message"] == "Parlay settled."
    _settle(client, alice, league_id, carol, 1, "won", legsWon=2, legsLost=0)
    _settle(client, alice, league_id, carol, 2, "lost", legsWon=1, legsLost=1)

    stats = client.get(f"/api/league/{league_id}/stats", headers={"Authorization": "Bearer garbage"})
    assert stats.status_code == 200
    assert stats.json() == [
        {"userId": bob["id"], "username": "bob", "legsWon": 2, "legsLost": 0, "parlayWins": 1, "parlayLosses": 0, "points": 8},
        {"userId": carol["id"], "username": "carol", "legsWon": 3, "legsLost": 1, "parlayWins": 1, "parlayLosses": 1, "points": 1},
    ]


def test_stats_for_empty_league(client) -> None:
    assert client.get("/api/league/42/stats").json() == []


def test_token_for_unknown_subject_is_not_a_user(client) -> None:
    alice = _register(client, "alice")
    league_id = _league(client, alice)
    stranger = {"Authorization": f"Bearer {create_access_token(999)}"}
    assert client.get(f"/api/parlay/mine/{league_id}/1", headers=stranger).status_code == 401
    response = client.post(
        "/api/parlay/submit",
        json={"leagueId": league_id, "week": 1, "picks": PICKS, "odds": 3.2},
        headers=stranger,
    )
    assert response.status_code == 401
    assert client.get(f"/api/parlay/week/{league_id}/1", headers=stranger).status_code == 401
    assert client.get(f"/api/league/{league_id}/stats").json() == []
