from __future__ import annotations

from pathlib import Path
from typing import Dict

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from conference_central.api import create_app
from conference_central.database import Database
from conference_central.errors import TransientUnavailable
from conference_central.keys import conference_key
from conference_central.models import Principal


@pytest.fixture()
def database(tmp_path: Path) -> Database:
    db = Database(tmp_path / "api.sqlite3")
    db.initialize()
    return db


def _auth(api_key: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {api_key}"}


def test_health_endpoint(database: Database) -> None:
    with TestClient(create_app(database=database)) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_authenticated_operations_require_api_key(database: Database) -> None:
    with TestClient(create_app(database=database)) as client:
        assert client.post("/profile").status_code == 401
        assert client.get("/profile", headers=_auth("ccb_bogus")).status_code == 401
        response = client.post("/conference", json={"name": "X"})
        assert response.status_code == 401
        assert response.json() == {"detail": "Authorization required"}
        assert client.get("/getConferencesToAttend").status_code == 401


def test_profile_round_trip(database: Database) -> None:
    _, api_key = database.create_account("alice@ex.com", user_id="u1")

    with TestClient(create_app(database=database)) as client:
        missing = client.get("/profile", headers=_auth(api_key))
        assert missing.status_code == 200
        assert missing.json() is None

        created = client.post("/profile", headers=_auth(api_key))
        assert created.status_code == 200
        assert created.json() == {
            "userId": "u1",
            "displayName": "alice",
            "mainEmail": "alice@ex.com",
            "teeShirtSize": "NOT_SPECIFIED",
            "conferenceKeysToAttend": [],
        }

        updated = client.post(
            "/profile",
            headers=_auth(api_key),
            json={"displayName": "Alice A.", "teeShirtSize": "MEDIUM"},
        )
        assert updated.json()["displayName"] == "Alice A."
        assert client.get("/profile", headers=_auth(api_key)).json()["teeShirtSize"] == "MEDIUM"


def test_invalid_tee_shirt_size_is_a_bad_request(database: Database) -> None:
    _, api_key = database.create_account("alice@ex.com", user_id="u1")

    with TestClient(create_app(database=database)) as client:
        response = client.post("/profile", headers=_auth(api_key), json={"teeShirtSize": "HUGE"})

    assert response.status_code == 400


def test_conference_registration_flow(database: Database) -> None:
    _, alice = database.create_account("alice@ex.com", user_id="u1")
    _, bob = database.create_account("bob@ex.com", user_id="u2")
    _, carol = database.create_account("carol@ex.com", user_id="u3")
    _, dave = database.create_account("dave@ex.com", user_id="u4")

    with TestClient(create_app(database=database)) as client:
        created = client.post(
            "/conference",
            headers=_auth(alice),
            json={
                "name": "X",
                "city": "London",
                "topics": ["Web Technologies"],
                "startDate": "2016-01-05T00:00:00.000Z",
                "maxAttendees": 2,
            },
        )
        assert created.status_code == 200
        conference = created.json()
        assert conference["seatsAvailable"] == 2
        assert conference["month"] == 1
        assert conference["startDate"] == "2016-01-05"
        assert conference["organizerDisplayName"] == "alice"
        key = conference["websafeKey"]

        fetched = client.get(f"/conference/{key}")
        assert fetched.status_code == 200
        assert fetched.json() == conference

        register = client.post(f"/conference/{key}/registration", headers=_auth(bob))
        assert register.json() == {"result": True, "reason": "Registration successful"}
        assert client.post(f"/conference/{key}/registration", headers=_auth(carol)).status_code == 200

        sold_out = client.post(f"/conference/{key}/registration", headers=_auth(dave))
        assert sold_out.status_code == 409
        assert sold_out.json() == {"detail": "No seats available"}

        again = client.post(f"/conference/{key}/registration", headers=_auth(bob))
        assert again.status_code == 409
        assert again.json() == {"detail": "Already registered"}

        released = client.delete(f"/conference/{key}/registration", headers=_auth(carol))
        assert released.json() == {"result": True, "reason": "Unregistration successful"}
        assert client.get(f"/conference/{key}").json()["seatsAvailable"] == 1

        twice = client.delete(f"/conference/{key}/registration", headers=_auth(carol))
        assert twice.status_code == 400
        assert twice.json() == {"detail": "Invalid conferenceKey"}

        attending = client.get("/getConferencesToAttend", headers=_auth(bob))
        assert [item["websafeKey"] for item in attending.json()] == [key]

        mine = client.post("/getConferencesCreated", headers=_auth(alice))
        assert [item["name"] for item in mine.json()] == ["X"]
        assert client.post("/getConferencesCreated", headers=_auth(bob)).json() == []


def test_conferences_to_attend_without_profile(database: Database) -> None:
    _, api_key = database.create_account("erin@ex.com", user_id="u5")

    with TestClient(create_app(database=database)) as client:
        response = client.get("/getConferencesToAttend", headers=_auth(api_key))

    assert response.status_code == 404
    assert response.json() == {"detail": "Profile doesn't exist."}


def test_update_conference_is_owner_only(database: Database) -> None:
    _, alice = database.create_account("alice@ex.com", user_id="u1")
    _, bob = database.create_account("bob@ex.com", user_id="u2")

    with TestClient(create_app(database=database)) as client:
        key = client.post("/conference", headers=_auth(alice), json={"name": "X"}).json()["websafeKey"]

        forbidden = client.put(f"/conference/{key}", headers=_auth(bob), json={"city": "Paris"})
        assert forbidden.status_code == 403

        updated = client.put(
            f"/conference/{key}",
            headers=_auth(alice),
            json={"city": "Paris", "maxAttendees": 10},
        )
        assert updated.status_code == 200
        assert updated.json()["city"] == "Paris"
        assert updated.json()["seatsAvailable"] == 10
        assert updated.json()["name"] == "X"


def test_error_mapping(database: Database) -> None:
    _, alice = database.create_account("alice@ex.com", user_id="u1")

    with TestClient(create_app(database=database)) as client:
        not_found = client.get("/conference/garbage")
        assert not_found.status_code == 404
        assert not_found.json() == {"detail": "No Conference found with key: garbage"}

        assert client.post("/conference", headers=_auth(alice), json={"city": "London"}).status_code == 400
        negative = client.post("/conference", headers=_auth(alice), json={"name": "X", "maxAttendees": -1})
        assert negative.status_code == 400
        assert client.post("/conference/garbage/registration", headers=_auth(alice)).status_code == 404


def test_query_endpoints(database: Database) -> None:
    _, alice = database.create_account("alice@ex.com", user_id="u1")

    with TestClient(create_app(database=database)) as client:
        for name, city, size in (("Zeta", "London", 15), ("Alpha", "London", 30), ("Beta", "Paris", 20)):
            client.post(
                "/conference",
                headers=_auth(alice),
                json={
                    "name": name,
                    "city": city,
                    "topics": ["Web Technologies"],
                    "startDate": "2016-01-10",
                    "maxAttendees": size,
                },
            )

        everything = client.post("/queryConferences")
        assert [item["name"] for item in everything.json()] == ["Alpha", "Beta", "Zeta"]

        london = client.post(
            "/queryConferences",
            json={"filters": [{"field": "CITY", "operator": "EQ", "value": "London"}]},
        )
        assert [item["name"] for item in london.json()] == ["Alpha", "Zeta"]

        bad = client.post(
            "/queryConferences",
            json={
                "filters": [
                    {"field": "month", "operator": ">", "value": 1},
                    {"field": "maxAttendees", "operator": "<", "value": 10},
                ]
            },
        )
        assert bad.status_code == 400

        filtered = client.post("/getConferencesFiltered")
        assert [item["name"] for item in filtered.json()] == ["Zeta", "Alpha"]
        assert all(item["organizerDisplayName"] == "alice" for item in filtered.json())


def test_stub_identity_provider(database: Database) -> None:
    async def _identity(request: Request) -> Principal:
        return Principal(user_id="stub", email="stub@ex.com")

    with TestClient(create_app(database=database, identity=_identity)) as client:
        response = client.post("/profile", json={"displayName": "Stubby"})

    assert response.status_code == 200
    assert response.json()["userId"] == "stub"
    assert response.json()["displayName"] == "Stubby"


class _UnavailableDatabase(Database):
    def run_in_transaction(self, fn, *, retries=None):
        raise TransientUnavailable("Store temporarily unavailable")


def test_transient_store_failures_map_to_503(tmp_path: Path) -> None:
    database = _UnavailableDatabase(tmp_path / "down.sqlite3")
    database.initialize()
    _, api_key = database.create_account("alice@ex.com", user_id="u1")

    with TestClient(create_app(database=database)) as client:
        response = client.post("/profile", headers=_auth(api_key))

    assert response.status_code == 503
    assert response.json() == {"detail": "Store temporarily unavailable"}


def test_oversized_integers_are_client_errors(database: Database) -> None:
    async def _identity(request: Request) -> Principal:
        return Principal(user_id="u1", email="alice@ex.com")

    oversized = conference_key("u1", 2**70).urlsafe()

    with TestClient(create_app(database=database, identity=_identity)) as client:
        assert client.get(f"/conference/{oversized}").status_code == 404
        assert client.post(f"/conference/{oversized}/registration").status_code == 404
        assert client.delete(f"/conference/{oversized}/registration").status_code == 404
        assert client.put(f"/conference/{oversized}", json={"city": "Paris"}).status_code == 404

        query = client.post(
            "/queryConferences",
            json={"filters": [{"field": "month", "operator": ">", "value": 10**20}]},
        )
        assert query.status_code == 400

        created = client.post("/conference", json={"name": "X", "maxAttendees": 2**64})
        assert created.status_code == 400
