"""Shared test fixtures for HeatCheck."""

from __future__ import annotations

import json

import pytest

from heatcheck.storage.database import Database
from heatcheck.storage.models import RawCall, TeamMember
from heatcheck.storage.repository import Repository

FULL_ANALYSIS = (
    "HEATCHECK: 9/10\n"
    "TOP NEED: Insurance verification\n"
    "MAIN OBJECTION: Price is too high\n"
    "CALL OUTCOME: Contract signed"
)

LEGACY_ANALYSIS = (
    "HEATCHECK SCORE: 4\n"
    "PROSPECT'S NEEDS:\n"
    "* Faster scheduling\n"
    "OBJECTIONS:\n"
    "* None\n"
    "OUTCOME: Follow-up next week"
)

SIMPLE_ANALYSIS = "Medical consultation scheduling. Intent: Appointment scheduled. Sentiment: Positive."


@pytest.fixture
def tmp_db(tmp_path):
    """Create a temp database with schema initialized."""
    db_path = tmp_path / "test.db"
    with Database(db_path) as db:
        yield db


@pytest.fixture
def repo(tmp_db):
    """Repository backed by the temp database."""
    return Repository(tmp_db)


@pytest.fixture
def sample_members():
    return [
        TeamMember(id="m1", name="Dana Reyes", role="closer"),
        TeamMember(id="m2", name="Eli Park", role="setter"),
    ]


@pytest.fixture
def sample_calls():
    """Four calls: two assigned to m1, one to m2, one unassigned."""
    return [
        RawCall(
            id="c1",
            analysis_text=FULL_ANALYSIS,
            created_at="2025-01-15T10:00:00+00:00",
            team_member_id="m1",
            contact_name="Alice Smith",
            direction="inbound",
            call_source="ghl",
        ),
        RawCall(
            id="c2",
            analysis_text=LEGACY_ANALYSIS,
            created_at="2025-01-16T11:00:00+00:00",
            team_member_id="m2",
            contact_name="Bob Jones",
            direction="outbound",
            call_source="zoom",
        ),
        RawCall(
            id="c3",
            analysis_text=None,
            created_at="2025-01-17T09:30:00+00:00",
            contact_name="Carol White",
        ),
        RawCall(
            id="c4",
            analysis_text=SIMPLE_ANALYSIS,
            created_at="2025-01-18T14:00:00+00:00",
            team_member_id="m1",
        ),
    ]


def seed(db: Database, calls: list[RawCall], members: list[TeamMember]):
    """Insert members, calls and their assignments."""
    repo = Repository(db)
    for member in members:
        repo.add_team_member(member)
    for call in calls:
        repo.insert_call(call)
        if call.team_member_id:
            repo.assign_call(call.id, call.team_member_id)


@pytest.fixture
def populated_db(tmp_db, sample_calls, sample_members):
    """Database with the sample members and calls inserted."""
    seed(tmp_db, sample_calls, sample_members)
    return tmp_db


@pytest.fixture
def tmp_clients_json(tmp_path, monkeypatch):
    """Set up a temp clients.json for config tests."""
    registry = {
        "default": "testclient",
        "clients": {
            "testclient": {
                "name": "Test Client",
                "industry": "healthcare",
                "db_path": f"{tmp_path}/data/clients/testclient/heatcheck.db",
            }
        },
    }
    clients_json = tmp_path / "clients.json"
    clients_json.write_text(json.dumps(registry))

    import heatcheck.config as config_mod
    monkeypatch.setattr(config_mod, "CLIENTS_JSON_PATH", clients_json)
    monkeypatch.setattr(config_mod, "PROJECT_ROOT", tmp_path)
    return clients_json, tmp_path


@pytest.fixture
def seeded_client(tmp_clients_json, sample_calls, sample_members):
    """The registered test client with the sample data in its database."""
    _, tmp_path = tmp_clients_json
    db_path = tmp_path / "data" / "clients" / "testclient" / "heatcheck.db"
    with Database(db_path) as db:
        seed(db, sample_calls, sample_members)
    return db_path
