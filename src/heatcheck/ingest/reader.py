"""Read call dumps (JSON or CSV) and ingest them into the database."""

from __future__ import annotations

import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from heatcheck.storage.database import Database
from heatcheck.storage.models import RawCall, TeamMember
from heatcheck.storage.repository import Repository

log = logging.getLogger(__name__)

# Column names accepted for each field, first match wins
FIELD_ALIASES = {
    "id": ("id", "call_id", "message_id"),
    "analysis_text": ("analysis", "analysis_text"),
    "created_at": ("created_at", "date_created", "call_date"),
    "team_member_id": ("team_member_id", "member_id"),
    "team_member_name": ("team_member_name", "team_member", "member_name"),
    "contact_name": ("contact_name", "prospect_name"),
    "direction": ("direction",),
    "call_source": ("call_source",),
}

SUPPORTED_SUFFIXES = {".json", ".csv"}


def normalize_timestamp(value) -> str | None:
    """Parse an ISO-8601 timestamp and return it as UTC, second precision."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat(timespec="seconds")


def _pick(record: dict, field: str):
    for alias in FIELD_ALIASES[field]:
        value = record.get(alias)
        if value not in (None, ""):
            return value
    return None


def _load_records(filepath: Path) -> list[dict]:
    if filepath.suffix.lower() == ".json":
        data = json.loads(filepath.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("calls", [])
        if not isinstance(data, list):
            raise ValueError(f"Expected a list of calls in {filepath.name}")
        return [r for r in data if isinstance(r, dict)]
    with open(filepath, newline="", encoding="utf-8-sig") as f:
        return list(csv.DictReader(f))


def read_calls(filepath: Path) -> list[tuple[RawCall, str | None]]:
    """Parse one file into (call, team member name) pairs.

    Rows without an id or a usable timestamp are skipped.
    """
    if filepath.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Unsupported file type: {filepath.suffix}")

    calls = []
    for index, record in enumerate(_load_records(filepath)):
        call_id = _pick(record, "id")
        if call_id is None:
            log.warning("Skipping row %d in %s: no call id", index, filepath.name)
            continue

        created_at = normalize_timestamp(_pick(record, "created_at"))
        if created_at is None:
            log.warning("Skipping call %s in %s: missing or bad timestamp", call_id, filepath.name)
            continue

        member_id = _pick(record, "team_member_id")
        calls.append((
            RawCall(
                id=str(call_id),
                analysis_text=_pick(record, "analysis_text"),
                created_at=created_at,
                team_member_id=str(member_id) if member_id is not None else None,
                contact_name=_pick(record, "contact_name"),
                direction=_pick(record, "direction"),
                call_source=_pick(record, "call_source"),
            ),
            _pick(record, "team_member_name"),
        ))
    return calls


def ingest_path(db: Database, path: Path) -> dict:
    """Ingest a file or a directory of .json/.csv files.

    Returns counts of calls read, inserted and skipped as duplicates, plus
    how many assignments were recorded.
    """
    if path.is_dir():
        files = sorted(p for p in path.glob("**/*") if p.suffix.lower() in SUPPORTED_SUFFIXES)
        if not files:
            log.warning("No .json or .csv files found in %s", path)
    else:
        files = [path]

    repo = Repository(db)
    known_members = {m.id for m in repo.get_team_members()}
    counts = {"files": len(files), "read": 0, "inserted": 0, "duplicates": 0, "assigned": 0}

    for filepath in files:
        for call, member_name in read_calls(filepath):
            counts["read"] += 1
            if not repo.insert_call(call, commit=False):
                counts["duplicates"] += 1
                continue
            counts["inserted"] += 1

            member_id = call.team_member_id
            if member_id is None:
                continue
            if member_id not in known_members:
                if not member_name:
                    log.warning("Call %s names unknown team member %s; left unassigned", call.id, member_id)
                    continue
                repo.add_team_member(TeamMember(id=member_id, name=member_name))
                known_members.add(member_id)
            repo.assign_call(call.id, member_id, method="import", commit=False)
            counts["assigned"] += 1

    db.conn.commit()
    return counts
