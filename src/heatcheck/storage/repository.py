"""CRUD operations for the HeatCheck database."""

from __future__ import annotations

from typing import Optional

from heatcheck.storage.database import Database
from heatcheck.storage.models import RawCall, TeamMember


class Repository:
    """Database operations for HeatCheck."""

    def __init__(self, db: Database):
        self.db = db

    # ── Calls ──────────────────────────────────────────────────────

    def call_exists(self, call_id: str) -> bool:
        row = self.db.conn.execute(
            "SELECT 1 FROM calls WHERE id = ?", (call_id,)
        ).fetchone()
        return row is not None

    def insert_call(self, call: RawCall, commit: bool = True) -> bool:
        """Append a call. Returns False if a call with that id already exists."""
        cursor = self.db.conn.execute(
            """INSERT OR IGNORE INTO calls
               (id, analysis, contact_name, direction, call_source, created_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                call.id,
                call.analysis_text,
                call.contact_name,
                call.direction,
                call.call_source,
                call.created_at,
            ),
        )
        if commit:
            self.db.conn.commit()
        return cursor.rowcount == 1

    def get_call_count(self) -> int:
        row = self.db.conn.execute("SELECT COUNT(*) FROM calls").fetchone()
        return row[0]

    def get_calls(
        self,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> list[RawCall]:
        """Calls in created_at order, with their member assignment joined in."""
        clauses = []
        params = []
        if date_from:
            clauses.append("c.created_at >= ?")
            params.append(date_from)
        if date_to:
            clauses.append("c.created_at <= ?")
            params.append(date_to)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        rows = self.db.conn.execute(
            f"""SELECT c.*, a.team_member_id
                FROM calls c
                LEFT JOIN call_assignments a ON a.call_id = c.id
                {where}
                ORDER BY c.created_at, c.id""",
            params,
        ).fetchall()
        return [_row_to_call(r) for r in rows]

    def get_call_by_id(self, call_id: str) -> RawCall | None:
        row = self.db.conn.execute(
            """SELECT c.*, a.team_member_id
               FROM calls c
               LEFT JOIN call_assignments a ON a.call_id = c.id
               WHERE c.id = ?""",
            (call_id,),
        ).fetchone()
        return _row_to_call(row) if row else None

    # ── Team Members ───────────────────────────────────────────────

    def add_team_member(self, member: TeamMember) -> bool:
        cursor = self.db.conn.execute(
            """INSERT OR IGNORE INTO team_members (id, name, role, is_active)
               VALUES (?, ?, ?, ?)""",
            (member.id, member.name, member.role, int(member.is_active)),
        )
        self.db.conn.commit()
        return cursor.rowcount == 1

    def get_team_members(self, active_only: bool = False) -> list[TeamMember]:
        sql = "SELECT * FROM team_members"
        if active_only:
            sql += " WHERE is_active = 1"
        rows = self.db.conn.execute(sql + " ORDER BY name").fetchall()
        return [
            TeamMember(
                id=r["id"],
                name=r["name"],
                role=r["role"],
                is_active=bool(r["is_active"]),
            )
            for r in rows
        ]

    # ── Assignments ────────────────────────────────────────────────

    def assign_call(
        self,
        call_id: str,
        team_member_id: str,
        method: str = "manual",
        confidence: float | None = None,
        commit: bool = True,
    ):
        """Record (or replace) the member responsible for a call."""
        if not self.call_exists(call_id):
            raise ValueError(f"Unknown call: {call_id}")
        row = self.db.conn.execute(
            "SELECT 1 FROM team_members WHERE id = ?", (team_member_id,)
        ).fetchone()
        if row is None:
            raise ValueError(f"Unknown team member: {team_member_id}")

        self.db.conn.execute(
            """INSERT OR REPLACE INTO call_assignments
               (call_id, team_member_id, method, confidence)
               VALUES (?, ?, ?, ?)""",
            (call_id, team_member_id, method, confidence),
        )
        if commit:
            self.db.conn.commit()

    # ── Summary ────────────────────────────────────────────────────

    def get_summary(self) -> dict:
        """Counts for status displays."""
        total = self.get_call_count()
        analyzed = self.db.conn.execute(
            "SELECT COUNT(*) FROM calls WHERE analysis IS NOT NULL AND TRIM(analysis) != ''"
        ).fetchone()[0]
        assigned = self.db.conn.execute(
            "SELECT COUNT(*) FROM call_assignments"
        ).fetchone()[0]
        members = self.db.conn.execute(
            "SELECT COUNT(*) FROM team_members"
        ).fetchone()[0]
        span = self.db.conn.execute(
            "SELECT MIN(created_at), MAX(created_at) FROM calls"
        ).fetchone()
        return {
            "total_calls": total,
            "analyzed_calls": analyzed,
            "assigned_calls": assigned,
            "team_members": members,
            "first_call": span[0],
            "last_call": span[1],
        }


def _row_to_call(row) -> RawCall:
    return RawCall(
        id=row["id"],
        analysis_text=row["analysis"],
        created_at=row["created_at"],
        team_member_id=row["team_member_id"],
        contact_name=row["contact_name"],
        direction=row["direction"],
        call_source=row["call_source"],
    )
