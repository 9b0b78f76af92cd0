from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Optional

import pandas as pd

from rangecore.data.storage import Database
from rangecore.domain.models import DrillTemplate
from rangecore.exceptions import NotFoundError, ValidationError


class TemplateStore:
    """
    Persistence for team and personal drill templates.
    Library templates live in code and are never written here.
    """

    def __init__(self, db: Database):
        self.db = db
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        with self.db._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS drill_templates (
                    template_id TEXT PRIMARY KEY,
                    team_id TEXT,
                    source TEXT NOT NULL,
                    created_by TEXT,
                    drill_type TEXT NOT NULL,
                    name TEXT NOT NULL,
                    template_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
            cur.execute("CREATE INDEX IF NOT EXISTS idx_templates_team ON drill_templates (team_id);")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_templates_owner ON drill_templates (created_by);")
            conn.commit()

    def save(self, template: DrillTemplate) -> DrillTemplate:
        if template.is_read_only:
            raise ValidationError(f"Library template {template.id!r} cannot be stored", param="source")

        now = datetime.now(UTC).isoformat()
        with self.db._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT created_at FROM drill_templates WHERE template_id = ?", (template.id,))
            existing = cur.fetchone()
            created_at = existing[0] if existing else now
            cur.execute(
                """
                INSERT OR REPLACE INTO drill_templates
                    (template_id, team_id, source, created_by, drill_type, name, template_json, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    template.id,
                    template.team_id,
                    template.source,
                    template.created_by,
                    template.drill_type.value,
                    template.name,
                    template.model_dump_json(),
                    created_at,
                    now,
                ),
            )
            conn.commit()
        return template

    def get(self, template_id: str) -> DrillTemplate:
        with self.db._connect() as conn:
            row = conn.execute(
                "SELECT template_json FROM drill_templates WHERE template_id = ?",
                (template_id,),
            ).fetchone()
        if not row:
            raise NotFoundError(f"Unknown template: {template_id!r}")
        return DrillTemplate.model_validate_json(row[0])

    def list_for_team(self, team_id: str) -> list[DrillTemplate]:
        return self._list("team_id = ?", [team_id])

    def list_personal(self, created_by: str) -> list[DrillTemplate]:
        return self._list("team_id IS NULL AND created_by = ?", [created_by])

    def _list(self, where: str, params: list[Any]) -> list[DrillTemplate]:
        query = f"SELECT template_json FROM drill_templates WHERE {where} ORDER BY created_at DESC, name"
        with self.db._connect() as conn:
            df = pd.read_sql_query(query, conn, params=params)

        if df.empty:
            return []
        return [DrillTemplate.model_validate_json(raw) for raw in df["template_json"]]

    def delete(self, template_id: str, team_id: Optional[str] = None) -> None:
        query = "DELETE FROM drill_templates WHERE template_id = ?"
        params: list[Any] = [template_id]
        if team_id:
            query += " AND team_id = ?"
            params.append(team_id)
        with self.db._connect() as conn:
            cur = conn.cursor()
            cur.execute(query, params)
            conn.commit()
            deleted = cur.rowcount
        if not deleted:
            raise NotFoundError(f"Unknown template: {template_id!r}")

