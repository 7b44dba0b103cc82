"""Lightweight SQL migrations runner.

Applies .sql files in lexical order from the `migrations/` directory. Skips
rollback files and records applied filenames in a file-backed journal
(`migrations/_journal.json`) so the same migration is not reapplied.
In-memory databases run without a journal since their schema dies with the
process.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

JOURNAL_NAME = "_journal.json"


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        if "rollback" in p.name.lower():
            continue
        yield p


def _exec_sql_compat(conn: Connection, sql: str) -> None:
    """Execute a multi-statement SQL file.

    pysqlite refuses several statements in one execute(), so SQLite files are
    split on ';'. Other dialects receive the script as-is.
    """
    name = (conn.dialect.name or "").lower()
    if name != "sqlite":
        conn.exec_driver_sql(sql)
        return
    for stmt in sql.split(";"):
        lines = [ln for ln in stmt.splitlines() if not ln.strip().startswith("--")]
        s = "\n".join(lines).strip()
        if not s or s.upper() in {"BEGIN", "COMMIT", "END"}:
            continue
        conn.exec_driver_sql(s)


def _load_journal(journal_path: Path) -> list[dict]:
    if not journal_path.exists():
        return []
    try:
        data = json.loads(journal_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        logger.error("migration_journal_parse_failed path=%s", str(journal_path), exc_info=True)
        return []
    if not isinstance(data, list):
        return []
    return [e for e in data if isinstance(e, dict)]


def apply_migrations(
    engine: Engine,
    migrations_dir: str | os.PathLike[str] = "migrations",
    *,
    journal: bool = True,
) -> list[str]:
    """Apply pending migrations and return the filenames applied."""
    root = Path(migrations_dir)
    if not root.exists():
        logger.warning("migrations_dir_missing path=%s", str(root))
        return []

    journal_path = root / JOURNAL_NAME
    journal_entries = _load_journal(journal_path) if journal else []
    applied = {
        Path(e["filename"]).name for e in journal_entries if isinstance(e.get("filename"), str)
    }

    newly_applied: list[str] = []
    with engine.begin() as conn:
        for sql_path in _iter_sql_files(root):
            fname = sql_path.name
            if fname in applied:
                continue
            sql = sql_path.read_text(encoding="utf-8")
            if not sql.strip():
                continue
            _exec_sql_compat(conn, sql)
            newly_applied.append(fname)
            logger.info("migration.applied file=%s", fname)

            if journal:
                journal_entries.append(
                    {
                        "filename": f"migrations/{fname}",
                        # ISO-8601 UTC without fractional seconds
                        "applied_at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
                    }
                )
                _atomic_write_json(journal_path, journal_entries)
    return newly_applied


def _atomic_write_json(path: Path, content: list[dict]) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(content, ensure_ascii=False, indent=2), encoding="utf-8")
    os.replace(tmp_path, path)


__all__ = ["apply_migrations", "JOURNAL_NAME"]
