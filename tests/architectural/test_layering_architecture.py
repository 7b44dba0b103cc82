"""Architectural tests for module layering.

Static, AST-based checks. Application code is never imported or executed;
only files under the project root are read.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Iterable, List, Set

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[2]
PACKAGE_DIR = PROJECT_ROOT / "survey_service"
ROUTES_DIR = PACKAGE_DIR / "routes"
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"


# --------------------
# Helper utilities
# --------------------


def _parse(path: Path) -> ast.Module:
    try:
        return ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    except FileNotFoundError:
        pytest.fail(f"Expected file is missing: {path}")
    except SyntaxError as exc:
        pytest.fail(f"Syntax error in {path}: {exc}")


def _imported_modules(tree: ast.AST) -> Set[str]:
    """Return dotted module names referenced by import statements."""
    names: Set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            names.add(node.module)
    return names


def _string_constants(tree: ast.AST) -> Iterable[str]:
    for node in ast.walk(tree):
        if isinstance(node, ast.Constant) and isinstance(node.value, str):
            yield node.value


def _offending(modules: Set[str], prefixes: Iterable[str]) -> List[str]:
    return sorted(m for m in modules if any(m == p or m.startswith(p + ".") for p in prefixes))


# --------------------
# Tests
# --------------------


def test_aggregator_is_pure() -> None:
    """The aggregator must not reach the store, the web stack or the network."""
    tree = _parse(PACKAGE_DIR / "logic" / "aggregator.py")
    bad = _offending(
        _imported_modules(tree),
        ["sqlalchemy", "survey_service.db", "fastapi", "httpx", "logging", "survey_service.logic.repository_surveys"],
    )
    assert not bad, f"aggregator imports I/O modules: {bad}"


def test_routes_hold_no_sql() -> None:
    """Route handlers delegate persistence to the logic layer."""
    route_files = sorted(ROUTES_DIR.glob("*.py"))
    assert route_files, "no route modules found"
    for path in route_files:
        tree = _parse(path)
        bad = _offending(_imported_modules(tree), ["sqlalchemy", "survey_service.db.tables"])
        assert not bad, f"{path.name} imports persistence internals: {bad}"
        for literal in _string_constants(tree):
            upper = literal.upper()
            assert not any(kw in upper for kw in ("SELECT ", "INSERT INTO", "DELETE FROM")), (
                f"{path.name} embeds SQL: {literal!r}"
            )


def test_logic_layer_does_not_depend_on_http() -> None:
    for path in sorted((PACKAGE_DIR / "logic").glob("*.py")):
        bad = _offending(_imported_modules(_parse(path)), ["fastapi", "starlette", "survey_service.http", "survey_service.routes"])
        assert not bad, f"{path.name} depends on the HTTP layer: {bad}"


def test_only_store_module_talks_to_sqlalchemy_sessions() -> None:
    """Outside survey_service/db nothing imports SQLAlchemy directly."""
    for path in sorted(PACKAGE_DIR.rglob("*.py")):
        if path.parent.name == "db":
            continue
        bad = _offending(_imported_modules(_parse(path)), ["sqlalchemy"])
        assert not bad, f"{path.relative_to(PROJECT_ROOT)} imports SQLAlchemy: {bad}"


def test_schema_migration_declares_all_tables_with_cascade() -> None:
    sql_files = sorted(MIGRATIONS_DIR.glob("*.sql"))
    assert sql_files, "no migrations found"
    sql = "\n".join(p.read_text(encoding="utf-8") for p in sql_files).lower()
    for table in ("surveys", "questions", "question_options", "responses", "answers"):
        assert f"create table if not exists {table}" in sql, table
    assert sql.count("on delete cascade") >= 5
