"""SQLAlchemy Core table definitions mirroring migrations/001_survey_schema.sql.

Used by the store client to build queries; DDL is owned by the migrations.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Column, ForeignKey, Integer, MetaData, String, Table, Text

metadata = MetaData()

surveys = Table(
    "surveys", metadata,
    Column("id", String, primary_key=True),
    Column("title", Text, nullable=False),
    Column("description", Text, nullable=True),
    Column("owner_id", String, nullable=True),
    Column("created_at", String, nullable=False),
)

questions = Table(
    "questions", metadata,
    Column("id", String, primary_key=True),
    Column("survey_id", String, ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False),
    Column("question_text", Text, nullable=False),
    Column("question_type", String, nullable=False),
    Column("order_index", Integer, nullable=False),
    Column("allow_multiple", Boolean, nullable=False, default=False),
)

question_options = Table(
    "question_options", metadata,
    Column("id", String, primary_key=True),
    Column("question_id", String, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False),
    Column("option_text", Text, nullable=False),
    Column("order_index", Integer, nullable=False),
)

responses = Table(
    "responses", metadata,
    Column("id", String, primary_key=True),
    Column("survey_id", String, ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False),
    Column("created_at", String, nullable=False),
)

answers = Table(
    "answers", metadata,
    Column("id", String, primary_key=True),
    Column("response_id", String, ForeignKey("responses.id", ondelete="CASCADE"), nullable=False),
    Column("question_id", String, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False),
    Column("answer_text", Text, nullable=True),
    Column("selected_option_id", String, ForeignKey("question_options.id", ondelete="CASCADE"), nullable=True),
)

TABLES: dict[str, Table] = {t.name: t for t in (surveys, questions, question_options, responses, answers)}

__all__ = [
    "metadata",
    "surveys",
    "questions",
    "question_options",
    "responses",
    "answers",
    "TABLES",
]
