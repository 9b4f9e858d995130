"""SQLAlchemy table definitions for recipe discussions.

They match the schema defined in Alembic migrations. Column types are kept
generic so the same tables run on PostgreSQL and SQLite.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    text,
)

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# COMMENTS TABLE
# ============================================================================
# parent_id has no foreign key: with the orphan delete policy a reply
# outlives its parent.
comments_table = Table(
    "comments",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("recipe_id", String(64), nullable=False),
    Column("author_id", String(64), nullable=False),
    Column("author_display", String(255), nullable=False),
    Column("author_avatar", Text, nullable=True),
    Column("text", Text, nullable=False),
    Column("rating", Integer, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("parent_id", String(64), nullable=True),
    Column("is_owner_reply", Boolean, nullable=False, default=False),
    # Insert order; breaks created_at ties. Rows written elsewhere default to 0
    Column("seq", Integer, nullable=False, server_default=text("0")),
    CheckConstraint(
        "rating IS NULL OR (rating >= 1 AND rating <= 5)",
        name="check_rating_range",
    ),
    CheckConstraint(
        "parent_id IS NULL OR rating IS NULL",
        name="check_reply_unrated",
    ),
)

Index("idx_comments_recipe_created", comments_table.c.recipe_id, comments_table.c.created_at)
Index("idx_comments_parent_id", comments_table.c.parent_id)

# ============================================================================
# RECIPE RATINGS TABLE (denormalized summary per recipe)
# ============================================================================
recipe_ratings_table = Table(
    "recipe_ratings",
    metadata,
    Column("recipe_id", String(64), primary_key=True),
    Column("average_rating", Float, nullable=False, default=0.0),
    Column("total_ratings", Integer, nullable=False, default=0),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)
