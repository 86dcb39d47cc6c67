"""initial_content_schema

Revision ID: 3c1f0a7d2b54
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3c1f0a7d2b54"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _nested_set(table: str, id_type: sa.types.TypeEngine) -> list[sa.SchemaItem]:
    """Interval columns and checks shared by every hierarchical table."""
    return [
        sa.Column("parent_id", id_type, nullable=True),
        sa.Column("lft", sa.Integer(), nullable=False),
        sa.Column("rgt", sa.Integer(), nullable=False),
        sa.Column("depth", sa.Integer(), nullable=False),
        sa.Column("ordering", sa.Integer(), nullable=False),
        sa.CheckConstraint("lft < rgt", name=op.f(f"ck_{table}_interval_bounds")),
        sa.CheckConstraint("depth >= 0", name=op.f(f"ck_{table}_depth_non_negative")),
        sa.ForeignKeyConstraint(
            ["parent_id"],
            [f"{table}.id"],
            name=op.f(f"fk_{table}_parent_id_{table}"),
            ondelete="CASCADE",
        ),
    ]


def _nested_set_indexes(table: str) -> None:
    for column in ("parent_id", "lft", "rgt"):
        op.create_index(op.f(f"ix_{table}_{column}"), table, [column], unique=False)


def _owner_columns() -> list[sa.Column]:
    return [
        sa.Column("owner_type", sa.String(length=20), nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("group", sa.String(length=50), nullable=False, server_default="default"),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
    ]


def _owner_index(table: str) -> None:
    op.create_index(
        f"ix_{table}_owner",
        table,
        ["owner_type", "owner_id", "group", "sort_order"],
        unique=False,
    )


def upgrade() -> None:
    """Create forest lock, hierarchy, post and association tables."""
    # Forest version rows
    op.create_table(
        "nested_set_forests",
        sa.Column("forest", sa.String(length=100), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("forest", name=op.f("pk_nested_set_forests")),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_nested_set("categories", sa.Integer()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_categories")),
        sa.UniqueConstraint("name", name="uq_categories_name"),
        sa.UniqueConstraint("slug", name="uq_categories_slug"),
    )
    op.create_index(op.f("ix_categories_slug"), "categories", ["slug"], unique=False)
    _nested_set_indexes("categories")

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("excerpt", sa.String(length=500), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=True),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["category_id"],
            ["categories.id"],
            name=op.f("fk_posts_category_id_categories"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_posts")),
        sa.UniqueConstraint("slug", name="uq_posts_slug"),
    )
    for column in ("slug", "status", "author_id", "category_id"):
        op.create_index(op.f(f"ix_posts_{column}"), "posts", [column], unique=False)

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        *_nested_set("comments", sa.Integer()),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["post_id"],
            ["posts.id"],
            name=op.f("fk_comments_post_id_posts"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_comments")),
    )
    for column in ("post_id", "user_id", "status"):
        op.create_index(op.f(f"ix_comments_{column}"), "comments", [column], unique=False)
    _nested_set_indexes("comments")

    op.create_table(
        "menus",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("icon", sa.String(length=100), nullable=True),
        sa.Column("url", sa.String(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_nested_set("menus", sa.Uuid()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_menus")),
    )
    _nested_set_indexes("menus")

    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("slug", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=True),
        sa.Column("color", sa.String(length=7), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_tags")),
        sa.UniqueConstraint("name", name="uq_tags_name"),
        sa.UniqueConstraint("slug", name="uq_tags_slug"),
    )
    op.create_index(op.f("ix_tags_name"), "tags", ["name"], unique=False)
    op.create_index(op.f("ix_tags_type"), "tags", ["type"], unique=False)

    op.create_table(
        "taggables",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tag_id", sa.Integer(), nullable=False),
        *_owner_columns(),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["tag_id"],
            ["tags.id"],
            name=op.f("fk_taggables_tag_id_tags"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_taggables")),
        sa.UniqueConstraint(
            "owner_type", "owner_id", "tag_id", "group", name="uq_taggables_owner_attachable"
        ),
    )
    op.create_index(op.f("ix_taggables_tag_id"), "taggables", ["tag_id"], unique=False)
    _owner_index("taggables")

    op.create_table(
        "media",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("mime_type", sa.String(length=100), nullable=False),
        sa.Column("size", sa.BigInteger(), nullable=False),
        sa.Column("disk", sa.String(length=20), nullable=False),
        sa.Column("path", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("size > 0", name=op.f("ck_media_size_positive")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_media")),
    )
    op.create_index(op.f("ix_media_mime_type"), "media", ["mime_type"], unique=False)

    op.create_table(
        "mediables",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("media_id", sa.Integer(), nullable=False),
        *_owner_columns(),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["media_id"],
            ["media.id"],
            name=op.f("fk_mediables_media_id_media"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_mediables")),
        sa.UniqueConstraint(
            "owner_type", "owner_id", "media_id", "group", name="uq_mediables_owner_attachable"
        ),
    )
    op.create_index(op.f("ix_mediables_media_id"), "mediables", ["media_id"], unique=False)
    _owner_index("mediables")

    op.create_table(
        "contents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("content_type", sa.String(length=20), nullable=False),
        *_owner_columns(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_contents")),
    )
    _owner_index("contents")


def downgrade() -> None:
    """Drop all content tables in reverse dependency order."""
    for table in (
        "contents",
        "mediables",
        "media",
        "taggables",
        "tags",
        "menus",
        "comments",
        "posts",
        "categories",
        "nested_set_forests",
    ):
        op.drop_table(table)
