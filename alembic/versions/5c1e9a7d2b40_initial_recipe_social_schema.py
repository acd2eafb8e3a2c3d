"""initial recipe social schema

Revision ID: 5c1e9a7d2b40
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5c1e9a7d2b40"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
        ),
    ]


def _user_fk(name: str = "user_id") -> sa.Column:
    return sa.Column(name, sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=True)


def _recipe_fk() -> sa.Column:
    return sa.Column(
        "recipe_id", sa.Integer(), sa.ForeignKey("recipes.id"), nullable=False, index=True
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("username", sa.String(50), nullable=True, unique=True, index=True),
        sa.Column("image", sa.String(1024), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "recipes",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("slug", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(100), nullable=False, index=True),
        sa.Column("ingredients", sa.JSON(), nullable=False),
        sa.Column("steps", sa.JSON(), nullable=False),
        sa.Column("cover_image", sa.String(512), nullable=True),
        sa.Column("video_url", sa.String(1024), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft", index=True),
        sa.Column("publish_at", sa.DateTime(timezone=True), nullable=True),
        _user_fk(),
        sa.Column("forked_from_id", sa.Integer(), sa.ForeignKey("recipes.id"), nullable=True),
        sa.Column("servings", sa.Integer(), nullable=True),
        sa.Column("prep_time", sa.Integer(), nullable=True),
        sa.Column("cook_time", sa.Integer(), nullable=True),
        sa.Column("difficulty", sa.String(10), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_recipes_status_created", "recipes", ["status", "created_at"])
    op.create_index(
        "ix_recipes_category_status_created", "recipes", ["category", "status", "created_at"]
    )
    # Full-text search over titles
    op.execute(
        "CREATE INDEX ix_recipes_title_fts ON recipes "
        "USING gin (to_tsvector('english', title))"
    )

    op.create_table(
        "collections",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("name", sa.String(50), nullable=False),
        _user_fk(),
        *_timestamps(),
    )

    op.create_table(
        "likes",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _recipe_fk(),
        _user_fk(),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "recipe_id", name="uq_like_user_recipe"),
    )
    op.create_index("ix_likes_created_at", "likes", ["created_at"])

    op.create_table(
        "bookmarks",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _recipe_fk(),
        _user_fk(),
        sa.Column(
            "collection_id",
            sa.Integer(),
            sa.ForeignKey("collections.id"),
            nullable=True,
            index=True,
        ),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "recipe_id", name="uq_bookmark_user_recipe"),
    )

    op.create_table(
        "ratings",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _recipe_fk(),
        _user_fk(),
        sa.Column("value", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "recipe_id", name="uq_rating_user_recipe"),
        sa.CheckConstraint("value BETWEEN 1 AND 5", name="ck_rating_value_range"),
    )

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _recipe_fk(),
        _user_fk(),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "follows",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _user_fk("follower_id"),
        _user_fk("following_id"),
        *_timestamps(),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),
        sa.CheckConstraint("follower_id <> following_id", name="ck_follow_not_self"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _user_fk(),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("actor_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("recipe_id", sa.Integer(), sa.ForeignKey("recipes.id"), nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_notifications_user_read", "notifications", ["user_id", "read"])

    op.create_table(
        "recipe_views",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _recipe_fk(),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            index=True,
        ),
    )

    op.create_table(
        "presence",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _recipe_fk(),
        _user_fk(),
        sa.Column(
            "last_seen",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            index=True,
        ),
        sa.UniqueConstraint("user_id", "recipe_id", name="uq_presence_user_recipe"),
    )


def downgrade() -> None:
    op.drop_table("presence")
    op.drop_table("recipe_views")
    op.drop_index("ix_notifications_user_read", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("follows")
    op.drop_table("comments")
    op.drop_table("ratings")
    op.drop_table("bookmarks")
    op.drop_index("ix_likes_created_at", table_name="likes")
    op.drop_table("likes")
    op.drop_table("collections")
    op.execute("DROP INDEX IF EXISTS ix_recipes_title_fts")
    op.drop_index("ix_recipes_category_status_created", table_name="recipes")
    op.drop_index("ix_recipes_status_created", table_name="recipes")
    op.drop_table("recipes")
    op.drop_table("users")
