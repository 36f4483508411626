"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2025-01-01 00:00:00+00:00

Creates every table: users, videos, comments, tweets, likes, subscriptions,
playlists, playlist_videos and watch_history, with their unique
constraints, plus the PostgreSQL full-text index over video titles and
descriptions.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def cascade_fk(table: str, column: str = "owner_id", referred: str = "users") -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        [column],
        [f"{referred}.id"],
        name=f"fk_{table}_{column}_{referred}",
        ondelete="CASCADE",
    )


def upgrade() -> None:
    op.create_table(
        "users",
        *timestamps(),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("avatar", sa.String(length=500), nullable=False),
        sa.Column("cover_image", sa.String(length=500), server_default="", nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "videos",
        *timestamps(),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("video_file", sa.String(length=500), nullable=False),
        sa.Column("thumbnail", sa.String(length=500), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("duration", sa.Float(), nullable=False),
        sa.Column("views", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_public", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.CheckConstraint("views >= 0", name="ck_videos_views_non_negative"),
        cascade_fk("videos"),
        sa.PrimaryKeyConstraint("id", name="pk_videos"),
    )
    op.create_index("ix_videos_owner_id", "videos", ["owner_id"])
    op.create_index("ix_videos_is_public", "videos", ["is_public"])

    if op.get_bind().dialect.name == "postgresql":
        op.execute(
            "CREATE INDEX ix_videos_search_document ON videos "
            "USING gin (to_tsvector('english', title || ' ' || description))"
        )

    op.create_table(
        "comments",
        *timestamps(),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("video_id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        cascade_fk("comments", "video_id", "videos"),
        cascade_fk("comments"),
        sa.PrimaryKeyConstraint("id", name="pk_comments"),
    )
    op.create_index("ix_comments_video_id", "comments", ["video_id"])
    op.create_index("ix_comments_owner_id", "comments", ["owner_id"])

    op.create_table(
        "tweets",
        *timestamps(),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        cascade_fk("tweets"),
        sa.PrimaryKeyConstraint("id", name="pk_tweets"),
    )
    op.create_index("ix_tweets_owner_id", "tweets", ["owner_id"])

    op.create_table(
        "likes",
        *timestamps(),
        sa.Column(
            "target_type",
            sa.Enum("VIDEO", "COMMENT", "TWEET", name="liketarget"),
            nullable=False,
        ),
        sa.Column("target_id", sa.Integer(), nullable=False),
        sa.Column("liked_by_id", sa.Integer(), nullable=False),
        cascade_fk("likes", "liked_by_id"),
        sa.PrimaryKeyConstraint("id", name="pk_likes"),
        sa.UniqueConstraint(
            "target_type",
            "target_id",
            "liked_by_id",
            name="uq_likes_target_liked_by",
        ),
    )
    op.create_index("ix_likes_liked_by_id", "likes", ["liked_by_id"])
    op.create_index("ix_likes_target", "likes", ["target_type", "target_id"])

    op.create_table(
        "subscriptions",
        *timestamps(),
        sa.Column("channel_id", sa.Integer(), nullable=False),
        sa.Column("subscriber_id", sa.Integer(), nullable=False),
        cascade_fk("subscriptions", "channel_id"),
        cascade_fk("subscriptions", "subscriber_id"),
        sa.PrimaryKeyConstraint("id", name="pk_subscriptions"),
        sa.UniqueConstraint(
            "channel_id",
            "subscriber_id",
            name="uq_subscriptions_channel_subscriber",
        ),
    )
    op.create_index("ix_subscriptions_channel_id", "subscriptions", ["channel_id"])
    op.create_index("ix_subscriptions_subscriber_id", "subscriptions", ["subscriber_id"])

    op.create_table(
        "playlists",
        *timestamps(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        cascade_fk("playlists"),
        sa.PrimaryKeyConstraint("id", name="pk_playlists"),
    )
    op.create_index("ix_playlists_owner_id", "playlists", ["owner_id"])

    op.create_table(
        "playlist_videos",
        *timestamps(),
        sa.Column("playlist_id", sa.Integer(), nullable=False),
        sa.Column("video_id", sa.Integer(), nullable=False),
        cascade_fk("playlist_videos", "playlist_id", "playlists"),
        cascade_fk("playlist_videos", "video_id", "videos"),
        sa.PrimaryKeyConstraint("id", name="pk_playlist_videos"),
        sa.UniqueConstraint(
            "playlist_id",
            "video_id",
            name="uq_playlist_videos_playlist_video",
        ),
    )
    op.create_index("ix_playlist_videos_playlist_id", "playlist_videos", ["playlist_id"])
    op.create_index("ix_playlist_videos_video_id", "playlist_videos", ["video_id"])

    op.create_table(
        "watch_history",
        *timestamps(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("video_id", sa.Integer(), nullable=False),
        cascade_fk("watch_history", "user_id"),
        cascade_fk("watch_history", "video_id", "videos"),
        sa.PrimaryKeyConstraint("id", name="pk_watch_history"),
        sa.UniqueConstraint("user_id", "video_id", name="uq_watch_history_user_video"),
    )
    op.create_index("ix_watch_history_user_id", "watch_history", ["user_id"])


def downgrade() -> None:
    op.drop_table("watch_history")
    op.drop_table("playlist_videos")
    op.drop_table("playlists")
    op.drop_table("subscriptions")
    op.drop_table("likes")
    op.drop_table("tweets")
    op.drop_table("comments")
    op.execute("DROP INDEX IF EXISTS ix_videos_search_document")
    op.drop_table("videos")
    op.drop_table("users")
    sa.Enum(name="liketarget").drop(op.get_bind(), checkfirst=True)
