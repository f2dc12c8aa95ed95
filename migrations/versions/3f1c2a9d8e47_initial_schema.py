"""initial_schema

Create the activity stream schema:
- Users (author lookup)
- User profiles (optional full names)
- Activity (append-only log; comments are nested-set numbered per thread)
- Activity meta (key/value rows per activity)

Revision ID: 3f1c2a9d8e47
Revises:
Create Date: 2026-10-18 10:12:04.518230

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d8e47"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # ========================================================================
    # USERS table
    # ========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("login", sa.String(60), nullable=False),
        sa.Column("nicename", sa.String(50), nullable=False),
        sa.Column("email", sa.String(100), nullable=True),
        sa.Column("display_name", sa.String(250), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_users_login", "users", ["login"])

    # ========================================================================
    # USER_PROFILES table
    # ========================================================================
    op.create_table(
        "user_profiles",
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("fullname", sa.String(250), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id"),
    )

    # ========================================================================
    # ACTIVITY table
    # ========================================================================
    op.create_table(
        "activity",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("component", sa.String(75), nullable=False),
        sa.Column("type", sa.String(75), nullable=False),
        sa.Column("action", sa.Text(), nullable=False, server_default=""),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("primary_link", sa.Text(), nullable=False, server_default=""),
        sa.Column("item_id", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column(
            "secondary_item_id", sa.BigInteger(), nullable=False, server_default="0"
        ),
        sa.Column("date_recorded", sa.DateTime(), nullable=False),
        sa.Column(
            "hide_sitewide", sa.Boolean(), nullable=False, server_default="false"
        ),
        sa.Column("mptt_left", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("mptt_right", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_spam", sa.Boolean(), nullable=False, server_default="false"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_activity_date_recorded", "activity", ["date_recorded"])
    op.create_index("idx_activity_user_id", "activity", ["user_id"])
    op.create_index("idx_activity_item_id", "activity", ["item_id"])
    op.create_index(
        "idx_activity_secondary_item_id", "activity", ["secondary_item_id"]
    )
    op.create_index("idx_activity_component", "activity", ["component"])
    op.create_index("idx_activity_type", "activity", ["type"])
    op.create_index("idx_activity_mptt_left", "activity", ["mptt_left"])
    op.create_index("idx_activity_mptt_right", "activity", ["mptt_right"])
    op.create_index("idx_activity_hide_sitewide", "activity", ["hide_sitewide"])
    op.create_index("idx_activity_is_spam", "activity", ["is_spam"])

    # ========================================================================
    # ACTIVITY_META table
    # ========================================================================
    op.create_table(
        "activity_meta",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("activity_id", sa.BigInteger(), nullable=False),
        sa.Column("meta_key", sa.String(255), nullable=True),
        sa.Column("meta_value", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["activity_id"], ["activity.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_activity_meta_activity_id", "activity_meta", ["activity_id"])
    op.create_index("idx_activity_meta_key", "activity_meta", ["meta_key"])


def downgrade() -> None:
    """Downgrade schema."""
    # Drop tables (in reverse order of dependencies)
    op.drop_table("activity_meta")
    op.drop_table("activity")
    op.drop_table("user_profiles")
    op.drop_table("users")
