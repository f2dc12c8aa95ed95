"""SQLAlchemy table definitions for feedline.

These table definitions are used with SQLAlchemy Core.
They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    false,
)

# Metadata object for all tables
metadata = MetaData()

# SQLite only auto-increments INTEGER primary keys
_Id = BigInteger().with_variant(Integer, "sqlite")

# ============================================================================
# ACTIVITY TABLE
# ============================================================================
activity_table = Table(
    "activity",
    metadata,
    Column("id", _Id, primary_key=True, autoincrement=True),
    Column("user_id", _Id, nullable=False, server_default="0"),
    Column("component", String(75), nullable=False),
    Column("type", String(75), nullable=False),
    Column("action", Text, nullable=False, server_default=""),
    Column("content", Text, nullable=False, server_default=""),
    Column("primary_link", Text, nullable=False, server_default=""),
    Column("item_id", _Id, nullable=False, server_default="0"),
    Column("secondary_item_id", _Id, nullable=False, server_default="0"),
    Column("date_recorded", DateTime, nullable=False),
    Column("hide_sitewide", Boolean, nullable=False, server_default=false()),
    Column("mptt_left", Integer, nullable=False, server_default="0"),
    Column("mptt_right", Integer, nullable=False, server_default="0"),
    Column("is_spam", Boolean, nullable=False, server_default=false()),
)

Index("idx_activity_date_recorded", activity_table.c.date_recorded)
Index("idx_activity_user_id", activity_table.c.user_id)
Index("idx_activity_item_id", activity_table.c.item_id)
Index("idx_activity_secondary_item_id", activity_table.c.secondary_item_id)
Index("idx_activity_component", activity_table.c.component)
Index("idx_activity_type", activity_table.c.type)
Index("idx_activity_mptt_left", activity_table.c.mptt_left)
Index("idx_activity_mptt_right", activity_table.c.mptt_right)
Index("idx_activity_hide_sitewide", activity_table.c.hide_sitewide)
Index("idx_activity_is_spam", activity_table.c.is_spam)

# ============================================================================
# ACTIVITY META TABLE
# ============================================================================
activity_meta_table = Table(
    "activity_meta",
    metadata,
    Column("id", _Id, primary_key=True, autoincrement=True),
    Column(
        "activity_id",
        _Id,
        ForeignKey("activity.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("meta_key", String(255), nullable=True),
    Column("meta_value", Text, nullable=True),
)

Index("idx_activity_meta_activity_id", activity_meta_table.c.activity_id)
Index("idx_activity_meta_key", activity_meta_table.c.meta_key)

# ============================================================================
# USERS TABLE (author lookup)
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", _Id, primary_key=True, autoincrement=True),
    Column("login", String(60), nullable=False),
    Column("nicename", String(50), nullable=False),
    Column("email", String(100), nullable=True),
    Column("display_name", String(250), nullable=True),
)

Index("idx_users_login", users_table.c.login)

# ============================================================================
# USER PROFILES TABLE (optional full names)
# ============================================================================
user_profiles_table = Table(
    "user_profiles",
    metadata,
    Column(
        "user_id",
        _Id,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("fullname", String(250), nullable=False),
)
