"""Initial schema: accounts and trips.

Revision ID: 001
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── accounts ──────────────────────────────────────────────────────
    op.create_table(
        "accounts",
        sa.Column("username", sa.String(64), primary_key=True),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column(
            "role",
            sa.Enum("driver", "admin", name="role"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_accounts_role", "accounts", ["role"])

    # ── trips ─────────────────────────────────────────────────────────
    op.create_table(
        "trips",
        sa.Column("code", sa.String(16), primary_key=True),
        sa.Column(
            "service_tier",
            sa.Enum("city", "outstation", name="servicetier"),
            nullable=False,
        ),
        sa.Column(
            "state",
            sa.Enum("pending", "active", "completed", name="tripstate"),
            nullable=False,
            server_default="pending",
        ),
        # Not a foreign key: trips outlive removed driver accounts
        sa.Column("driver_id", sa.String(64), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("billed_amount", sa.Integer, nullable=True),
        sa.Column("night_surcharge", sa.Integer, nullable=True),
        sa.Column(
            "issued_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "ended_at IS NULL OR ended_at >= started_at",
            name="ck_trips_end_after_start",
        ),
    )
    op.create_index("idx_trips_state", "trips", ["state"])
    op.create_index("idx_trips_driver_state", "trips", ["driver_id", "state"])


def downgrade() -> None:
    op.drop_index("idx_trips_driver_state", table_name="trips")
    op.drop_index("idx_trips_state", table_name="trips")
    op.drop_table("trips")
    op.drop_index("idx_accounts_role", table_name="accounts")
    op.drop_table("accounts")
    op.execute("DROP TYPE IF EXISTS tripstate")
    op.execute("DROP TYPE IF EXISTS servicetier")
    op.execute("DROP TYPE IF EXISTS role")
