"""001 – Initial schema: staff users, sessions, leave requests.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00
"""

from alembic import op

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

# Stored as VARCHAR(20); the ORM maps them with native_enum=False.
CHECKED_VALUES: list[tuple[str, str, list[str]]] = [
    ("leave_type", "ck_leave_requests_leave_type", ["Annual", "Sick", "Emergency"]),
    ("status", "ck_leave_requests_status", ["Pending", "Approved", "Rejected"]),
]


def _check(column: str, name: str, values: list[str]) -> str:
    vals = ", ".join(f"'{v}'" for v in values)
    return f"CONSTRAINT {name} CHECK ({column} IN ({vals}))"


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── 1. staff_users ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE staff_users (
            id            UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            email         VARCHAR(255) NOT NULL UNIQUE,
            display_name  VARCHAR(200),
            google_id     VARCHAR(100),
            is_active     BOOLEAN DEFAULT TRUE,
            created_at    TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 2. user_sessions ──────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE user_sessions (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            user_id      UUID NOT NULL REFERENCES staff_users(id) ON DELETE CASCADE,
            token_hash   VARCHAR(512) NOT NULL,
            ip_address   INET,
            user_agent   TEXT,
            expires_at   TIMESTAMPTZ NOT NULL,
            is_revoked   BOOLEAN DEFAULT FALSE,
            created_at   TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_user_sessions_token_hash ON user_sessions(token_hash)")
    op.execute("CREATE INDEX idx_user_sessions_user     ON user_sessions(user_id)")
    op.execute("CREATE INDEX idx_user_sessions_expires  ON user_sessions(expires_at)")

    # ── 3. leave_requests ─────────────────────────────────────────────────
    checks = ",\n            ".join(_check(*c) for c in CHECKED_VALUES)
    op.execute(f"""
        CREATE TABLE leave_requests (
            id             UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_name  VARCHAR(200) NOT NULL,
            staff_id       VARCHAR(50)  NOT NULL,
            leave_type     VARCHAR(20)  NOT NULL DEFAULT 'Annual',
            start_date     DATE NOT NULL,
            end_date       DATE NOT NULL,
            status         VARCHAR(20)  NOT NULL DEFAULT 'Pending',
            created_at     TIMESTAMPTZ DEFAULT NOW(),
            {checks}
        )
    """)
    # Duplicate-check lookup; not UNIQUE.
    op.execute("""
        CREATE INDEX ix_leave_requests_staff_dates
            ON leave_requests(staff_id, start_date, end_date)
    """)
    op.execute("CREATE INDEX idx_leave_requests_created ON leave_requests(created_at DESC)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    for t in ["leave_requests", "user_sessions", "staff_users"]:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    op.execute('DROP EXTENSION IF EXISTS "uuid-ossp"')
