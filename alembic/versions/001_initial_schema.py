"""001 – Initial schema: profiles, leave balances, leave requests, enums.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000+07:00
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

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("user_role", ["admin", "anggota"]),
    ("leave_status", ["Menunggu", "Disetujui", "Ditolak"]),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')
    op.execute('CREATE EXTENSION IF NOT EXISTS "pg_trgm"')

    # ── Enum types ────────────────────────────────────────────────────────
    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. profiles ───────────────────────────────────────────────────────
    # id mirrors the identity provider's user id, so no default
    op.execute("""
        CREATE TABLE profiles (
            id          UUID PRIMARY KEY,
            role        user_role NOT NULL DEFAULT 'anggota',
            name        VARCHAR(150),
            id_pjlp     VARCHAR(50) UNIQUE,
            email       VARCHAR(255),
            phone       VARCHAR(20),
            avatar_url  VARCHAR(500),
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX idx_profiles_role ON profiles(role)")
    op.execute("""
        CREATE INDEX idx_profiles_name_trgm
            ON profiles USING gin (name gin_trgm_ops)
    """)

    # ── 2. leave_balances ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_balances (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            user_id     UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            year        INTEGER NOT NULL,
            total_days  INTEGER NOT NULL DEFAULT 12,
            used_days   INTEGER NOT NULL DEFAULT 0,
            updated_at  TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_leave_balance_user_year UNIQUE (user_id, year)
        )
    """)

    # ── 3. leave_requests ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_requests (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            user_id         UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            title           VARCHAR(200) NOT NULL,
            reason          TEXT NOT NULL,
            start_date      DATE NOT NULL,
            end_date        DATE NOT NULL,
            duration        INTEGER NOT NULL,
            status          leave_status NOT NULL DEFAULT 'Menunggu',
            is_read_by_user BOOLEAN NOT NULL DEFAULT TRUE,
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_leave_request_date_range CHECK (end_date >= start_date)
        )
    """)
    op.execute("""
        CREATE INDEX ix_leave_requests_user_start
            ON leave_requests(user_id, start_date)
    """)
    op.execute("""
        CREATE INDEX ix_leave_requests_status_created
            ON leave_requests(status, created_at)
    """)
    op.execute("""
        CREATE INDEX idx_leave_req_unread
            ON leave_requests(user_id) WHERE is_read_by_user = FALSE
    """)


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    for t in ("leave_requests", "leave_balances", "profiles"):
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)
