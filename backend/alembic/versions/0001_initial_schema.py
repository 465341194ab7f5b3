"""Organizations, branches, users, audit events and the petty cash ledger."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLE = sa.Enum("root", "admin", "cash_manager", "seller", name="user_role")
USER_STATUS = sa.Enum("active", "suspended", name="user_status")
DEPOSIT_STATUS = sa.Enum(
    "open", "closed", "pending_funding", name="petty_cash_deposit_status"
)
WITHDRAWAL_STATUS = sa.Enum(
    "pending",
    "partially_justified",
    "justified",
    "not_closed",
    name="petty_cash_withdrawal_status",
)


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
        ),
    ]


def _org_fk(ondelete: str = "CASCADE") -> sa.Column:
    return sa.Column(
        "organization_id",
        sa.Uuid(as_uuid=True),
        sa.ForeignKey("organizations.id", ondelete=ondelete),
        nullable=ondelete != "CASCADE",
    )


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        "branches",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(255)),
        sa.Column("phone_number", sa.String(32)),
        *_timestamps(),
        sa.UniqueConstraint("organization_id", "name", name="uq_branches_org_name"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column(
            "branch_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("branches.id", ondelete="SET NULL"),
        ),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=False),
        sa.Column("phone_number", sa.String(32)),
        sa.Column("role", USER_ROLE, nullable=False),
        sa.Column("status", USER_STATUS, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _org_fk("SET NULL"),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
        ),
        sa.Column("event_type", sa.String(120), nullable=False),
        sa.Column("description", sa.String(1024)),
        sa.Column("payload", sa.JSON()),
        sa.Column("ip_address", sa.String(64)),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "petty_cash_deposits",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column(
            "branch_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("branches.id", ondelete="SET NULL"),
        ),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("reference", sa.String(120)),
        sa.Column("deposit_date", sa.Date()),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("remaining_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", DEPOSIT_STATUS, nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.CheckConstraint("amount >= 0", name="deposit_amount_non_negative"),
        sa.CheckConstraint(
            "remaining_amount >= 0 AND remaining_amount <= amount",
            name="deposit_remaining_in_range",
        ),
    )
    op.create_index(
        "ix_petty_cash_deposits_org_branch",
        "petty_cash_deposits",
        ["organization_id", "branch_id"],
    )

    op.create_table(
        "petty_cash_withdrawals",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column(
            "deposit_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("petty_cash_deposits.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(255)),
        sa.Column("withdrawal_date", sa.Date()),
        sa.Column("amount_given", sa.Numeric(12, 2), nullable=False),
        sa.Column(
            "amount_justified", sa.Numeric(12, 2), nullable=False, server_default="0"
        ),
        sa.Column("status", WITHDRAWAL_STATUS, nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("amount_given > 0", name="withdrawal_amount_positive"),
        sa.CheckConstraint(
            "amount_justified >= 0 AND amount_justified <= amount_given",
            name="withdrawal_justified_in_range",
        ),
    )
    op.create_index(
        "ix_petty_cash_withdrawals_status_created",
        "petty_cash_withdrawals",
        ["status", "created_at"],
    )

    op.create_table(
        "petty_cash_spends",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column(
            "withdrawal_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("petty_cash_withdrawals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("motive", sa.String(64), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("ticket_url", sa.String(1024)),
        sa.Column("spend_date", sa.Date()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("amount > 0", name="spend_amount_positive"),
    )


def downgrade() -> None:
    op.drop_table("petty_cash_spends")
    op.drop_index(
        "ix_petty_cash_withdrawals_status_created", table_name="petty_cash_withdrawals"
    )
    op.drop_table("petty_cash_withdrawals")
    op.drop_index("ix_petty_cash_deposits_org_branch", table_name="petty_cash_deposits")
    op.drop_table("petty_cash_deposits")
    op.drop_table("audit_events")
    op.drop_table("users")
    op.drop_table("branches")
    op.drop_table("organizations")
    bind = op.get_bind()
    for enum_type in (WITHDRAWAL_STATUS, DEPOSIT_STATUS, USER_STATUS, USER_ROLE):
        enum_type.drop(bind, checkfirst=True)
