"""Initial schema

Revision ID: 001
Revises: None
Create Date: 2024-06-10 00:00:00.000000+00:00

What:  Creates users, sessions, pos_locations, documents, commissions and
       notifications, with their enum types and indexes.

Rollback: downgrade() drops every table and enum type (destructive).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum(
    "superadmin", "certificador", "vecino", "usuario_final", "socios", "rrhh",
    name="user_role",
)
document_type = sa.Enum(
    "declaracion_jurada", "finiquito_laboral", "contrato_simple",
    name="document_type",
)
document_status = sa.Enum(
    "draft",
    "pending_verification",
    "pending_certification",
    "certified",
    "rejected",
    "cancelled",
    name="document_status",
)
notification_type = sa.Enum("system", "email", "whatsapp", name="notification_type")


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("rut", sa.String(12), nullable=True, unique=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )

    op.create_table(
        "sessions",
        sa.Column("sid", sa.String(64), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(64),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _timestamp("expire"),
        _timestamp("created_at"),
    )
    op.create_index("idx_sessions_expire", "sessions", ["expire"])

    op.create_table(
        "pos_locations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("owner_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "commission_rate",
            sa.Numeric(5, 2),
            nullable=False,
            server_default=sa.text("40.00"),
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_pos_locations_owner_id", "pos_locations", ["owner_id"])

    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type", document_type, nullable=False),
        sa.Column("status", document_status, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column("submitter_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("certificador_id", sa.String(64), sa.ForeignKey("users.id"), nullable=True),
        sa.Column(
            "pos_location_id", sa.Integer(), sa.ForeignKey("pos_locations.id"), nullable=True
        ),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "is_identity_verified", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("verification_data", sa.JSON(), nullable=True),
        sa.Column("digital_signature", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("qr_validation_code", sa.String(64), nullable=False, unique=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        _timestamp("certified_at", nullable=True),
    )
    op.create_index("ix_documents_submitter_id", "documents", ["submitter_id"])
    op.create_index("ix_documents_certificador_id", "documents", ["certificador_id"])
    op.create_index(
        "idx_documents_status_created_at", "documents", ["status", "created_at"]
    )

    op.create_table(
        "commissions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "document_id",
            sa.Integer(),
            sa.ForeignKey("documents.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("vecino_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("certificador_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("vecino_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("certificador_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("admin_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
    )
    op.create_index("idx_commissions_is_paid", "commissions", ["is_paid"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", notification_type, nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
    )
    op.create_index(
        "idx_notifications_user_created_at", "notifications", ["user_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("commissions")
    op.drop_table("documents")
    op.drop_table("pos_locations")
    op.drop_table("sessions")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (notification_type, document_status, document_type, user_role):
        enum_type.drop(bind, checkfirst=True)
