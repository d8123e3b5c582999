"""symptom logs and doctor invitations

Revision ID: 8c3f2d6e1a57
Revises: 5b1e7c2a9d40
Create Date: 2026-10-18 09:30:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8c3f2d6e1a57"
down_revision: Union[str, Sequence[str], None] = "5b1e7c2a9d40"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "symptom_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("symptom_type", sa.String(), nullable=False),
        sa.Column("severity", sa.String(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_symptom_logs_user_id_users"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_symptom_logs")),
    )
    op.create_index(op.f("ix_symptom_logs_id"), "symptom_logs", ["id"], unique=False)
    op.create_index(op.f("ix_symptom_logs_user_id"), "symptom_logs", ["user_id"], unique=False)

    op.create_table(
        "doctor_invitations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("doctor_id", sa.Integer(), nullable=False),
        sa.Column("invite_code", sa.String(), nullable=False),
        sa.Column("invite_type", sa.String(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("max_uses", sa.Integer(), nullable=False),
        sa.Column("current_uses", sa.Integer(), nullable=False),
        sa.Column("used_by", sa.Integer(), nullable=True),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["doctor_id"], ["users.id"], name=op.f("fk_doctor_invitations_doctor_id_users"), ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["used_by"], ["users.id"], name=op.f("fk_doctor_invitations_used_by_users"), ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_doctor_invitations")),
        sa.UniqueConstraint("invite_code", name=op.f("uq_doctor_invitations_invite_code")),
    )
    op.create_index(op.f("ix_doctor_invitations_id"), "doctor_invitations", ["id"], unique=False)
    op.create_index(op.f("ix_doctor_invitations_doctor_id"), "doctor_invitations", ["doctor_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_doctor_invitations_doctor_id"), table_name="doctor_invitations")
    op.drop_index(op.f("ix_doctor_invitations_id"), table_name="doctor_invitations")
    op.drop_table("doctor_invitations")
    op.drop_index(op.f("ix_symptom_logs_user_id"), table_name="symptom_logs")
    op.drop_index(op.f("ix_symptom_logs_id"), table_name="symptom_logs")
    op.drop_table("symptom_logs")
