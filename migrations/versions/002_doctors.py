"""Doctors table and appointments.doctor_id foreign key.

Revision ID: 002_doctors
Revises: 001_initial
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "002_doctors"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "doctors",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("specialty", sa.String(), nullable=False),
        sa.Column("color", sa.String(), nullable=False, server_default="#4299E1"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_doctors_tenant_id"), "doctors", ["tenant_id"], unique=False)
    op.create_foreign_key(
        "fk_appointments_doctor_id_doctors", "appointments", "doctors", ["doctor_id"], ["id"]
    )


def downgrade() -> None:
    op.drop_constraint("fk_appointments_doctor_id_doctors", "appointments", type_="foreignkey")
    op.drop_index(op.f("ix_doctors_tenant_id"), table_name="doctors")
    op.drop_table("doctors")
