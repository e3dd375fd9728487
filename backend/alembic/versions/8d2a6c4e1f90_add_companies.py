"""Add companies and link branches to them

Revision ID: 8d2a6c4e1f90
Revises: 3c9e1f0a7b21
Create Date: 2026-10-19 15:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8d2a6c4e1f90"
down_revision: Union[str, Sequence[str], None] = "3c9e1f0a7b21"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "companies",
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("company_code", sa.String(length=50), nullable=False),
        sa.Column("company_name", sa.String(length=150), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("state", sa.String(length=100), nullable=True),
        sa.Column("country", sa.String(length=100), nullable=True),
        sa.Column("postal_code", sa.String(length=20), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=150), nullable=True),
        sa.Column("website", sa.String(length=255), nullable=True),
        sa.Column("gstin", sa.String(length=20), nullable=True),
        sa.Column("pan", sa.String(length=20), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("company_id"),
        sa.UniqueConstraint("company_code"),
    )
    op.create_index(op.f("ix_companies_company_id"), "companies", ["company_id"], unique=False)

    op.add_column("branches", sa.Column("company_id", sa.Integer(), nullable=True))
    op.create_index(op.f("ix_branches_company_id"), "branches", ["company_id"], unique=False)
    op.create_foreign_key(
        "fk_branches_company_id", "branches", "companies", ["company_id"], ["company_id"]
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_constraint("fk_branches_company_id", "branches", type_="foreignkey")
    op.drop_index(op.f("ix_branches_company_id"), table_name="branches")
    op.drop_column("branches", "company_id")
    op.drop_index(op.f("ix_companies_company_id"), table_name="companies")
    op.drop_table("companies")
