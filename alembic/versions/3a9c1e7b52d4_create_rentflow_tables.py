"""create rentflow tables

Revision ID: 3a9c1e7b52d4
Revises:
Create Date: 2026-10-18 09:12:41.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3a9c1e7b52d4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = False) -> list:
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False))
    cols.append(sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True))
    return cols


def _indexes(table: str, *columns: str) -> None:
    for col in ("id", "deleted_at") + columns:
        op.create_index(f"ix_{table}_{col}", table, [col], unique=False)


def upgrade() -> None:
    """Create every RentFlow table."""
    op.create_table(
        "tenants",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("property", sa.String(), nullable=False),
        sa.Column("rent", sa.Numeric(12, 2), nullable=False),
        sa.Column("join_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("avatar", sa.String(), nullable=False),
        sa.Column("father_name", sa.String(), nullable=True),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("nid_number", sa.String(), nullable=True),
        sa.Column("advance_deposit", sa.Numeric(12, 2), nullable=True),
        sa.Column("gas_meter_number", sa.String(), nullable=True),
        sa.Column("electric_meter_number", sa.String(), nullable=True),
        sa.Column("documents", sa.JSON(), nullable=False),
        *_timestamps(updated=True),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("tenants", "name", "property")

    op.create_table(
        "rent_entries",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("rent", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column("collected_by", sa.String(), nullable=True),
        sa.Column("payment_for_month", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("property", sa.String(), nullable=False),
        sa.Column("avatar", sa.String(), nullable=True),
        *_timestamps(updated=True),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("rent_entries", "tenant_id", "year", "month", "due_date")
    op.create_index(
        "uq_rent_entries_tenant_period",
        "rent_entries",
        ["tenant_id", "year", "month"],
        unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
    )

    op.create_table(
        "expenses",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("expenses", "date")

    op.create_table(
        "deposits",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("deposit_date", sa.Date(), nullable=False),
        sa.Column("receipt_url", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("deposits", "year")

    op.create_table(
        "notices",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("notices", "year")

    op.create_table(
        "work_details",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("assigned_to_id", sa.String(), nullable=True),
        sa.Column("product_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("worker_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("work_details")

    op.create_table(
        "zakat_transactions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("source_or_recipient", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("receipt_url", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("zakat_transactions", "transaction_date")

    op.create_table(
        "zakat_bank_details",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("bank_name", sa.String(), nullable=False),
        sa.Column("account_number", sa.String(), nullable=False),
        sa.Column("account_holder", sa.String(), nullable=True),
        sa.Column("logo_url", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("zakat_bank_details")

    op.create_table(
        "documents",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("file_url", sa.String(), nullable=False),
        sa.Column("file_type", sa.String(), nullable=True),
        sa.Column("file_name", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("documents", "category")

    theme_keys = [
        "primary",
        "table_header_background",
        "table_header_foreground",
        "table_footer_background",
        "mobile_nav_background",
        "mobile_nav_foreground",
    ]
    op.create_table(
        "property_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("house_name", sa.String(), nullable=True),
        sa.Column("house_address", sa.String(), nullable=True),
        sa.Column("bank_name", sa.String(), nullable=True),
        sa.Column("bank_account_number", sa.String(), nullable=True),
        sa.Column("bank_logo_url", sa.String(), nullable=True),
        sa.Column("owner_name", sa.String(), nullable=True),
        sa.Column("owner_photo_url", sa.String(), nullable=True),
        sa.Column("passcode", sa.String(), nullable=True),
        sa.Column("passcode_protection_enabled", sa.Boolean(), nullable=True),
        sa.Column("about_us", sa.Text(), nullable=True),
        sa.Column("contact_phone", sa.String(), nullable=True),
        sa.Column("contact_email", sa.String(), nullable=True),
        sa.Column("contact_address", sa.String(), nullable=True),
        sa.Column("footer_name", sa.String(), nullable=True),
        sa.Column("tenant_view_style", sa.String(), nullable=True),
        sa.Column("metadata_title", sa.String(), nullable=True),
        sa.Column("favicon_url", sa.String(), nullable=True),
        sa.Column("app_logo_url", sa.String(), nullable=True),
        sa.Column("date_format", sa.String(), nullable=True),
        sa.Column("currency_symbol", sa.String(), nullable=True),
        sa.Column("document_categories", sa.JSON(), nullable=True),
        sa.Column("whatsapp_reminders_enabled", sa.Boolean(), nullable=True),
        sa.Column("whatsapp_reminder_schedule", sa.JSON(), nullable=True),
        sa.Column("whatsapp_reminder_template", sa.Text(), nullable=True),
        *[sa.Column(f"theme_{k}", sa.String(), nullable=True) for k in theme_keys],
        *[sa.Column(f"theme_{k}_dark", sa.String(), nullable=True) for k in theme_keys],
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drop every RentFlow table."""
    op.drop_table("property_settings")
    for table in (
        "documents",
        "zakat_bank_details",
        "zakat_transactions",
        "work_details",
        "notices",
        "deposits",
        "expenses",
        "rent_entries",
        "tenants",
    ):
        op.drop_table(table)
