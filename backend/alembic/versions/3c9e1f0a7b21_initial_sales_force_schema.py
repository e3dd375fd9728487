"""Initial sales force schema

Revision ID: 3c9e1f0a7b21
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c9e1f0a7b21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True):
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True)]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True))
    return cols


def _money(name: str, nullable: bool = False):
    return sa.Column(name, sa.Numeric(precision=14, scale=2), nullable=nullable)


def _document_line_columns():
    return [
        sa.Column("line_no", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("brand_id", sa.Integer(), nullable=True),
        sa.Column("quantity", sa.Numeric(precision=12, scale=3), nullable=False),
        sa.Column("unit_price", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("discount_percentage", sa.Numeric(precision=5, scale=2), nullable=False),
        _money("discount_amount"),
        sa.Column("tax_percentage", sa.Numeric(precision=5, scale=2), nullable=False),
        _money("tax_amount"),
        _money("line_total"),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "branches",
        sa.Column("branch_id", sa.Integer(), nullable=False),
        sa.Column("branch_code", sa.String(length=50), nullable=False),
        sa.Column("branch_name", sa.String(length=150), nullable=False),
        sa.Column("address_line_1", sa.String(length=255), nullable=True),
        sa.Column("address_line_2", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("state", sa.String(length=100), nullable=True),
        sa.Column("pincode", sa.String(length=20), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("branch_id"),
        sa.UniqueConstraint("branch_code"),
    )
    op.create_index(op.f("ix_branches_branch_id"), "branches", ["branch_id"], unique=False)

    op.create_table(
        "app_users",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("mobile_no", sa.String(length=20), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("password", sa.String(length=150), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("branch_id", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["branch_id"], ["branches.branch_id"]),
        sa.PrimaryKeyConstraint("user_id"),
        sa.UniqueConstraint("mobile_no", name="uq_app_users_mobile_no"),
    )
    op.create_index(op.f("ix_app_users_user_id"), "app_users", ["user_id"], unique=False)

    op.create_table(
        "brands",
        sa.Column("brand_id", sa.Integer(), nullable=False),
        sa.Column("brand_code", sa.String(length=50), nullable=False),
        sa.Column("brand_name", sa.String(length=150), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("brand_id"),
        sa.UniqueConstraint("brand_code"),
    )
    op.create_index(op.f("ix_brands_brand_id"), "brands", ["brand_id"], unique=False)

    op.create_table(
        "routes",
        sa.Column("route_id", sa.Integer(), nullable=False),
        sa.Column("route_code", sa.String(length=50), nullable=False),
        sa.Column("route_name", sa.String(length=150), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("route_id"),
        sa.UniqueConstraint("route_code"),
    )
    op.create_index(op.f("ix_routes_route_id"), "routes", ["route_id"], unique=False)

    op.create_table(
        "customers",
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("customer_code", sa.String(length=50), nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("shop_name", sa.String(length=255), nullable=True),
        sa.Column("owner_name", sa.String(length=255), nullable=True),
        sa.Column("customer_type", sa.String(length=50), nullable=False),
        sa.Column("mobile_no", sa.String(length=20), nullable=True),
        sa.Column("phone_no_2", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("gst_no", sa.String(length=30), nullable=True),
        sa.Column("billing_address_1", sa.String(length=255), nullable=True),
        sa.Column("billing_address_2", sa.String(length=255), nullable=True),
        sa.Column("billing_address_3", sa.String(length=255), nullable=True),
        sa.Column("billing_city", sa.String(length=100), nullable=True),
        sa.Column("district", sa.String(length=100), nullable=True),
        sa.Column("latitude", sa.Numeric(precision=10, scale=7), nullable=True),
        sa.Column("longitude", sa.Numeric(precision=10, scale=7), nullable=True),
        sa.Column("image_url_1", sa.String(length=500), nullable=True),
        sa.Column("image_url_2", sa.String(length=500), nullable=True),
        sa.Column("image_url_3", sa.String(length=500), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["app_users.user_id"]),
        sa.PrimaryKeyConstraint("customer_id"),
        sa.UniqueConstraint("customer_code"),
    )
    op.create_index(op.f("ix_customers_customer_id"), "customers", ["customer_id"], unique=False)
    op.create_index(op.f("ix_customers_customer_name"), "customers", ["customer_name"], unique=False)
    op.create_index(op.f("ix_customers_mobile_no"), "customers", ["mobile_no"], unique=False)

    op.create_table(
        "products",
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("product_code", sa.String(length=50), nullable=False),
        sa.Column("product_name", sa.String(length=255), nullable=False),
        sa.Column("brand_id", sa.Integer(), nullable=True),
        sa.Column("category", sa.String(length=150), nullable=True),
        sa.Column("unit_of_measure", sa.String(length=20), nullable=False),
        sa.Column("hsn_code", sa.String(length=20), nullable=True),
        sa.Column("gst_rate", sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column("qty_in_ltr", sa.Numeric(precision=10, scale=3), nullable=True),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("bulk_upload_ref", sa.String(length=30), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["brand_id"], ["brands.brand_id"]),
        sa.PrimaryKeyConstraint("product_id"),
        sa.UniqueConstraint("product_code"),
    )
    op.create_index(op.f("ix_products_product_id"), "products", ["product_id"], unique=False)
    op.create_index(op.f("ix_products_product_name"), "products", ["product_name"], unique=False)
    op.create_index(op.f("ix_products_bulk_upload_ref"), "products", ["bulk_upload_ref"], unique=False)

    op.create_table(
        "product_prices",
        sa.Column("price_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("customer_type", sa.String(length=50), nullable=False),
        sa.Column("price", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("discount_percentage", sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column("effective_from", sa.Date(), nullable=False),
        sa.Column("effective_to", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.product_id"]),
        sa.PrimaryKeyConstraint("price_id"),
    )
    op.create_index(op.f("ix_product_prices_price_id"), "product_prices", ["price_id"], unique=False)
    op.create_index(op.f("ix_product_prices_product_id"), "product_prices", ["product_id"], unique=False)

    op.create_table(
        "route_customer_mappings",
        sa.Column("mapping_id", sa.Integer(), nullable=False),
        sa.Column("route_id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.customer_id"]),
        sa.ForeignKeyConstraint(["route_id"], ["routes.route_id"]),
        sa.PrimaryKeyConstraint("mapping_id"),
    )
    op.create_index(
        op.f("ix_route_customer_mappings_mapping_id"), "route_customer_mappings", ["mapping_id"], unique=False
    )
    op.create_index(
        op.f("ix_route_customer_mappings_customer_id"), "route_customer_mappings", ["customer_id"], unique=False
    )

    op.create_table(
        "user_route_mappings",
        sa.Column("mapping_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("route_id", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["route_id"], ["routes.route_id"]),
        sa.ForeignKeyConstraint(["user_id"], ["app_users.user_id"]),
        sa.PrimaryKeyConstraint("mapping_id"),
        sa.UniqueConstraint("user_id", "route_id", name="uq_user_route_mappings_user_route"),
    )
    op.create_index(op.f("ix_user_route_mappings_mapping_id"), "user_route_mappings", ["mapping_id"], unique=False)

    op.create_table(
        "sale_order_headers",
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("order_no", sa.String(length=40), nullable=False),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("branch_id", sa.Integer(), nullable=True),
        sa.Column("route_id", sa.Integer(), nullable=True),
        sa.Column("field_staff_id", sa.Integer(), nullable=True),
        sa.Column("order_type", sa.String(length=50), nullable=True),
        sa.Column("payment_type", sa.String(length=50), nullable=True),
        sa.Column("mode_of_transport", sa.String(length=50), nullable=True),
        sa.Column("order_status", sa.String(length=20), nullable=False),
        _money("total_amount"),
        _money("discount_amount"),
        _money("tax_amount"),
        _money("net_amount"),
        sa.Column("remarks", sa.String(length=500), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["branch_id"], ["branches.branch_id"]),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.customer_id"]),
        sa.ForeignKeyConstraint(["field_staff_id"], ["app_users.user_id"]),
        sa.ForeignKeyConstraint(["route_id"], ["routes.route_id"]),
        sa.PrimaryKeyConstraint("order_id"),
    )
    op.create_index(op.f("ix_sale_order_headers_order_id"), "sale_order_headers", ["order_id"], unique=False)
    op.create_index(op.f("ix_sale_order_headers_order_no"), "sale_order_headers", ["order_no"], unique=False)

    op.create_table(
        "sale_order_details",
        sa.Column("detail_id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=False),
        *_document_line_columns(),
        sa.Column("notes", sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(["brand_id"], ["brands.brand_id"]),
        sa.ForeignKeyConstraint(["order_id"], ["sale_order_headers.order_id"]),
        sa.ForeignKeyConstraint(["product_id"], ["products.product_id"]),
        sa.PrimaryKeyConstraint("detail_id"),
    )
    op.create_index(op.f("ix_sale_order_details_detail_id"), "sale_order_details", ["detail_id"], unique=False)
    op.create_index(op.f("ix_sale_order_details_order_id"), "sale_order_details", ["order_id"], unique=False)

    op.create_table(
        "sales_invoice_headers",
        sa.Column("invoice_id", sa.Integer(), nullable=False),
        sa.Column("invoice_no", sa.String(length=50), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=True),
        sa.Column("order_no", sa.String(length=40), nullable=True),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("branch_id", sa.Integer(), nullable=True),
        sa.Column("route_id", sa.Integer(), nullable=True),
        sa.Column("field_staff_id", sa.Integer(), nullable=True),
        sa.Column("invoice_status", sa.String(length=20), nullable=False),
        sa.Column("payment_status", sa.String(length=20), nullable=False),
        _money("total_amount"),
        _money("discount_amount"),
        _money("tax_amount"),
        _money("net_amount"),
        sa.Column("bulk_upload_ref", sa.String(length=30), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["branch_id"], ["branches.branch_id"]),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.customer_id"]),
        sa.ForeignKeyConstraint(["field_staff_id"], ["app_users.user_id"]),
        sa.ForeignKeyConstraint(["order_id"], ["sale_order_headers.order_id"]),
        sa.ForeignKeyConstraint(["route_id"], ["routes.route_id"]),
        sa.PrimaryKeyConstraint("invoice_id"),
    )
    op.create_index(op.f("ix_sales_invoice_headers_invoice_id"), "sales_invoice_headers", ["invoice_id"], unique=False)
    op.create_index(op.f("ix_sales_invoice_headers_invoice_no"), "sales_invoice_headers", ["invoice_no"], unique=False)
    op.create_index(
        op.f("ix_sales_invoice_headers_bulk_upload_ref"), "sales_invoice_headers", ["bulk_upload_ref"], unique=False
    )

    op.create_table(
        "sales_invoice_details",
        sa.Column("detail_id", sa.Integer(), nullable=False),
        sa.Column("invoice_id", sa.Integer(), nullable=False),
        *_document_line_columns(),
        sa.ForeignKeyConstraint(["brand_id"], ["brands.brand_id"]),
        sa.ForeignKeyConstraint(["invoice_id"], ["sales_invoice_headers.invoice_id"]),
        sa.ForeignKeyConstraint(["product_id"], ["products.product_id"]),
        sa.PrimaryKeyConstraint("detail_id"),
    )
    op.create_index(op.f("ix_sales_invoice_details_detail_id"), "sales_invoice_details", ["detail_id"], unique=False)
    op.create_index(op.f("ix_sales_invoice_details_invoice_id"), "sales_invoice_details", ["invoice_id"], unique=False)

    op.create_table(
        "collections",
        sa.Column("collection_id", sa.Integer(), nullable=False),
        sa.Column("collection_no", sa.String(length=40), nullable=False),
        sa.Column("collection_date", sa.Date(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("branch_id", sa.Integer(), nullable=True),
        sa.Column("route_id", sa.Integer(), nullable=True),
        sa.Column("field_staff_id", sa.Integer(), nullable=True),
        _money("amount"),
        sa.Column("payment_mode", sa.String(length=20), nullable=False),
        sa.Column("payment_reference", sa.String(length=100), nullable=True),
        sa.Column("cheque_no", sa.String(length=50), nullable=True),
        sa.Column("cheque_date", sa.Date(), nullable=True),
        sa.Column("bank_name", sa.String(length=150), nullable=True),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("image_uploaded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("collection_status", sa.String(length=20), nullable=False),
        sa.Column("collected_by", sa.Integer(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["branch_id"], ["branches.branch_id"]),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.customer_id"]),
        sa.ForeignKeyConstraint(["field_staff_id"], ["app_users.user_id"]),
        sa.ForeignKeyConstraint(["route_id"], ["routes.route_id"]),
        sa.PrimaryKeyConstraint("collection_id"),
    )
    op.create_index(op.f("ix_collections_collection_id"), "collections", ["collection_id"], unique=False)
    op.create_index(op.f("ix_collections_collection_no"), "collections", ["collection_no"], unique=False)

    op.create_table(
        "collection_lines",
        sa.Column("line_id", sa.Integer(), nullable=False),
        sa.Column("collection_id", sa.Integer(), nullable=False),
        sa.Column("invoice_no", sa.String(length=50), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=True),
        _money("invoice_amount"),
        _money("received_amount"),
        _money("balance_amount"),
        sa.Column("remarks", sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(["collection_id"], ["collections.collection_id"]),
        sa.PrimaryKeyConstraint("line_id"),
    )
    op.create_index(op.f("ix_collection_lines_line_id"), "collection_lines", ["line_id"], unique=False)
    op.create_index(op.f("ix_collection_lines_collection_id"), "collection_lines", ["collection_id"], unique=False)

    op.create_table(
        "daily_stock",
        sa.Column("stock_id", sa.Integer(), nullable=False),
        sa.Column("branch_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=12, scale=3), nullable=False),
        sa.Column("uploaded_date", sa.Date(), nullable=False),
        sa.Column("uploaded_by", sa.Integer(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["branch_id"], ["branches.branch_id"]),
        sa.ForeignKeyConstraint(["product_id"], ["products.product_id"]),
        sa.PrimaryKeyConstraint("stock_id"),
    )
    op.create_index(op.f("ix_daily_stock_stock_id"), "daily_stock", ["stock_id"], unique=False)

    op.create_table(
        "age_wise_outstanding",
        sa.Column("outstanding_id", sa.Integer(), nullable=False),
        sa.Column("as_on_date", sa.Date(), nullable=False),
        sa.Column("branch_id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        _money("dr_amount"),
        _money("cr_amount"),
        _money("balance"),
        _money("less_than_45"),
        _money("greater_than_45"),
        _money("greater_than_60"),
        _money("greater_than_90"),
        _money("greater_than_120"),
        sa.Column("uploaded_by", sa.Integer(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["branch_id"], ["branches.branch_id"]),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.customer_id"]),
        sa.PrimaryKeyConstraint("outstanding_id"),
    )
    op.create_index(op.f("ix_age_wise_outstanding_outstanding_id"), "age_wise_outstanding", ["outstanding_id"], unique=False)

    op.create_table(
        "bulk_upload_refs",
        sa.Column("bulk_ref_id", sa.Integer(), nullable=False),
        sa.Column("reference_no", sa.String(length=30), nullable=False),
        sa.Column("upload_type", sa.String(length=50), nullable=False),
        sa.Column("total_records", sa.Integer(), nullable=False),
        sa.Column("success_records", sa.Integer(), nullable=False),
        sa.Column("failed_records", sa.Integer(), nullable=False),
        sa.Column("error_log", sa.JSON(), nullable=False),
        sa.Column("uploaded_by", sa.Integer(), nullable=True),
        sa.Column("file_name", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("bulk_ref_id"),
    )
    op.create_index(op.f("ix_bulk_upload_refs_bulk_ref_id"), "bulk_upload_refs", ["bulk_ref_id"], unique=False)
    op.create_index(op.f("ix_bulk_upload_refs_reference_no"), "bulk_upload_refs", ["reference_no"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        "bulk_upload_refs",
        "age_wise_outstanding",
        "daily_stock",
        "collection_lines",
        "collections",
        "sales_invoice_details",
        "sales_invoice_headers",
        "sale_order_details",
        "sale_order_headers",
        "user_route_mappings",
        "route_customer_mappings",
        "product_prices",
        "products",
        "customers",
        "routes",
        "brands",
        "app_users",
        "branches",
    ):
        op.drop_table(table)
