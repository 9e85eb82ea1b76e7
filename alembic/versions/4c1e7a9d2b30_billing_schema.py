"""billing schema

Revision ID: 4c1e7a9d2b30
Revises:
Create Date: 2026-10-19 10:00:00.000000
"""
from alembic import op
import sqlalchemy as sa


revision = "4c1e7a9d2b30"
down_revision = None
branch_labels = None
depends_on = None


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(12, 2), nullable=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def _address(kind: str) -> list[sa.Column]:
    return [
        sa.Column(f"{kind}_street", sa.String(length=255), nullable=True),
        sa.Column(f"{kind}_city", sa.String(length=100), nullable=True),
        sa.Column(f"{kind}_state", sa.String(length=100), nullable=True),
        sa.Column(f"{kind}_pincode", sa.String(length=20), nullable=True),
        sa.Column(f"{kind}_country", sa.String(length=100), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "business_owners",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("business_name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("business_phone", sa.String(length=50), nullable=True),
        sa.Column("business_email", sa.String(length=255), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("gstin", sa.String(length=15), nullable=True),
        sa.Column("pan_number", sa.String(length=10), nullable=True),
        sa.Column("company_reg_number", sa.String(length=100), nullable=True),
        sa.Column("website", sa.String(length=255), nullable=True),
        sa.Column("logo_url", sa.String(length=500), nullable=True),
        sa.Column("plan", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("is_locked", sa.Boolean(), nullable=False),
        sa.Column("tokens_valid_after", sa.DateTime(), nullable=True),
        sa.Column("last_admin_action", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_business_owners_phone", "business_owners", ["phone"])

    op.create_table(
        "business_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "owner_id",
            sa.Integer(),
            sa.ForeignKey("business_owners.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("owner_gstin", sa.String(length=15), nullable=True),
        sa.Column("owner_pan", sa.String(length=10), nullable=True),
        sa.Column("default_tax_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("default_tax_type", sa.String(length=20), nullable=False),
        sa.Column("default_payment_terms", sa.String(length=20), nullable=False),
        sa.Column("sales_invoice_prefix", sa.String(length=15), nullable=True),
        sa.Column("purchase_invoice_prefix", sa.String(length=15), nullable=True),
        sa.Column("quotation_invoice_prefix", sa.String(length=15), nullable=True),
        sa.Column("item_code_prefix", sa.String(length=10), nullable=False),
        sa.Column("part_number_prefix", sa.String(length=10), nullable=False),
        sa.Column("auto_generate_item_codes", sa.Boolean(), nullable=False),
        sa.Column("terms_and_conditions", sa.Text(), nullable=True),
        sa.Column("payment_instructions", sa.Text(), nullable=True),
        sa.Column("thank_you_message", sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "bank_accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "owner_id", sa.Integer(), sa.ForeignKey("business_owners.id"), nullable=False
        ),
        sa.Column("bank_name", sa.String(length=255), nullable=False),
        sa.Column("branch_name", sa.String(length=255), nullable=True),
        sa.Column("account_number", sa.String(length=50), nullable=False),
        sa.Column("ifsc_code", sa.String(length=11), nullable=True),
        sa.Column("account_type", sa.String(length=20), nullable=False),
        sa.Column("account_holder_name", sa.String(length=255), nullable=False),
        sa.Column("pan_card_number", sa.String(length=10), nullable=True),
        sa.Column("upi_id", sa.String(length=100), nullable=True),
        sa.Column("is_primary", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_bank_accounts_owner_id", "bank_accounts", ["owner_id"])

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "owner_id", sa.Integer(), sa.ForeignKey("business_owners.id"), nullable=False
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("gstin", sa.String(length=15), nullable=True),
        sa.Column("vendor_code", sa.String(length=50), nullable=True),
        sa.Column("customer_type", sa.String(length=20), nullable=False),
        sa.Column("payment_terms", sa.String(length=50), nullable=False),
        sa.Column("credit_limit", sa.Numeric(12, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_address("billing"),
        *_address("shipping"),
        *_timestamps(),
        sa.UniqueConstraint("owner_id", "phone", name="uq_customers_owner_phone"),
    )
    op.create_index("ix_customers_owner_id", "customers", ["owner_id"])

    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "owner_id", sa.Integer(), sa.ForeignKey("business_owners.id"), nullable=False
        ),
        sa.Column("item_code", sa.String(length=50), nullable=True),
        sa.Column("part_number", sa.String(length=50), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("unit", sa.String(length=20), nullable=False),
        sa.Column("selling_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("tax_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("hsn_code", sa.String(length=20), nullable=True),
        sa.Column("stock_quantity", sa.Numeric(12, 3), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("times_used", sa.Integer(), nullable=False),
        sa.Column("last_used_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("owner_id", "item_code", name="uq_items_owner_item_code"),
        sa.UniqueConstraint(
            "owner_id", "part_number", name="uq_items_owner_part_number"
        ),
    )
    op.create_index("ix_items_id", "items", ["id"])
    op.create_index("ix_items_owner_id", "items", ["owner_id"])

    op.create_table(
        "pricing_tiers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("items.id"), nullable=False),
        sa.Column("min_quantity", sa.Numeric(12, 3), nullable=False),
        sa.Column("max_quantity", sa.Numeric(12, 3), nullable=True),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
    )

    op.create_table(
        "counters",
        sa.Column("name", sa.String(length=150), primary_key=True),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )

    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "owner_id", sa.Integer(), sa.ForeignKey("business_owners.id"), nullable=False
        ),
        sa.Column(
            "customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=False
        ),
        sa.Column("invoice_number", sa.String(length=60), nullable=False, unique=True),
        sa.Column("invoice_type", sa.String(length=20), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("sent_date", sa.DateTime(), nullable=True),
        sa.Column("viewed_date", sa.DateTime(), nullable=True),
        sa.Column("paid_date", sa.DateTime(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("payment_status", sa.String(length=20), nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("customer_phone", sa.String(length=50), nullable=True),
        sa.Column("customer_email", sa.String(length=255), nullable=True),
        sa.Column("customer_gstin", sa.String(length=15), nullable=True),
        sa.Column("customer_vendor_code", sa.String(length=50), nullable=True),
        *_address("billing"),
        *_address("shipping"),
        sa.Column("same_as_shipping", sa.Boolean(), nullable=False),
        sa.Column("business_info", sa.JSON(), nullable=False),
        sa.Column("bank_details", sa.JSON(), nullable=False),
        sa.Column("authorization", sa.JSON(), nullable=False),
        sa.Column("invoice_footer", sa.JSON(), nullable=False),
        sa.Column("tax_type", sa.String(length=20), nullable=False),
        sa.Column("tax_rate", sa.Numeric(5, 2), nullable=False),
        _money("igst"),
        _money("cgst"),
        _money("sgst"),
        _money("subtotal"),
        _money("total_tax_amount"),
        sa.Column("discount_type", sa.String(length=20), nullable=False),
        _money("discount_value"),
        _money("discount_amount"),
        _money("transport_charges"),
        _money("other_charges"),
        _money("rounding_adjustment"),
        _money("final_amount"),
        _money("paid_amount"),
        _money("balance_amount"),
        sa.Column("computation_warnings", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("terms", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_invoices_owner_customer", "invoices", ["owner_id", "customer_id"])
    op.create_index(
        "ix_invoices_owner_invoice_date", "invoices", ["owner_id", "invoice_date"]
    )
    op.create_index("ix_invoices_owner_type", "invoices", ["owner_id", "invoice_type"])
    op.create_index("ix_invoices_owner_due_date", "invoices", ["owner_id", "due_date"])

    op.create_table(
        "invoice_lines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "invoice_id", sa.Integer(), sa.ForeignKey("invoices.id"), nullable=False
        ),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("items.id"), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("unit", sa.String(length=20), nullable=False),
        sa.Column("hsn_code", sa.String(length=20), nullable=False),
        sa.Column("quantity", sa.Numeric(12, 3), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("tax_rate", sa.Numeric(5, 2), nullable=False),
        _money("line_total"),
        _money("tax_amount"),
        _money("total_amount"),
    )

    op.create_table(
        "invoice_payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "invoice_id", sa.Integer(), sa.ForeignKey("invoices.id"), nullable=False
        ),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_at", sa.DateTime(), nullable=False),
        sa.Column("method", sa.String(length=30), nullable=True),
        sa.Column("reference", sa.String(length=100), nullable=True),
        sa.Column("note", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("invoice_payments")
    op.drop_table("invoice_lines")
    op.drop_index("ix_invoices_owner_due_date", table_name="invoices")
    op.drop_index("ix_invoices_owner_type", table_name="invoices")
    op.drop_index("ix_invoices_owner_invoice_date", table_name="invoices")
    op.drop_index("ix_invoices_owner_customer", table_name="invoices")
    op.drop_table("invoices")
    op.drop_table("counters")
    op.drop_table("pricing_tiers")
    op.drop_index("ix_items_owner_id", table_name="items")
    op.drop_index("ix_items_id", table_name="items")
    op.drop_table("items")
    op.drop_index("ix_customers_owner_id", table_name="customers")
    op.drop_table("customers")
    op.drop_index("ix_bank_accounts_owner_id", table_name="bank_accounts")
    op.drop_table("bank_accounts")
    op.drop_table("business_settings")
    op.drop_index("ix_business_owners_phone", table_name="business_owners")
    op.drop_table("business_owners")
