from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "0001_create_schema"
down_revision = None
branch_labels = None
depends_on = None


def _id_column() -> sa.Column:
    return sa.Column("id", sa.String(length=36), primary_key=True)


def _created_at_column() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    bind = op.get_bind()
    tables = set(inspect(bind).get_table_names())

    if "tenants" not in tables:
        op.create_table(
            "tenants",
            _id_column(),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("slug", sa.String(), nullable=False),
            sa.Column("owner_id", sa.String(length=36), nullable=True),
            _created_at_column(),
        )
        op.create_index("ix_tenants_slug", "tenants", ["slug"], unique=True)
        op.create_index("ix_tenants_owner_id", "tenants", ["owner_id"], unique=False)

    if "profiles" not in tables:
        op.create_table(
            "profiles",
            _id_column(),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("email", sa.String(), nullable=True),
            sa.Column("tenant_id", sa.String(length=36), sa.ForeignKey("tenants.id"), nullable=True),
            _created_at_column(),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_profiles_email", "profiles", ["email"], unique=False)
        op.create_index("ix_profiles_tenant_id", "profiles", ["tenant_id"], unique=False)

    if "user_roles" not in tables:
        op.create_table(
            "user_roles",
            _id_column(),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("role", sa.String(length=20), nullable=False),
            sa.Column("tenant_id", sa.String(length=36), sa.ForeignKey("tenants.id"), nullable=True),
        )
        op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"], unique=True)
        op.create_index("ix_user_roles_tenant_id", "user_roles", ["tenant_id"], unique=False)

    if "orders" not in tables:
        op.create_table(
            "orders",
            _id_column(),
            sa.Column("tenant_id", sa.String(length=36), sa.ForeignKey("tenants.id"), nullable=False),
            sa.Column("seller_id", sa.String(length=36), nullable=True),
            sa.Column("seller_name", sa.String(), nullable=True),
            sa.Column("customer_name", sa.String(), nullable=False),
            sa.Column("amount_paid", sa.Numeric(12, 2), nullable=False),
            _created_at_column(),
        )
        op.create_index("ix_orders_tenant_id", "orders", ["tenant_id"], unique=False)
        op.create_index("ix_orders_seller_id", "orders", ["seller_id"], unique=False)
        op.create_index("ix_orders_created_at", "orders", ["created_at"], unique=False)

    if "receivables" not in tables:
        op.create_table(
            "receivables",
            _id_column(),
            sa.Column("tenant_id", sa.String(length=36), sa.ForeignKey("tenants.id"), nullable=True),
            sa.Column("order_id", sa.String(length=36), nullable=False),
            sa.Column("customer_id", sa.String(length=36), nullable=True),
            sa.Column("customer_name", sa.String(), nullable=False),
            sa.Column("description", sa.String(), nullable=False),
            sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
            sa.Column("installment_number", sa.Integer(), nullable=False),
            sa.Column("total_installments", sa.Integer(), nullable=False),
            sa.Column("amount", sa.Numeric(12, 2), nullable=False),
            sa.Column("due_date", sa.Date(), nullable=False),
            sa.Column("paid", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("payment_method", sa.String(length=50), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            _created_at_column(),
        )
        op.create_index("ix_receivables_tenant_id", "receivables", ["tenant_id"], unique=False)
        op.create_index("ix_receivables_order_id", "receivables", ["order_id"], unique=False)
        op.create_index("ix_receivables_due_date", "receivables", ["due_date"], unique=False)

    if "company_settings" not in tables:
        op.create_table(
            "company_settings",
            _id_column(),
            sa.Column("tenant_id", sa.String(length=36), sa.ForeignKey("tenants.id"), nullable=False),
            sa.Column("name", sa.String(), nullable=True),
            sa.Column("cnpj", sa.String(length=32), nullable=True),
            sa.Column("address", sa.String(), nullable=True),
            sa.Column("phone", sa.String(length=32), nullable=True),
            sa.Column("phone2", sa.String(length=32), nullable=True),
            sa.Column("email", sa.String(), nullable=True),
            sa.Column("logo_url", sa.String(), nullable=True),
            sa.Column("login_header_color", sa.String(length=32), nullable=True),
            sa.Column("uses_stock", sa.Boolean(), nullable=True),
            sa.Column("low_stock_threshold", sa.Integer(), nullable=True),
            sa.Column("print_logo_on_receipts", sa.Boolean(), nullable=True),
            sa.Column("auto_print_on_sale", sa.Boolean(), nullable=True),
            sa.Column("notify_low_stock", sa.Boolean(), nullable=True),
            sa.Column("notify_new_sales", sa.Boolean(), nullable=True),
            sa.Column("notify_pending_payments", sa.Boolean(), nullable=True),
            sa.Column("notify_order_status", sa.Boolean(), nullable=True),
            sa.Column("uses_commission", sa.Boolean(), nullable=True),
            sa.Column("commission_percentage", sa.Numeric(5, 2), nullable=True),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_company_settings_tenant_id", "company_settings", ["tenant_id"], unique=True)

    if "customers" not in tables:
        op.create_table(
            "customers",
            _id_column(),
            sa.Column("tenant_id", sa.String(length=36), sa.ForeignKey("tenants.id"), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("doc", sa.String(length=32), nullable=True),
            sa.Column("phone", sa.String(length=32), nullable=True),
            sa.Column("email", sa.String(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            _created_at_column(),
        )
        op.create_index("ix_customers_tenant_id", "customers", ["tenant_id"], unique=False)

    if "products" not in tables:
        op.create_table(
            "products",
            _id_column(),
            sa.Column("tenant_id", sa.String(length=36), sa.ForeignKey("tenants.id"), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("category", sa.String(), nullable=False),
            sa.Column("subcategory", sa.String(), nullable=True),
            sa.Column("price", sa.Numeric(12, 2), nullable=False),
            sa.Column("stock", sa.Integer(), nullable=False),
            sa.Column("type", sa.String(length=20), nullable=False),
            sa.Column("pricing_mode", sa.String(length=20), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            _created_at_column(),
        )
        op.create_index("ix_products_tenant_id", "products", ["tenant_id"], unique=False)

    if "password_recovery_tokens" not in tables:
        op.create_table(
            "password_recovery_tokens",
            _id_column(),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("email", sa.String(), nullable=False),
            sa.Column("token_hash", sa.String(length=64), nullable=False),
            sa.Column("redirect_to", sa.Text(), nullable=False),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
            _created_at_column(),
        )
        op.create_index(
            "ix_password_recovery_tokens_token_hash",
            "password_recovery_tokens",
            ["token_hash"],
            unique=True,
        )
        op.create_index(
            "ix_password_recovery_tokens_user_id",
            "password_recovery_tokens",
            ["user_id"],
            unique=False,
        )


def downgrade() -> None:
    for table_name in (
        "password_recovery_tokens",
        "products",
        "customers",
        "company_settings",
        "receivables",
        "orders",
        "user_roles",
        "profiles",
        "tenants",
    ):
        op.drop_table(table_name)
