from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.String(length=64), nullable=True),
        sa.Column("name", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("custody_onshore", sa.Numeric(16, 2), nullable=False, server_default="0"),
        sa.Column("custody_offshore", sa.Numeric(16, 2), nullable=False, server_default="0"),
        sa.Column("custody_total", sa.Numeric(16, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_clients_owner_id", "clients", ["owner_id"], unique=False)

    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.String(length=64), nullable=True),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("month", sa.Integer(), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("direction", sa.String(length=16), nullable=False, server_default="inflow"),
        sa.Column("category", sa.String(length=32), nullable=False, server_default="net-new-money"),
        sa.Column("source_kind", sa.String(length=16), nullable=False, server_default="manual"),
        sa.Column("source_record_id", sa.String(length=64), nullable=True),
        sa.Column("source_ref", sa.String(length=128), nullable=True),
        sa.Column("amount", sa.Numeric(16, 2), nullable=False),
        sa.Column("custody_bucket", sa.String(length=16), nullable=True),
        sa.Column("notes", sa.String(length=256), nullable=True),
        sa.Column("cancelled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_ledger_entries_owner_id", "ledger_entries", ["owner_id"], unique=False)
    op.create_index("ix_ledger_entries_date", "ledger_entries", ["date"], unique=False)
    op.create_index("ix_ledger_entries_source_ref", "ledger_entries", ["source_ref"], unique=False)

    op.create_table(
        "prospects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.String(length=64), nullable=True),
        sa.Column("name", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("realized_amount", sa.Numeric(16, 2), nullable=True),
        sa.Column("realized_date", sa.Date(), nullable=True),
        sa.Column("realized_category", sa.String(length=32), nullable=False, server_default="net-new-money"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="new"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_prospects_owner_id", "prospects", ["owner_id"], unique=False)

    op.create_table(
        "offers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.String(length=64), nullable=True),
        sa.Column("asset_name", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("asset_class", sa.String(length=64), nullable=False, server_default="Outros"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("commission_mode", sa.String(length=16), nullable=False, server_default="roa"),
        sa.Column("roa_percent", sa.Numeric(12, 6), nullable=False, server_default="0.02"),
        sa.Column("revenue_fixed", sa.Numeric(16, 2), nullable=False, server_default="0"),
        sa.Column("repass_percent", sa.Numeric(12, 6), nullable=False, server_default="0.25"),
        sa.Column("ir_percent", sa.Numeric(12, 6), nullable=False, server_default="0.19"),
        sa.Column("reservation_date", sa.Date(), nullable=True),
        sa.Column("settlement_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_offers_owner_id", "offers", ["owner_id"], unique=False)
    op.create_index("ix_offers_settlement_date", "offers", ["settlement_date"], unique=False)

    op.create_table(
        "offer_allocations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("offer_id", sa.Integer(), sa.ForeignKey("offers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("client_id", sa.String(length=64), nullable=True),
        sa.Column("allocated_value", sa.Numeric(16, 2), nullable=False, server_default="0"),
    )
    op.create_index("ix_offer_allocations_offer_id", "offer_allocations", ["offer_id"], unique=False)

    op.create_table(
        "cross_deals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.String(length=64), nullable=True),
        sa.Column("client_id", sa.String(length=64), nullable=True),
        sa.Column("product", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("category", sa.String(length=32), nullable=False, server_default="outros"),
        sa.Column("amount", sa.Numeric(16, 2), nullable=False, server_default="0"),
        sa.Column("commission", sa.Numeric(16, 2), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("sale_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_cross_deals_owner_id", "cross_deals", ["owner_id"], unique=False)
    op.create_index("ix_cross_deals_sale_date", "cross_deals", ["sale_date"], unique=False)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
        sa.Column("username", sa.String(length=64), nullable=True),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("entity_type", sa.String(length=64), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
    )
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"], unique=False)
    op.create_index("ix_audit_logs_username", "audit_logs", ["username"], unique=False)
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"], unique=False)
    op.create_index("ix_audit_logs_entity_type", "audit_logs", ["entity_type"], unique=False)
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"], unique=False)
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"], unique=False)

def downgrade():
    op.drop_table("audit_logs")
    op.drop_table("cross_deals")
    op.drop_table("offer_allocations")
    op.drop_table("offers")
    op.drop_table("prospects")
    op.drop_table("ledger_entries")
    op.drop_table("clients")
