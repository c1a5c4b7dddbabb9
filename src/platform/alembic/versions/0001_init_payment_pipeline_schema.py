"""init_payment_pipeline_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Schema:
- resource: Events/sessions with pricing tiers and capacity counters
- user: Ticket holders keyed by normalized 10-digit phone
- payment: One row per gateway order, status guarded by conditional updates
- voucher / voucher_claim: Slot pool and the phones currently holding a slot
- event_enrollment / enrollment_ticket: Paid enrollment with one ticket per phone
- seat: Seat holds for seat-arranged resources
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables with final schema."""

    # ========== STEP 1: Catalog and people ==========

    op.create_table(
        'resource',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('is_live', sa.Boolean(), nullable=False),
        sa.Column('booking_start_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('booking_end_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=True),
        sa.Column('pricing_tiers', sa.JSON(), nullable=False),
        sa.Column('has_seat_arrangement', sa.Boolean(), nullable=False),
        sa.Column('available_seats', sa.Integer(), nullable=False),
        sa.Column('tickets_sold', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('phone', sa.String(length=10), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index(op.f('ix_user_phone'), 'user', ['phone'], unique=True)

    # ========== STEP 2: Payments ==========

    op.create_table(
        'payment',
        sa.Column('order_id', sa.String(length=64), nullable=False),
        sa.Column('gateway_payment_id', sa.String(length=64), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('resource_id', sa.Integer(), nullable=False),
        sa.Column('buyer_user_id', sa.Integer(), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('discount_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('final_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('failure_reason', sa.String(length=500), nullable=True),
        sa.Column('purchased_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('payment_link_id', sa.String(length=64), nullable=True),
        sa.Column('payment_url', sa.String(length=500), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=False),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('order_id'),
    )
    op.create_index(
        op.f('ix_payment_gateway_payment_id'), 'payment', ['gateway_payment_id'], unique=False
    )
    op.create_index(op.f('ix_payment_resource_id'), 'payment', ['resource_id'], unique=False)
    op.create_index(op.f('ix_payment_status'), 'payment', ['status'], unique=False)

    # ========== STEP 3: Vouchers ==========

    op.create_table(
        'voucher',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.String(length=1000), nullable=False),
        sa.Column('max_usage', sa.Integer(), nullable=False),
        sa.Column('usage_count', sa.Integer(), nullable=False),
        sa.Column('claimed_count', sa.Integer(), nullable=False),
        sa.Column('applicable_resources', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('claimed_count <= max_usage', name='ck_voucher_claimed_within_max'),
        sa.CheckConstraint('usage_count <= max_usage', name='ck_voucher_usage_within_max'),
    )
    op.create_index(op.f('ix_voucher_code'), 'voucher', ['code'], unique=True)

    op.create_table(
        'voucher_claim',
        sa.Column('voucher_id', sa.Integer(), nullable=False),
        sa.Column('phone', sa.String(length=10), nullable=False),
        sa.Column(
            'claimed_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(['voucher_id'], ['voucher.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('voucher_id', 'phone'),
    )
    op.create_index(op.f('ix_voucher_claim_phone'), 'voucher_claim', ['phone'], unique=False)

    # ========== STEP 4: Enrollments and tickets ==========

    op.create_table(
        'event_enrollment',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('order_id', sa.String(length=64), nullable=False),
        sa.Column('payment_id', sa.String(length=64), nullable=True),
        sa.Column('buyer_user_id', sa.Integer(), nullable=False),
        sa.Column('resource_id', sa.Integer(), nullable=False),
        sa.Column('ticket_count', sa.Integer(), nullable=False),
        sa.Column('ticket_price', sa.Numeric(12, 2), nullable=False),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('buyer_user_id', 'resource_id', name='uq_enrollment_buyer_resource'),
    )
    op.create_index('ix_enrollment_order_id', 'event_enrollment', ['order_id'], unique=True)
    op.create_index(
        op.f('ix_event_enrollment_resource_id'), 'event_enrollment', ['resource_id'], unique=False
    )

    op.create_table(
        'enrollment_ticket',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('enrollment_id', sa.String(length=36), nullable=False),
        sa.Column('resource_id', sa.Integer(), nullable=False),
        sa.Column('phone', sa.String(length=15), nullable=False),
        sa.Column('normalized_phone', sa.String(length=10), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('assigned_seat', sa.String(length=10), nullable=True),
        sa.Column('is_scanned', sa.Boolean(), nullable=False),
        sa.Column('scanned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('scanned_by_admin_id', sa.String(length=64), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancellation_reason', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['enrollment_id'], ['event_enrollment.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('enrollment_id', 'phone', name='uq_ticket_enrollment_phone'),
    )
    op.create_index(
        'ix_ticket_resource_phone_status',
        'enrollment_ticket',
        ['resource_id', 'normalized_phone', 'status'],
        unique=False,
    )

    # ========== STEP 5: Seats ==========

    op.create_table(
        'seat',
        sa.Column('resource_id', sa.Integer(), nullable=False),
        sa.Column('seat_label', sa.String(length=10), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('order_id', sa.String(length=64), nullable=True),
        sa.Column('reserved_by_phone', sa.String(length=10), nullable=True),
        sa.Column('reservation_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('resource_id', 'seat_label'),
    )
    op.create_index(op.f('ix_seat_order_id'), 'seat', ['order_id'], unique=False)


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index(op.f('ix_seat_order_id'), table_name='seat')
    op.drop_table('seat')
    op.drop_index('ix_ticket_resource_phone_status', table_name='enrollment_ticket')
    op.drop_table('enrollment_ticket')
    op.drop_index(op.f('ix_event_enrollment_resource_id'), table_name='event_enrollment')
    op.drop_index('ix_enrollment_order_id', table_name='event_enrollment')
    op.drop_table('event_enrollment')
    op.drop_index(op.f('ix_voucher_claim_phone'), table_name='voucher_claim')
    op.drop_table('voucher_claim')
    op.drop_index(op.f('ix_voucher_code'), table_name='voucher')
    op.drop_table('voucher')
    op.drop_index(op.f('ix_payment_status'), table_name='payment')
    op.drop_index(op.f('ix_payment_resource_id'), table_name='payment')
    op.drop_index(op.f('ix_payment_gateway_payment_id'), table_name='payment')
    op.drop_table('payment')
    op.drop_index(op.f('ix_user_phone'), table_name='user')
    op.drop_table('user')
    op.drop_table('resource')
