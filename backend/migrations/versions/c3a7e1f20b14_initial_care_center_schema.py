"""initial care center schema

Revision ID: c3a7e1f20b14
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the clinic/pharmacy schema from scratch:
- medicines: medicine master with authoritative stock counter
- patients: registered patients with P-series codes
- transactions / transaction_items: sales ledger with TXN-series codes
- medicine_usage: administrative stock consumption log
- code_sequences: per-series code counters
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'c3a7e1f20b14'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # medicines: stock_quantity is the on-hand counter; version_id guards updates
    # ============================================================================
    op.create_table(
        'medicines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('unit', sa.String(length=32), nullable=False),
        sa.Column('price_cents', sa.BigInteger(), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('minimum_stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('expiry_date', sa.Date(), nullable=False),
        sa.Column('supplier', sa.String(length=255), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('stock_quantity >= 0', name='ck_medicines_stock_nonnegative'),
        sa.CheckConstraint('minimum_stock >= 0', name='ck_medicines_minimum_nonnegative'),
        sa.CheckConstraint('price_cents >= 0', name='ck_medicines_price_nonnegative'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_medicines_name', 'medicines', ['name'], unique=False)

    # ============================================================================
    # patients
    # ============================================================================
    op.create_table(
        'patients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('patient_code', sa.String(length=16), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=False),
        sa.Column('gender', sa.String(length=16), nullable=False),
        sa.Column('phone', sa.String(length=64), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('emergency_contact', sa.String(length=255), nullable=True),
        sa.Column('medical_history', sa.Text(), nullable=True),
        sa.Column('allergies', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('patient_code', name='uq_patients_patient_code'),
        sa.UniqueConstraint('email'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_patients_name', 'patients', ['name'], unique=False)

    # ============================================================================
    # transactions: immutable apart from payment_status
    # ============================================================================
    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('transaction_code', sa.String(length=16), nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('transaction_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('total_amount_cents', sa.BigInteger(), nullable=False),
        sa.Column('payment_status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['patient_id'], ['patients.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('transaction_code', name='uq_transactions_code'),
        sa.CheckConstraint('total_amount_cents >= 0', name='ck_transactions_total_nonnegative'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_transactions_patient_id', 'transactions', ['patient_id'], unique=False)
    op.create_index('ix_transactions_payment_status', 'transactions', ['payment_status'], unique=False)
    op.create_index('ix_transactions_patient_date', 'transactions', ['patient_id', 'transaction_date'], unique=False)

    # ============================================================================
    # transaction_items: unit_price_cents is the price snapshot at sale time
    # ============================================================================
    op.create_table(
        'transaction_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('transaction_id', sa.Integer(), nullable=False),
        sa.Column('medicine_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price_cents', sa.BigInteger(), nullable=False),
        sa.Column('subtotal_cents', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['transaction_id'], ['transactions.id']),
        sa.ForeignKeyConstraint(['medicine_id'], ['medicines.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('quantity > 0', name='ck_transaction_items_quantity_positive'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_transaction_items_transaction_id', 'transaction_items', ['transaction_id'], unique=False)
    op.create_index('ix_transaction_items_medicine_id', 'transaction_items', ['medicine_id'], unique=False)

    # ============================================================================
    # medicine_usage
    # ============================================================================
    op.create_table(
        'medicine_usage',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('medicine_id', sa.Integer(), nullable=False),
        sa.Column('quantity_used', sa.Integer(), nullable=False),
        sa.Column('usage_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['medicine_id'], ['medicines.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('quantity_used > 0', name='ck_medicine_usage_quantity_positive'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_medicine_usage_medicine_id', 'medicine_usage', ['medicine_id'], unique=False)
    op.create_index('ix_medicine_usage_usage_date', 'medicine_usage', ['usage_date'], unique=False)

    # ============================================================================
    # code_sequences: one counter row per code series
    # ============================================================================
    op.create_table(
        'code_sequences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('series', sa.String(length=32), nullable=False),
        sa.Column('next_number', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('series', name='uq_code_sequences_series'),
        sqlite_autoincrement=True
    )


def downgrade():
    op.drop_table('code_sequences')
    op.drop_index('ix_medicine_usage_usage_date', table_name='medicine_usage')
    op.drop_index('ix_medicine_usage_medicine_id', table_name='medicine_usage')
    op.drop_table('medicine_usage')
    op.drop_index('ix_transaction_items_medicine_id', table_name='transaction_items')
    op.drop_index('ix_transaction_items_transaction_id', table_name='transaction_items')
    op.drop_table('transaction_items')
    op.drop_index('ix_transactions_patient_date', table_name='transactions')
    op.drop_index('ix_transactions_payment_status', table_name='transactions')
    op.drop_index('ix_transactions_patient_id', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('ix_patients_name', table_name='patients')
    op.drop_table('patients')
    op.drop_index('ix_medicines_name', table_name='medicines')
    op.drop_table('medicines')
