"""ledger, installments, savings

Revision ID: 20250101_01_ledger
Revises:
Create Date: 2025-01-01
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20250101_01_ledger'
down_revision = None
branch_labels = None
depends_on = None

TX_TYPES = (
    'INCOME', 'FIXED_EXPENSE', 'EXPENSE', 'INSTALLMENT',
    'SAVING_DEPOSIT', 'SAVING_WITHDRAWAL',
)
CURRENCIES = ('ARS', 'USD')


def upgrade():
    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('type', sa.Enum(*TX_TYPES, name='transactiontype'), nullable=False, index=True),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('currency', sa.Enum(*CURRENCIES, name='currency'), nullable=False, server_default='ARS'),
        sa.Column('exchange_rate', sa.Float(), nullable=False, server_default='0'),
        sa.Column('category', sa.String(), nullable=False, server_default='Otros', index=True),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_table(
        'installments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('card_name', sa.String(), nullable=False),
        sa.Column('amount_per_installment', sa.Float(), nullable=False),
        sa.Column('total_installments', sa.Integer(), nullable=False),
        sa.Column('installments_paid', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('currency', sa.Enum(*CURRENCIES, name='currency'), nullable=False, server_default='ARS'),
    )
    op.create_table(
        'installment_payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('installment_id', sa.Integer(), sa.ForeignKey('installments.id'), nullable=False, index=True),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('transactions.id'), nullable=False),
        sa.Column('installment_number', sa.Integer(), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.UniqueConstraint('installment_id', 'installment_number', name='uq_installment_payments_number'),
    )
    op.create_table(
        'savings_accounts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('currency', sa.Enum(*CURRENCIES, name='currency'), nullable=False, server_default='USD'),
        sa.Column('icon', sa.String(), nullable=False, server_default='wallet'),
        sa.Column('color', sa.String(), nullable=False, server_default='#6366f1'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
    )
    op.create_table(
        'savings_movements',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('savings_accounts.id'), nullable=False, index=True),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('transactions.id'), nullable=True),
        sa.Column('type', sa.Enum('DEPOSIT', 'WITHDRAWAL', name='movementtype'), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('currency', sa.Enum(*CURRENCIES, name='currency'), nullable=False, server_default='USD'),
        sa.Column('exchange_rate', sa.Float(), nullable=False, server_default='0'),
        sa.Column('description', sa.String(), nullable=False, server_default=''),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )


def downgrade():
    op.drop_table('savings_movements')
    op.drop_table('savings_accounts')
    op.drop_table('installment_payments')
    op.drop_table('installments')
    op.drop_table('transactions')
