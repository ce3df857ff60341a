"""Units, people, transactions, chart of accounts, general ledger and unit settings tables

Revision ID: 20261001_0900_ledger_reporting_schema
Revises:
Create Date: 2026-10-01 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '20261001_0900_ledger_reporting_schema'
down_revision = None
branch_labels = None
depends_on = None


TRANSACTION_TYPES = (
    'SALE_QUOTATION', 'SALE_ORDER', 'SALE_INVOICE', 'SALE_RETURN', 'RECEIVABLE_PAYMENT',
    'PURCHASE_QUOTATION', 'PURCHASE_ORDER', 'PURCHASE_INVOICE', 'PURCHASE_RETURN', 'DEBT_PAYMENT',
    'REVENUE', 'EXPENSE', 'JOURNAL_ENTRY', 'TRANSFER_FUND', 'TRANSFER_ITEM_SEND',
    'TRANSFER_ITEM_RECEIVE', 'STOCK_OPNAME', 'BEGINNING_BALANCE_STOCK', 'BEGINNING_BALANCE_DEBT',
    'BEGINNING_BALANCE_RECEIVABLE', 'OPEN_REGISTER', 'CLOSE_REGISTER',
)

CATEGORY_CLASSES = (
    'CURRENT_ASSET', 'FIXED_ASSET', 'CURRENT_LIABILITIES', 'LONG_TERM_LIABILITIES', 'EQUITY',
    'NET_PROFIT', 'REVENUE', 'OTHER_REVENUE', 'COGS', 'COGM', 'EXPENSE', 'OTHER_EXPENSE', 'TAX',
)

VECTOR_ENUMS = ('vector', 'balance_sheet_position', 'profit_loss_position')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    bind = op.get_bind()

    transaction_type_enum = postgresql.ENUM(*TRANSACTION_TYPES, name='transactiontype', create_type=False)
    transaction_type_enum.create(bind, checkfirst=True)

    category_class_enum = postgresql.ENUM(*CATEGORY_CLASSES, name='categoryclass', create_type=False)
    category_class_enum.create(bind, checkfirst=True)

    # Ledger direction and both class polarities share the same labels
    vector_enums = {}
    for name in VECTOR_ENUMS:
        vector_enums[name] = postgresql.ENUM('POSITIVE', 'NEGATIVE', name=name, create_type=False)
        vector_enums[name].create(bind, checkfirst=True)

    # =========================================================================
    # UNITS
    # =========================================================================
    op.create_table(
        'units',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(50), nullable=True, unique=True),
        *_timestamps(),
    )

    op.create_table(
        'people',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('unit_id', sa.Uuid(as_uuid=True), sa.ForeignKey('units.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('code', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('code', 'unit_id', name='uq_people_code_unit'),
    )

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================
    op.create_table(
        'transactions',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('unit_id', sa.Uuid(as_uuid=True), sa.ForeignKey('units.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('transaction_number', sa.String(100), nullable=True),
        sa.Column('people_id', sa.Uuid(as_uuid=True), sa.ForeignKey('people.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('transaction_type', transaction_type_enum, nullable=False, index=True),
        sa.Column('entry_date', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('total', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('under_payment', sa.Numeric(18, 2), nullable=False, server_default='0',
                  comment='Amount left unpaid on the invoice'),
        *_timestamps(),
    )

    op.create_table(
        'transaction_details',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('transaction_id', sa.Uuid(as_uuid=True), sa.ForeignKey('transactions.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('transaction_payment_id', sa.Uuid(as_uuid=True), sa.ForeignKey('transactions.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('price_input', sa.Numeric(18, 2), nullable=False, server_default='0'),
        *_timestamps(),
    )

    # =========================================================================
    # CLASSIFICATION HIERARCHY
    # =========================================================================
    op.create_table(
        'account_classes',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('code', sa.String(20), nullable=False, unique=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('category_class', category_class_enum, nullable=False, index=True),
        sa.Column('balance_sheet_position', vector_enums['balance_sheet_position'], nullable=False),
        sa.Column('profit_loss_position', vector_enums['profit_loss_position'], nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'account_sub_classes',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('account_class_id', sa.Uuid(as_uuid=True), sa.ForeignKey('account_classes.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('code', sa.String(20), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'chart_of_accounts',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('account_sub_class_id', sa.Uuid(as_uuid=True), sa.ForeignKey('account_sub_classes.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('unit_id', sa.Uuid(as_uuid=True), sa.ForeignKey('units.id', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('code', sa.String(20), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('code', 'unit_id', name='uq_chart_of_accounts_code_unit'),
    )

    op.create_table(
        'general_settings',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('unit_id', sa.Uuid(as_uuid=True), sa.ForeignKey('units.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('current_profit_account_id', sa.Uuid(as_uuid=True), sa.ForeignKey('chart_of_accounts.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )

    # =========================================================================
    # GENERAL LEDGER
    # =========================================================================
    op.create_table(
        'general_ledgers',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('unit_id', sa.Uuid(as_uuid=True), sa.ForeignKey('units.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('transaction_id', sa.Uuid(as_uuid=True), sa.ForeignKey('transactions.id', ondelete='CASCADE'), nullable=False, index=True),
        *_timestamps(),
    )

    op.create_table(
        'general_ledger_details',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('general_ledger_id', sa.Uuid(as_uuid=True), sa.ForeignKey('general_ledgers.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('chart_of_account_id', sa.Uuid(as_uuid=True), sa.ForeignKey('chart_of_accounts.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('vector', vector_enums['vector'], nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table('general_ledger_details')
    op.drop_table('general_ledgers')
    op.drop_table('general_settings')
    op.drop_table('chart_of_accounts')
    op.drop_table('account_sub_classes')
    op.drop_table('account_classes')
    op.drop_table('transaction_details')
    op.drop_table('transactions')
    op.drop_table('people')
    op.drop_table('units')

    # Drop enums
    for name in VECTOR_ENUMS:
        op.execute(f'DROP TYPE IF EXISTS {name}')
    op.execute('DROP TYPE IF EXISTS categoryclass')
    op.execute('DROP TYPE IF EXISTS transactiontype')
