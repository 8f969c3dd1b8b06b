"""Create budgets, budget_alerts and transactions tables

Revision ID: 4b1e2c9d7a31
Revises:
Create Date: 2026-10-19 09:12:44.381520

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4b1e2c9d7a31'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('budgets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cif_id', sa.String(length=100), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('budget_amount', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('period_type', sa.String(length=20), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('state', sa.String(length=20), nullable=False, server_default='ACTIVE'),
        sa.Column('alert_threshold_80', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('alert_threshold_100', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('rollover_enabled', sa.Boolean(), server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint('end_date >= start_date', name='ck_budget_date_range'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('budgets', schema=None) as batch_op:
        batch_op.create_index('idx_budget_cif_category', ['cif_id', 'category'], unique=False)
        batch_op.create_index('idx_budget_state_dates', ['state', 'start_date', 'end_date'], unique=False)

    op.create_table('budget_alerts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('budget_id', sa.Integer(), nullable=False),
        sa.Column('cif_id', sa.String(length=100), nullable=False),
        sa.Column('alert_type', sa.String(length=30), nullable=False),
        sa.Column('current_spending', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('budget_limit', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('percentage_used', sa.Integer(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('alert_message', sa.Text(), nullable=True),
        sa.Column('is_sent', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('notification_channels', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['budget_id'], ['budgets.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('budget_alerts', schema=None) as batch_op:
        batch_op.create_index('idx_alert_cif_sent', ['cif_id', 'is_sent'], unique=False)
        batch_op.create_index('idx_alert_budget_type', ['budget_id', 'alert_type'], unique=False)
        batch_op.create_index('idx_alert_created_at', ['created_at'], unique=False)

    # Normally owned by the core-banking categorisation pipeline; created here
    # for standalone deployments
    op.create_table('transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('source_table', sa.String(length=3), nullable=True),
        sa.Column('tran_date', sa.DateTime(), nullable=True),
        sa.Column('pstd_date', sa.DateTime(), nullable=True),
        sa.Column('tran_id', sa.String(length=100), nullable=True),
        sa.Column('cif_id', sa.String(length=100), nullable=False),
        sa.Column('acid', sa.String(length=100), nullable=True),
        sa.Column('foracid', sa.String(length=100), nullable=True),
        sa.Column('part_tran_type', sa.String(length=50), nullable=True),
        sa.Column('tran_amt', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('tran_particular', sa.Text(), nullable=True),
        sa.Column('merchant', sa.String(length=500), nullable=True),
        sa.Column('user_part_tran_code', sa.String(length=50), nullable=True),
        sa.Column('subcategory', sa.String(length=100), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('confidence', sa.Float(), nullable=True),
        sa.Column('migration_status', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('transactions', schema=None) as batch_op:
        batch_op.create_index('idx_trans_cif_category_date', ['cif_id', 'category', 'tran_date'], unique=False)
        batch_op.create_index('idx_trans_cif_date_range', ['cif_id', 'tran_date', 'pstd_date'], unique=False)


def downgrade():
    with op.batch_alter_table('transactions', schema=None) as batch_op:
        batch_op.drop_index('idx_trans_cif_date_range')
        batch_op.drop_index('idx_trans_cif_category_date')
    op.drop_table('transactions')

    with op.batch_alter_table('budget_alerts', schema=None) as batch_op:
        batch_op.drop_index('idx_alert_created_at')
        batch_op.drop_index('idx_alert_budget_type')
        batch_op.drop_index('idx_alert_cif_sent')
    op.drop_table('budget_alerts')

    with op.batch_alter_table('budgets', schema=None) as batch_op:
        batch_op.drop_index('idx_budget_state_dates')
        batch_op.drop_index('idx_budget_cif_category')
    op.drop_table('budgets')
