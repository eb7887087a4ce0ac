"""Create flow index tables

Revision ID: 20261017_000001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261017_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'blocks',
        sa.Column('id', sa.String(255), nullable=False),
        sa.Column('height', sa.BigInteger(), nullable=False),
        sa.Column('parent_id', sa.String(64), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=True),
        sa.Column('collection_guarantees', sa.JSON(), nullable=False),
        sa.Column('block_seals', sa.JSON(), nullable=False),
        sa.Column('signatures', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_blocks_height', 'blocks', ['height'], unique=True)

    op.create_table(
        'transactions',
        sa.Column('id', sa.String(255), nullable=False),
        sa.Column('script', sa.Text(), nullable=False),
        sa.Column('payer', sa.String(20), nullable=False),
        sa.Column('block_id', sa.String(64), nullable=False),
        sa.Column('reference_block_id', sa.String(64), nullable=True),
        sa.Column('gas_limit', sa.BigInteger(), nullable=False),
        sa.Column('authorizers', sa.JSON(), nullable=False),
        sa.Column('arguments', sa.JSON(), nullable=False),
        sa.Column('proposal_key', sa.JSON(), nullable=False),
        sa.Column('envelope_signatures', sa.JSON(), nullable=False),
        sa.Column('payload_signatures', sa.JSON(), nullable=False),
        sa.Column('status', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_transactions_payer', 'transactions', ['payer'])
    op.create_index('ix_transactions_block_id', 'transactions', ['block_id'])

    op.create_table(
        'events',
        sa.Column('id', sa.String(255), nullable=False),
        sa.Column('type', sa.String(255), nullable=False),
        sa.Column('transaction_id', sa.String(64), nullable=False),
        sa.Column('block_id', sa.String(64), nullable=True),
        sa.Column('transaction_index', sa.Integer(), nullable=False),
        sa.Column('event_index', sa.Integer(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_events_type', 'events', ['type'])
    op.create_index('ix_events_transaction_id', 'events', ['transaction_id'])

    op.create_table(
        'accounts',
        sa.Column('id', sa.String(255), nullable=False),
        sa.Column('address', sa.String(20), nullable=False),
        sa.Column('balance', sa.BigInteger(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('code', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_accounts_address', 'accounts', ['address'], unique=True)

    op.create_table(
        'account_keys',
        sa.Column('id', sa.String(255), nullable=False),
        sa.Column('index', sa.Integer(), nullable=False),
        sa.Column('address', sa.String(20), nullable=False),
        sa.Column('public_key', sa.Text(), nullable=False),
        sa.Column('sign_algo', sa.String(32), nullable=True),
        sa.Column('hash_algo', sa.String(32), nullable=True),
        sa.Column('weight', sa.Integer(), nullable=False),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('revoked', sa.Boolean(), nullable=False),
        sa.Column('private_key', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('address', 'index', name='uq_account_keys_address_index')
    )
    op.create_index('ix_account_keys_address', 'account_keys', ['address'])

    op.create_table(
        'account_contracts',
        sa.Column('id', sa.String(255), nullable=False),
        sa.Column('address', sa.String(20), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_account_contracts_address', 'account_contracts', ['address'])

    op.create_table(
        'account_storage_items',
        sa.Column('id', sa.String(255), nullable=False),
        sa.Column('address', sa.String(20), nullable=False),
        sa.Column('path_domain', sa.String(16), nullable=False),
        sa.Column('path_identifier', sa.String(255), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_account_storage_items_address', 'account_storage_items', ['address']
    )


def downgrade() -> None:
    op.drop_index('ix_account_storage_items_address', 'account_storage_items')
    op.drop_table('account_storage_items')

    op.drop_index('ix_account_contracts_address', 'account_contracts')
    op.drop_table('account_contracts')

    op.drop_index('ix_account_keys_address', 'account_keys')
    op.drop_table('account_keys')

    op.drop_index('ix_accounts_address', 'accounts')
    op.drop_table('accounts')

    op.drop_index('ix_events_transaction_id', 'events')
    op.drop_index('ix_events_type', 'events')
    op.drop_table('events')

    op.drop_index('ix_transactions_block_id', 'transactions')
    op.drop_index('ix_transactions_payer', 'transactions')
    op.drop_table('transactions')

    op.drop_index('ix_blocks_height', 'blocks')
    op.drop_table('blocks')
