"""create offer alert tables

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2026-10-19 10:12:03.412871

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('nickname', sa.String(length=100), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('subscription_tier', sa.String(length=20), nullable=True),
        sa.Column('is_fake_account', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'], unique=False)

    op.create_table(
        'promo_codes',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('influencer_id', sa.String(length=36), nullable=False),
        sa.Column('brand_name', sa.String(length=255), nullable=False),
        sa.Column('brand_url', sa.String(length=500), nullable=True),
        sa.Column('brand_instagram_handle', sa.String(length=100), nullable=True),
        sa.Column('promo_code', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('expiration_date', sa.DateTime(), nullable=True),
        sa.Column('affiliate_link', sa.String(length=1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['influencer_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_promo_codes_influencer_id', 'promo_codes', ['influencer_id'], unique=False)
    op.create_index('ix_promo_codes_category', 'promo_codes', ['category'], unique=False)
    op.create_index('ix_promo_codes_expiration_date', 'promo_codes', ['expiration_date'], unique=False)

    op.create_table(
        'follows',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('influencer_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['influencer_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'influencer_id', name='uq_follow_user_influencer'),
    )
    op.create_index('ix_follows_user_id', 'follows', ['user_id'], unique=False)
    op.create_index('ix_follows_influencer_id', 'follows', ['influencer_id'], unique=False)

    op.create_table(
        'user_domain_map',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('influencer_id', sa.String(length=36), nullable=False),
        sa.Column('domain', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['influencer_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'influencer_id', 'domain', name='uq_user_influencer_domain'),
    )
    op.create_index('ix_user_domain_map_user_id', 'user_domain_map', ['user_id'], unique=False)
    op.create_index('ix_user_domain_map_influencer_id', 'user_domain_map', ['influencer_id'], unique=False)
    op.create_index('ix_user_domain_map_domain', 'user_domain_map', ['domain'], unique=False)

    op.create_table(
        'agency_influencers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('agency_id', sa.String(length=36), nullable=False),
        sa.Column('influencer_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['agency_id'], ['users.id']),
        sa.ForeignKeyConstraint(['influencer_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('agency_id', 'influencer_id', name='uq_agency_influencer'),
    )
    op.create_index('ix_agency_influencers_agency_id', 'agency_influencers', ['agency_id'], unique=False)
    op.create_index('ix_agency_influencers_influencer_id', 'agency_influencers', ['influencer_id'], unique=False)


def downgrade() -> None:
    op.drop_table('agency_influencers')
    op.drop_table('user_domain_map')
    op.drop_table('follows')
    op.drop_table('promo_codes')
    op.drop_table('users')
