"""create analysis, snapshot, label, price history and model metrics tables

Revision ID: 3c7d91e0b2a4
Revises:
Create Date: 2026-10-12 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c7d91e0b2a4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'analyses',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('source_url', sa.String(2048), nullable=True),
        sa.Column('status', sa.String(32), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), onupdate=sa.func.now()),
    )
    op.create_index('idx_analyses_created', 'analyses', ['created_at'])
    op.create_index('idx_analyses_source_url', 'analyses', ['source_url'])

    op.create_table(
        'extracted_listings',
        sa.Column('analysis_id', sa.String(64), sa.ForeignKey('analyses.id'), primary_key=True),
        sa.Column('price', sa.Float(), nullable=True),
        sa.Column('area_m2', sa.Float(), nullable=True),
        sa.Column('photos', sa.JSON(), nullable=True),
    )

    op.create_table(
        'feature_snapshots',
        sa.Column('analysis_id', sa.String(64), sa.ForeignKey('analyses.id'), primary_key=True),
        sa.Column('features', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        'score_snapshots',
        sa.Column('analysis_id', sa.String(64), sa.ForeignKey('analyses.id'), primary_key=True),
        sa.Column('avm_low', sa.Float(), nullable=True),
        sa.Column('avm_high', sa.Float(), nullable=True),
        sa.Column('avm_mid', sa.Float(), nullable=True),
        sa.Column('avm_conf', sa.Float(), nullable=True),
        sa.Column('tts_bucket', sa.String(20), nullable=True),
        sa.Column('est_rent', sa.Float(), nullable=True),
        sa.Column('yield_gross', sa.Float(), nullable=True),
        sa.Column('yield_net', sa.Float(), nullable=True),
        sa.Column('risk_class', sa.String(20), nullable=True),
        sa.Column('condition_score', sa.Float(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Primary key on analysis_id: at most one label per analysis
    op.create_table(
        'tts_labels',
        sa.Column('analysis_id', sa.String(64), sa.ForeignKey('analyses.id'), primary_key=True),
        sa.Column('days', sa.Integer(), nullable=False),
        sa.Column('censored', sa.Boolean(), nullable=False),
        sa.Column('observed_days', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'price_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('source_url', sa.String(2048), nullable=False),
        sa.Column('ts', sa.DateTime(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('currency', sa.String(10), server_default='EUR'),
    )
    op.create_index('idx_price_history_url_ts', 'price_history', ['source_url', 'ts'])

    op.create_table(
        'model_metrics',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('ts', sa.DateTime(), nullable=False),
        sa.Column('model_name', sa.String(50), nullable=False),
        sa.Column('mdape', sa.Float(), nullable=False),
        sa.Column('pi_coverage', sa.Float(), nullable=False),
        sa.Column('sample_count', sa.Integer(), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('idx_model_metrics_model_ts', 'model_metrics', ['model_name', 'ts'])


def downgrade() -> None:
    op.drop_index('idx_model_metrics_model_ts', table_name='model_metrics')
    op.drop_table('model_metrics')
    op.drop_index('idx_price_history_url_ts', table_name='price_history')
    op.drop_table('price_history')
    op.drop_table('tts_labels')
    op.drop_table('score_snapshots')
    op.drop_table('feature_snapshots')
    op.drop_table('extracted_listings')
    op.drop_index('idx_analyses_source_url', table_name='analyses')
    op.drop_index('idx_analyses_created', table_name='analyses')
    op.drop_table('analyses')
