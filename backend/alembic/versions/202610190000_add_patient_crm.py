"""Add patient CRM: soft delete, CPF and interaction log

Revision ID: 202610190000
Revises: 202610010000
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '202610190000'
down_revision: Union[str, None] = '202610010000'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('patients', sa.Column('cpf', sa.String(length=14), nullable=True))
    op.add_column('patients', sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()))
    op.add_column('patients', sa.Column('deleted_at', sa.TIMESTAMP(timezone=True), nullable=True))

    op.create_table('patient_interactions',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('clinic_id', sa.Integer(), nullable=False),
    sa.Column('patient_id', sa.Integer(), nullable=False),
    sa.Column('interaction_type', sa.String(length=50), nullable=False),
    sa.Column('summary', sa.Text(), nullable=False),
    sa.Column('handled_by_user_id', sa.Integer(), nullable=True),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['clinic_id'], ['clinics.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['patient_id'], ['patients.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['handled_by_user_id'], ['users.id'], ondelete='SET NULL'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_patient_interactions_id'), 'patient_interactions', ['id'], unique=False)
    op.create_index('idx_patient_interactions_patient_created', 'patient_interactions', ['patient_id', 'created_at'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_patient_interactions_patient_created', table_name='patient_interactions')
    op.drop_index(op.f('ix_patient_interactions_id'), table_name='patient_interactions')
    op.drop_table('patient_interactions')
    op.drop_column('patients', 'deleted_at')
    op.drop_column('patients', 'is_deleted')
    op.drop_column('patients', 'cpf')
