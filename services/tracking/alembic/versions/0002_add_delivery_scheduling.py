from alembic import op
import sqlalchemy as sa

revision = '0002_add_delivery_scheduling'
down_revision = '0001_init'
branch_labels = None
depends_on = None

def upgrade():
    op.add_column('packages', sa.Column('service_level', sa.String(20), nullable=False, server_default='standard'))
    op.add_column('packages', sa.Column('scheduled_delivery_date', sa.DateTime(timezone=True), nullable=True))
    op.add_column('packages', sa.Column('scheduled_time_slot', sa.String(20), nullable=True))
    op.create_table(
        'addresses',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.String(64), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('label', sa.String(50), nullable=False),
        sa.Column('full_name', sa.String(200), nullable=False),
        sa.Column('address', sa.Text, nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('is_default', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

def downgrade():
    op.drop_table('addresses')
    op.drop_column('packages', 'scheduled_time_slot')
    op.drop_column('packages', 'scheduled_delivery_date')
    op.drop_column('packages', 'service_level')
