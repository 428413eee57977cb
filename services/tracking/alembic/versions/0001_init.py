from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='customer'),
        sa.Column('password_hash', sa.String(128), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        'packages',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('tracking_id', sa.String(32), nullable=False, unique=True, index=True),
        sa.Column('sender_name', sa.String(200), nullable=False),
        sa.Column('sender_address', sa.Text, nullable=False),
        sa.Column('sender_phone', sa.String(50), nullable=True),
        sa.Column('sender_email', sa.String(255), nullable=True),
        sa.Column('recipient_name', sa.String(200), nullable=False),
        sa.Column('recipient_address', sa.Text, nullable=False),
        sa.Column('recipient_phone', sa.String(50), nullable=True),
        sa.Column('recipient_email', sa.String(255), nullable=True, index=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('weight', sa.Numeric(10, 2), nullable=False),
        sa.Column('dimensions', sa.String(100), nullable=True),
        sa.Column('shipping_cost', sa.Numeric(10, 2), nullable=False),
        sa.Column('payment_method', sa.String(30), nullable=False),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('current_status', sa.String(30), nullable=False, server_default='created', index=True),
        sa.Column('current_location', sa.String(255), nullable=True),
        sa.Column('estimated_delivery', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_delivery', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(64), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        'tracking_events',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('package_id', sa.Integer, sa.ForeignKey('packages.id'), nullable=False, index=True),
        sa.Column('status', sa.String(30), nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('package_id', sa.Integer, sa.ForeignKey('packages.id'), nullable=False, index=True),
        sa.Column('type', sa.String(10), nullable=False),
        sa.Column('recipient_email', sa.String(255), nullable=True),
        sa.Column('recipient_phone', sa.String(50), nullable=True),
        sa.Column('subject', sa.String(255), nullable=True),
        sa.Column('message', sa.Text, nullable=False),
        sa.Column('status', sa.String(10), nullable=False, server_default='pending'),
        sa.Column('auto_send', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('error_message', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

def downgrade():
    op.drop_table('notifications')
    op.drop_table('tracking_events')
    op.drop_table('packages')
    op.drop_table('users')
