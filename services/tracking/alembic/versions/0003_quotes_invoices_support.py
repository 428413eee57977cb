from alembic import op
import sqlalchemy as sa

revision = '0003_quotes_invoices_support'
down_revision = '0002_add_delivery_scheduling'
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'quotes',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('quote_number', sa.String(30), nullable=False, unique=True, index=True),
        sa.Column('sender_name', sa.String(200), nullable=False),
        sa.Column('sender_address', sa.Text, nullable=False),
        sa.Column('sender_phone', sa.String(50), nullable=True),
        sa.Column('sender_email', sa.String(255), nullable=False),
        sa.Column('recipient_name', sa.String(200), nullable=False),
        sa.Column('recipient_address', sa.Text, nullable=False),
        sa.Column('recipient_phone', sa.String(50), nullable=True),
        sa.Column('recipient_email', sa.String(255), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('weight', sa.Numeric(10, 2), nullable=False),
        sa.Column('dimensions', sa.String(100), nullable=True),
        sa.Column('delivery_time_slot', sa.String(20), nullable=False, server_default='morning'),
        sa.Column('base_cost', sa.Numeric(10, 2), nullable=False),
        sa.Column('delivery_fee', sa.Numeric(10, 2), nullable=False),
        sa.Column('total_cost', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('valid_until', sa.DateTime(timezone=True), nullable=False),
        sa.Column('requested_by', sa.String(64), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('invoice_number', sa.String(30), nullable=False, unique=True, index=True),
        sa.Column('quote_id', sa.Integer, sa.ForeignKey('quotes.id'), nullable=True),
        sa.Column('package_id', sa.Integer, sa.ForeignKey('packages.id'), nullable=True),
        sa.Column('customer_name', sa.String(200), nullable=False),
        sa.Column('customer_email', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('payment_method', sa.String(30), nullable=True),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        'support_tickets',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.String(64), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='open'),
        sa.Column('priority', sa.String(10), nullable=False, server_default='normal'),
        sa.Column('package_id', sa.Integer, sa.ForeignKey('packages.id'), nullable=True),
        sa.Column('assigned_to', sa.String(64), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        'support_messages',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('ticket_id', sa.Integer, sa.ForeignKey('support_tickets.id'), nullable=False, index=True),
        sa.Column('sender_id', sa.String(64), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('body', sa.Text, nullable=False),
        sa.Column('is_staff', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

def downgrade():
    op.drop_table('support_messages')
    op.drop_table('support_tickets')
    op.drop_table('invoices')
    op.drop_table('quotes')
