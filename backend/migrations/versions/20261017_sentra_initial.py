"""Initial Sentra schema: clients, billing, calendar, progress, chat, users, add-ons

Revision ID: 20261017_initial
Revises:
Create Date: 2026-10-17

Tables:
1. clients, tags, client_links
2. invoices, payments
3. calendar_events
4. components, progress_steps, progress_step_comments
5. chats, chat_messages
6. users
7. add_on_services, client_service_requests
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261017_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(include_updated=True):
    cols = [sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())]
    if include_updated:
        cols.append(sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()))
    return cols


def upgrade():
    # ==========================================================================
    # 1. CLIENTS
    # ==========================================================================
    op.create_table('clients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('business_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('pic', sa.String(length=255), nullable=True),
        sa.Column('total_sales', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total_collection', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('balance', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('invoice_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('company', sa.String(length=255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('last_activity', sa.DateTime(timezone=True), nullable=True),
        sa.Column('registered_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_clients_email', 'clients', ['email'])
    op.create_index('ix_clients_phone', 'clients', ['phone'])

    op.create_table('tags',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('color', sa.String(length=16), nullable=False, server_default='#3B82F6'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tags_name', 'tags', ['name'], unique=True)

    op.create_table('client_links',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        *_timestamps(include_updated=False),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_client_links_client_id', 'client_links', ['client_id'])
    op.create_index('ix_client_links_created_at', 'client_links', ['created_at'])

    # ==========================================================================
    # 2. BILLING
    # ==========================================================================
    op.create_table('invoices',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('package_name', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('paid', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('due', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Pending'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_invoices_client_id', 'invoices', ['client_id'])
    op.create_index('ix_invoices_status', 'invoices', ['status'])

    op.create_table('payments',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.String(length=32), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_source', sa.String(length=128), nullable=False, server_default='Online Transfer'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Paid'),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('receipt_file_url', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_payments_client_id', 'payments', ['client_id'])
    op.create_index('ix_payments_invoice_id', 'payments', ['invoice_id'])

    # ==========================================================================
    # 3. CALENDAR
    # ==========================================================================
    op.create_table('calendar_events',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('start_date', sa.String(length=10), nullable=False),
        sa.Column('end_date', sa.String(length=10), nullable=False),
        sa.Column('start_time', sa.String(length=5), nullable=False),
        sa.Column('end_time', sa.String(length=5), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', sa.String(length=32), nullable=False, server_default='meeting'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_calendar_events_client_id', 'calendar_events', ['client_id'])
    op.create_index('ix_calendar_events_client_start', 'calendar_events', ['client_id', 'start_date'])

    # ==========================================================================
    # 4. COMPONENTS & PROGRESS
    # ==========================================================================
    op.create_table('components',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.String(length=32), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price', sa.String(length=64), nullable=False, server_default='RM 0.00'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_components_client_id', 'components', ['client_id'])
    op.create_index('ix_components_invoice_id', 'components', ['invoice_id'])

    op.create_table('progress_steps',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('deadline', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('completed_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('important', sa.Boolean(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_progress_steps_client_id', 'progress_steps', ['client_id'])

    op.create_table('progress_step_comments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('step_id', sa.String(length=36), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('attachment_url', sa.Text(), nullable=True),
        sa.Column('attachment_type', sa.String(length=128), nullable=True),
        *_timestamps(include_updated=False),
        sa.ForeignKeyConstraint(['step_id'], ['progress_steps.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_progress_step_comments_step_id', 'progress_step_comments', ['step_id'])

    # ==========================================================================
    # 5. CHAT
    # ==========================================================================
    op.create_table('chats',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('client_name', sa.String(length=255), nullable=False),
        sa.Column('avatar', sa.String(length=8), nullable=False, server_default=''),
        sa.Column('last_message', sa.Text(), nullable=True),
        sa.Column('last_message_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('unread_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('online', sa.Boolean(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('client_id', name='uq_chats_client'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_chats_client_id', 'chats', ['client_id'])

    op.create_table('chat_messages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('chat_id', sa.Integer(), nullable=False),
        sa.Column('sender', sa.String(length=16), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('message_type', sa.String(length=16), nullable=False, server_default='text'),
        sa.Column('attachment_url', sa.Text(), nullable=True),
        sa.Column('attachment_type', sa.String(length=128), nullable=True),
        *_timestamps(include_updated=False),
        sa.ForeignKeyConstraint(['chat_id'], ['chats.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_chat_messages_chat_id', 'chat_messages', ['chat_id'])

    # ==========================================================================
    # 6. USERS
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False, server_default='Team'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Active'),
        sa.Column('client_id', sa.Integer(), nullable=True),
        sa.Column('permissions', sa.JSON(), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_client_id', 'users', ['client_id'])

    # ==========================================================================
    # 7. ADD-ON SERVICES
    # ==========================================================================
    op.create_table('add_on_services',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Available'),
        sa.Column('features', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )

    op.create_table('client_service_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('service_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('request_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('approved_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['service_id'], ['add_on_services.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_client_service_requests_client_id', 'client_service_requests', ['client_id'])
    op.create_index('ix_client_service_requests_service_id', 'client_service_requests', ['service_id'])
    op.create_index('ix_client_service_requests_status', 'client_service_requests', ['status'])


def downgrade():
    op.drop_table('client_service_requests')
    op.drop_table('add_on_services')
    op.drop_table('users')
    op.drop_table('chat_messages')
    op.drop_table('chats')
    op.drop_table('progress_step_comments')
    op.drop_table('progress_steps')
    op.drop_table('components')
    op.drop_table('calendar_events')
    op.drop_table('payments')
    op.drop_table('invoices')
    op.drop_table('client_links')
    op.drop_table('tags')
    op.drop_table('clients')
