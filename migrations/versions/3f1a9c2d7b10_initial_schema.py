"""initial schema

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3f1a9c2d7b10'
down_revision = None
branch_labels = None
depends_on = None

INVOICE_STATUSES = ('pending', 'unpaid', 'partially_paid', 'paid', 'overdue', 'cancelled')


def upgrade() -> None:
    # -------------------------------
    # Users + sessions
    # -------------------------------
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('username', sa.String(80), nullable=False, unique=True),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('email', sa.String(120)),
        sa.Column('phone', sa.String(30)),
        sa.Column('is_admin', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_verified', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_blocked', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('photo', sa.String(500)),
        sa.Column('bio', sa.Text),
        sa.Column('website', sa.String(255)),
        sa.Column('linkedin', sa.String(255)),
        sa.Column('github', sa.String(255)),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'sessions',
        sa.Column('sid', sa.String(128), primary_key=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('expires_at', sa.DateTime, nullable=False),
        sa.Column('ip_address', sa.String(64)),
        sa.Column('user_agent', sa.String(255)),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])
    op.create_index('ix_sessions_expires_at', 'sessions', ['expires_at'])

    # -------------------------------
    # Public content
    # -------------------------------
    op.create_table(
        'blog_posts',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False, unique=True),
        sa.Column('summary', sa.Text, nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('category', sa.String(80), nullable=False),
        sa.Column('cover_image', sa.String(500)),
        sa.Column('published', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'partners',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(160), nullable=False),
        sa.Column('logo', sa.String(500), nullable=False),
        sa.Column('website', sa.String(255)),
    )

    op.create_table(
        'messages',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('email', sa.String(120), nullable=False),
        sa.Column('company', sa.String(160)),
        sa.Column('service', sa.String(120)),
        sa.Column('message', sa.Text, nullable=False),
        sa.Column('read', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'careers',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('department', sa.String(120), nullable=False),
        sa.Column('location', sa.String(120), nullable=False),
        sa.Column('type', sa.String(40), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('requirements', sa.Text, nullable=False),
        sa.Column('published', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'applications',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('career_id', sa.Integer, sa.ForeignKey('careers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('email', sa.String(120), nullable=False),
        sa.Column('phone', sa.String(30), nullable=False),
        sa.Column('resume', sa.Text, nullable=False),
        sa.Column('cover_letter', sa.Text),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_applications_career_id', 'applications', ['career_id'])
    op.create_index('ix_applications_email', 'applications', ['email'])

    op.create_table(
        'services',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('title', sa.String(160), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False, unique=True),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('icon', sa.String(60), nullable=False),
        sa.Column('active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('display_order', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    # -------------------------------
    # Client projects
    # -------------------------------
    op.create_table(
        'projects',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('service_type', sa.String(120)),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('start_date', sa.Date),
        sa.Column('estimated_end_date', sa.Date),
        sa.Column('completion_percentage', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_projects_user_id', 'projects', ['user_id'])

    op.create_table(
        'project_updates',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('project_id', sa.Integer, sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_project_updates_project_id', 'project_updates', ['project_id'])

    # -------------------------------
    # Invoicing
    # -------------------------------
    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('invoice_number', sa.String(40), nullable=False, unique=True),
        sa.Column('project_id', sa.Integer, sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.String(10), nullable=False, server_default='USD'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('issue_date', sa.Date, nullable=False, server_default=sa.func.current_date()),
        sa.Column('due_date', sa.Date),
        sa.Column('payment_date', sa.DateTime),
        sa.Column('payment_reference', sa.String(120)),
        sa.Column('notes', sa.Text),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "status IN (%s)" % ", ".join(f"'{s}'" for s in INVOICE_STATUSES),
            name='invoice_status',
        ),
    )
    op.create_index('ix_invoices_project_id', 'invoices', ['project_id'])

    op.create_table(
        'invoice_items',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('invoice_id', sa.Integer, sa.ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False),
        sa.Column('description', sa.String(255), nullable=False),
        sa.Column('quantity', sa.Numeric(12, 2), nullable=False, server_default='1'),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax_rate', sa.Numeric(5, 2)),
        sa.Column('tax_amount', sa.Numeric(12, 2)),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_invoice_items_invoice_id', 'invoice_items', ['invoice_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('invoice_id', sa.Integer, sa.ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_date', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('payment_method', sa.String(40), nullable=False),
        sa.Column('transaction_id', sa.String(120)),
        sa.Column('notes', sa.Text),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_payments_invoice_id', 'payments', ['invoice_id'])


def downgrade() -> None:
    for table in (
        'payments',
        'invoice_items',
        'invoices',
        'project_updates',
        'projects',
        'services',
        'applications',
        'careers',
        'messages',
        'partners',
        'blog_posts',
        'sessions',
        'users',
    ):
        op.drop_table(table)
