"""Booking schema - tenants, catalog, scheduling and notification tables

Revision ID: 0001_booking_schema
Revises: 
Create Date: 2026-10-17

Creates the scheduling tables plus the exclusion constraints that keep two
active appointments from overlapping for the same staff member or client.
"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '0001_booking_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create booking tables."""
    
    # ==========================================================================
    # Enable required extensions
    # ==========================================================================
    op.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto')    # For gen_random_uuid()
    op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')  # uuid equality inside GiST exclusion
    
    # ==========================================================================
    # Tenants and users
    # ==========================================================================
    op.execute('''
        CREATE TABLE tenants (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name VARCHAR(255) NOT NULL,
            slug VARCHAR(100) UNIQUE NOT NULL,
            timezone VARCHAR(50) NOT NULL DEFAULT 'UTC',
            currency VARCHAR(3) NOT NULL DEFAULT 'USD',
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            deleted_at TIMESTAMPTZ
        )
    ''')
    
    op.execute('''
        CREATE TABLE users (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name VARCHAR(255) NOT NULL,
            email VARCHAR(255) UNIQUE NOT NULL,
            role VARCHAR(20) NOT NULL DEFAULT 'CLIENT',
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            deleted_at TIMESTAMPTZ
        )
    ''')
    
    # ==========================================================================
    # Catalog
    # ==========================================================================
    op.execute('''
        CREATE TABLE services (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            tenant_id UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            title VARCHAR(255) NOT NULL,
            description TEXT,
            duration_minutes INTEGER NOT NULL,
            price NUMERIC(10, 2) NOT NULL,
            currency VARCHAR(3) NOT NULL,
            active BOOLEAN NOT NULL DEFAULT true,
            meta JSONB,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            deleted_at TIMESTAMPTZ,
            CONSTRAINT ck_service_duration_positive CHECK (duration_minutes > 0),
            CONSTRAINT ck_service_price_non_negative CHECK (price >= 0)
        )
    ''')
    op.execute('CREATE INDEX ix_services_tenant_id ON services(tenant_id)')
    
    op.execute('''
        CREATE TABLE staff (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            tenant_id UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            user_id UUID UNIQUE REFERENCES users(id) ON DELETE SET NULL,
            name VARCHAR(255) NOT NULL,
            bio TEXT,
            avatar VARCHAR(500),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            deleted_at TIMESTAMPTZ
        )
    ''')
    op.execute('CREATE INDEX ix_staff_tenant_id ON staff(tenant_id)')
    
    op.execute('''
        CREATE TABLE staff_services (
            tenant_id UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            staff_id UUID NOT NULL REFERENCES staff(id) ON DELETE CASCADE,
            service_id UUID NOT NULL REFERENCES services(id) ON DELETE CASCADE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            PRIMARY KEY (staff_id, service_id)
        )
    ''')
    op.execute('CREATE INDEX ix_staff_services_tenant_id ON staff_services(tenant_id)')
    op.execute('CREATE INDEX idx_staff_services_service ON staff_services(service_id)')
    
    # ==========================================================================
    # Availability and time off
    # ==========================================================================
    op.execute('''
        CREATE TABLE availabilities (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            tenant_id UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            staff_id UUID NOT NULL REFERENCES staff(id) ON DELETE CASCADE,
            type VARCHAR(20) NOT NULL,
            day_of_week INTEGER,
            start_time VARCHAR(5),
            end_time VARCHAR(5),
            start_date TIMESTAMPTZ,
            end_date TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            deleted_at TIMESTAMPTZ,
            CONSTRAINT ck_availability_day_of_week
                CHECK (day_of_week IS NULL OR (day_of_week >= 0 AND day_of_week <= 6))
        )
    ''')
    op.execute('CREATE INDEX ix_availabilities_tenant_id ON availabilities(tenant_id)')
    op.execute('CREATE INDEX idx_availabilities_staff ON availabilities(staff_id)')
    
    op.execute('''
        CREATE TABLE time_offs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            tenant_id UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            staff_id UUID NOT NULL REFERENCES staff(id) ON DELETE CASCADE,
            start_at TIMESTAMPTZ NOT NULL,
            end_at TIMESTAMPTZ NOT NULL,
            reason VARCHAR(255),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            deleted_at TIMESTAMPTZ,
            CONSTRAINT ck_time_off_interval CHECK (end_at > start_at)
        )
    ''')
    op.execute('CREATE INDEX ix_time_offs_tenant_id ON time_offs(tenant_id)')
    op.execute('CREATE INDEX idx_time_offs_staff ON time_offs(staff_id)')
    
    # ==========================================================================
    # Appointments
    # ==========================================================================
    op.execute('''
        CREATE TABLE appointments (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            tenant_id UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            service_id UUID NOT NULL REFERENCES services(id),
            staff_id UUID NOT NULL REFERENCES staff(id),
            client_id UUID NOT NULL REFERENCES users(id),
            start_at TIMESTAMPTZ NOT NULL,
            end_at TIMESTAMPTZ NOT NULL,
            status VARCHAR(20) NOT NULL DEFAULT 'PENDING',
            price NUMERIC(10, 2) NOT NULL,
            currency VARCHAR(3) NOT NULL,
            notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            canceled_at TIMESTAMPTZ,
            CONSTRAINT ck_appointment_interval CHECK (end_at > start_at)
        )
    ''')
    op.execute('CREATE INDEX ix_appointments_tenant_id ON appointments(tenant_id)')
    op.execute('CREATE INDEX idx_appointments_tenant_start ON appointments(tenant_id, start_at)')
    op.execute('CREATE INDEX idx_appointments_staff_start ON appointments(staff_id, start_at)')
    op.execute('CREATE INDEX idx_appointments_client ON appointments(client_id)')
    
    # Half-open ranges: back-to-back appointments touch but do not overlap
    op.execute('''
        ALTER TABLE appointments ADD CONSTRAINT ex_appointments_staff_overlap
        EXCLUDE USING gist (
            tenant_id WITH =,
            staff_id WITH =,
            tstzrange(start_at, end_at, '[)') WITH &&
        ) WHERE (status IN ('PENDING', 'CONFIRMED'))
    ''')
    op.execute('''
        ALTER TABLE appointments ADD CONSTRAINT ex_appointments_client_overlap
        EXCLUDE USING gist (
            tenant_id WITH =,
            client_id WITH =,
            tstzrange(start_at, end_at, '[)') WITH &&
        ) WHERE (status IN ('PENDING', 'CONFIRMED'))
    ''')
    
    # ==========================================================================
    # Notifications
    # ==========================================================================
    op.execute('''
        CREATE TABLE notifications (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            tenant_id UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            user_id UUID REFERENCES users(id) ON DELETE SET NULL,
            type VARCHAR(50) NOT NULL,
            channel VARCHAR(20) NOT NULL,
            payload JSONB NOT NULL,
            status VARCHAR(20) NOT NULL DEFAULT 'queued',
            sent_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX ix_notifications_tenant_id ON notifications(tenant_id)')
    op.execute('CREATE INDEX idx_notif_tenant_status ON notifications(tenant_id, status, created_at)')


def downgrade() -> None:
    """Drop booking tables."""
    for table in (
        'notifications',
        'appointments',
        'time_offs',
        'availabilities',
        'staff_services',
        'staff',
        'services',
        'users',
        'tenants',
    ):
        op.execute(f'DROP TABLE IF EXISTS {table} CASCADE')
