"""
Test configuration and fixtures.

Provides:
- Temporary SQLite database with the schema created once per session
- Database session with savepoint (rollback after each test)
- Tenant, user, staff and service fixtures
- TenantScope per role for service-level tests
- HTTPX AsyncClient with JWT cookie and CSRF header
"""
import os
import tempfile
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Callable, Generator

_DB_DIR = tempfile.mkdtemp(prefix="booking-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["TESTING"] = "1"
os.environ["ENV"] = "test"

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import Session

from booking_api.main import app
from booking_api.db.base import Base
from booking_api.db.session import engine, SessionLocal
from booking_api.core.deps import get_db, COOKIE_NAME
from booking_api.core.security import create_session_token
from booking_api.db.models import Service, Staff, StaffService, Tenant, User
from booking_api.db.enums import Role
from booking_api.db.tenant_scope import TenantScope
from booking_api.schemas.auth import TenantContext


# =============================================================================
# Time helpers
# =============================================================================

def next_weekday(weekday: int, hour: int = 9, minute: int = 0, weeks_ahead: int = 1) -> datetime:
    """
    UTC datetime on the given Python weekday (Monday=0) at least a week out.
    """
    today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    days = (weekday - today.weekday()) % 7 + 7 * weeks_ahead
    return today + timedelta(days=days, hours=hour, minutes=minute)


def next_monday(hour: int = 9, minute: int = 0) -> datetime:
    return next_weekday(0, hour, minute)


# =============================================================================
# Database Fixtures (Savepoint pattern)
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def create_schema() -> Generator[None, None, None]:
    """Create all tables once for the test session."""
    Base.metadata.create_all(bind=engine)
    yield
    engine.dispose()


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Creates a database session with savepoint for test isolation.
    
    App code may call commit() and rollback(); both only touch the
    savepoint, and the outer transaction is rolled back at the end.
    Fixtures commit their rows so a rollback inside a test keeps them.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session = SessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()


# =============================================================================
# Data Fixtures
# =============================================================================

def make_tenant(db: Session, name: str = "Test Salon") -> Tenant:
    tenant = Tenant(
        id=uuid.uuid4(),
        name=name,
        slug=f"tenant-{uuid.uuid4().hex[:8]}",
        currency="USD",
    )
    db.add(tenant)
    db.commit()
    return tenant


def make_user(db: Session, role: Role = Role.CLIENT, name: str = "Test User") -> User:
    user = User(
        id=uuid.uuid4(),
        name=name,
        email=f"user-{uuid.uuid4().hex[:8]}@test.com",
        role=role.value,
    )
    db.add(user)
    db.commit()
    return user


def make_staff(db: Session, tenant: Tenant, name: str = "Alex") -> Staff:
    staff = Staff(id=uuid.uuid4(), tenant_id=tenant.id, name=name)
    db.add(staff)
    db.commit()
    return staff


def make_service(
    db: Session,
    tenant: Tenant,
    title: str = "Haircut",
    duration_minutes: int = 60,
    price: Decimal = Decimal("50.00"),
) -> Service:
    service = Service(
        id=uuid.uuid4(),
        tenant_id=tenant.id,
        title=title,
        duration_minutes=duration_minutes,
        price=price,
        currency=tenant.currency,
        active=True,
    )
    db.add(service)
    db.commit()
    return service


def link(db: Session, tenant: Tenant, staff: Staff, service: Service) -> StaffService:
    assignment = StaffService(tenant_id=tenant.id, staff_id=staff.id, service_id=service.id)
    db.add(assignment)
    db.commit()
    return assignment


@pytest.fixture(scope="function")
def tenant(db: Session) -> Tenant:
    return make_tenant(db)


@pytest.fixture(scope="function")
def other_tenant(db: Session) -> Tenant:
    return make_tenant(db, name="Other Salon")


@pytest.fixture(scope="function")
def owner(db: Session) -> User:
    return make_user(db, Role.OWNER, name="Owner")


@pytest.fixture(scope="function")
def client_user(db: Session) -> User:
    return make_user(db, Role.CLIENT, name="Client")


@pytest.fixture(scope="function")
def staff(db: Session, tenant: Tenant) -> Staff:
    return make_staff(db, tenant)


@pytest.fixture(scope="function")
def service(db: Session, tenant: Tenant) -> Service:
    return make_service(db, tenant)


@pytest.fixture(scope="function")
def assigned(db: Session, tenant: Tenant, staff: Staff, service: Service) -> StaffService:
    return link(db, tenant, staff, service)


# =============================================================================
# Scope Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def scope_for(db: Session) -> Callable[..., TenantScope]:
    """Factory: TenantScope for a tenant and role."""
    def _make(tenant: Tenant, role: Role = Role.OWNER, user: User | None = None) -> TenantScope:
        ctx = TenantContext(
            tenant_id=tenant.id,
            user_id=user.id if user else uuid.uuid4(),
            role=role,
        )
        return TenantScope(db, ctx)
    return _make


@pytest.fixture(scope="function")
def owner_scope(scope_for, tenant: Tenant, owner: User) -> TenantScope:
    return scope_for(tenant, Role.OWNER, owner)


@pytest.fixture(scope="function")
def client_scope(scope_for, tenant: Tenant, client_user: User) -> TenantScope:
    return scope_for(tenant, Role.CLIENT, client_user)


# =============================================================================
# Auth / Client Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    __test__ = False

    user: User
    tenant: Tenant
    role: Role
    token: str
    cookie_name: str = COOKIE_NAME


def make_auth(user: User, tenant: Tenant, role: Role) -> TestAuth:
    token = create_session_token(user_id=user.id, tenant_id=tenant.id, role=role.value)
    return TestAuth(user=user, tenant=tenant, role=role, token=token)


@pytest.fixture(scope="function")
def api_client(db: Session) -> Generator[Callable[..., AsyncClient], None, None]:
    """
    Factory for AsyncClients sharing the test session.

    Pass a TestAuth for an authenticated client (JWT cookie + CSRF header).
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    def _make(auth: TestAuth | None = None, csrf: bool = True) -> AsyncClient:
        headers = {"X-Requested-With": "XMLHttpRequest"} if csrf else {}
        cookies = {auth.cookie_name: auth.token} if auth else {}
        return AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            cookies=cookies,
            headers=headers,
        )

    yield _make

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def owner_client(api_client, owner: User, tenant: Tenant) -> AsyncGenerator[AsyncClient, None]:
    async with api_client(make_auth(owner, tenant, Role.OWNER)) as c:
        yield c


@pytest.fixture(scope="function")
async def booking_client(
    api_client, client_user: User, tenant: Tenant
) -> AsyncGenerator[AsyncClient, None]:
    async with api_client(make_auth(client_user, tenant, Role.CLIENT)) as c:
        yield c
