"""
Concurrent booking race.

Two requests for the same staff and slot run in separate threads, each with
its own session and transaction against committed data. At most one may win.
"""

import threading
import uuid
from decimal import Decimal

from booking_api.core.exceptions import ConflictError
from booking_api.db.enums import AppointmentStatus, Role
from booking_api.db.models import Appointment, Service, Staff, StaffService, Tenant, User
from booking_api.db.session import SessionLocal
from booking_api.db.tenant_scope import TenantScope
from booking_api.schemas.auth import TenantContext
from booking_api.services import appointment_service

from conftest import next_monday


def _seed() -> dict:
    """Commit a tenant with one staff member, one service and two clients."""
    session = SessionLocal()
    try:
        tenant = Tenant(name="Race Salon", slug=f"race-{uuid.uuid4().hex[:8]}")
        clients = [
            User(name=f"Racer {i}", email=f"racer-{uuid.uuid4().hex[:8]}@test.com", role=Role.CLIENT.value)
            for i in range(2)
        ]
        session.add_all([tenant, *clients])
        session.flush()

        staff = Staff(tenant_id=tenant.id, name="Busy")
        service = Service(
            tenant_id=tenant.id,
            title="Cut",
            duration_minutes=30,
            price=Decimal("25"),
            currency="USD",
        )
        session.add_all([staff, service])
        session.flush()
        session.add(StaffService(tenant_id=tenant.id, staff_id=staff.id, service_id=service.id))
        session.commit()

        return {
            "tenant_id": tenant.id,
            "staff_id": staff.id,
            "service_id": service.id,
            "client_ids": [c.id for c in clients],
        }
    finally:
        session.close()


def test_two_racing_bookings_one_wins():
    seed = _seed()
    start = next_monday(9)
    end = next_monday(9, 30)
    barrier = threading.Barrier(2)
    results: list = [None, None]

    def book(index: int) -> None:
        session = SessionLocal()
        try:
            scope = TenantScope(
                session,
                TenantContext(
                    tenant_id=seed["tenant_id"],
                    user_id=seed["client_ids"][index],
                    role=Role.CLIENT,
                ),
            )
            barrier.wait(timeout=10)
            appointment = appointment_service.create_appointment(
                scope,
                service_id=seed["service_id"],
                staff_id=seed["staff_id"],
                client_id=seed["client_ids"][index],
                start=start,
                end=end,
            )
            results[index] = appointment.id
        except Exception as exc:  # collected for the assertions below
            results[index] = exc
        finally:
            session.close()

    threads = [threading.Thread(target=book, args=(i,)) for i in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    winners = [r for r in results if isinstance(r, uuid.UUID)]
    losers = [r for r in results if isinstance(r, ConflictError)]
    assert len(winners) == 1, results
    assert len(losers) == 1, results

    session = SessionLocal()
    try:
        active = session.query(Appointment).filter(
            Appointment.tenant_id == seed["tenant_id"],
            Appointment.staff_id == seed["staff_id"],
            Appointment.status == AppointmentStatus.PENDING.value,
        ).count()
        assert active == 1
    finally:
        session.close()
