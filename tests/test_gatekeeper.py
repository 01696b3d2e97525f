"""
tests.test_gatekeeper

Entitlement validation chain: one scenario per failure code, plus the
single-use consumption policy.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from access_core.db.models import ContentType, Event, EventScanner, Product, Ticket, TicketStatus
from access_core.entitlements.gatekeeper import EntitlementGatekeeper, ScanCode
from conftest import seed_user

NOW = datetime(2026, 5, 1, 18, 30)


async def _seed_event_ticket(
    session_factory,
    *,
    organizer_id: int,
    holder_id: int,
    product_type: ContentType = ContentType.event,
    valid_until: datetime | None = NOW + timedelta(hours=4),
    status: TicketStatus = TicketStatus.issued,
) -> tuple[str, str, str]:
    async with session_factory() as session:
        event = Event(title="Launch Night", organizer_id=organizer_id)
        session.add(event)
        await session.flush()
        product = Product(name="GA", content_type=product_type, item_id=event.document_id)
        session.add(product)
        await session.flush()
        ticket = Ticket(
            holder_id=holder_id,
            product_id=product.document_id,
            event_id=event.document_id,
            valid_until=valid_until,
            status=status,
        )
        session.add(ticket)
        await session.commit()
        return ticket.document_id, product.document_id, event.document_id


@pytest.fixture
def gatekeeper_for(session_factory):
    def _make(session, **kwargs) -> EntitlementGatekeeper:
        return EntitlementGatekeeper(session=session, clock=lambda: NOW, **kwargs)

    return _make


@pytest.mark.asyncio
async def test_unknown_ticket(session_factory, gatekeeper_for) -> None:
    async with session_factory() as session:
        outcome = await gatekeeper_for(session).validate_event_access("missing", 1)
    assert not outcome.success
    assert outcome.code is ScanCode.ticket_not_found


@pytest.mark.asyncio
async def test_deleted_product(session_factory, gatekeeper_for) -> None:
    organizer = await seed_user(session_factory, "org")
    async with session_factory() as session:
        session.add(Ticket(document_id="t-orphan", holder_id=organizer, product_id="gone"))
        await session.commit()

    async with session_factory() as session:
        outcome = await gatekeeper_for(session).validate_event_access("t-orphan", organizer)
    assert outcome.code is ScanCode.product_not_found


@pytest.mark.asyncio
async def test_deleted_event(session_factory, gatekeeper_for) -> None:
    organizer = await seed_user(session_factory, "org")
    async with session_factory() as session:
        product = Product(name="GA", content_type=ContentType.event, item_id="gone")
        session.add(product)
        await session.flush()
        session.add(
            Ticket(
                document_id="t-no-event",
                holder_id=organizer,
                product_id=product.document_id,
                event_id="gone",
            )
        )
        await session.commit()

    async with session_factory() as session:
        outcome = await gatekeeper_for(session).validate_event_access("t-no-event", organizer)
    assert outcome.code is ScanCode.event_not_found


@pytest.mark.asyncio
async def test_course_ticket_is_not_an_event_ticket(session_factory, gatekeeper_for) -> None:
    organizer = await seed_user(session_factory, "org")
    ticket, _, _ = await _seed_event_ticket(
        session_factory,
        organizer_id=organizer,
        holder_id=organizer,
        product_type=ContentType.course,
    )

    async with session_factory() as session:
        outcome = await gatekeeper_for(session).validate_event_access(ticket, organizer)
    assert outcome.code is ScanCode.not_event_ticket


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("valid_until", "status"),
    [
        (NOW - timedelta(minutes=1), TicketStatus.issued),
        (None, TicketStatus.rejected),
    ],
)
async def test_expired_or_rejected_ticket(session_factory, gatekeeper_for, valid_until, status) -> None:
    organizer = await seed_user(session_factory, "org")
    ticket, _, _ = await _seed_event_ticket(
        session_factory,
        organizer_id=organizer,
        holder_id=organizer,
        valid_until=valid_until,
        status=status,
    )

    async with session_factory() as session:
        outcome = await gatekeeper_for(session).validate_event_access(ticket, organizer)
    assert outcome.code is ScanCode.ticket_expired


@pytest.mark.asyncio
async def test_unauthorized_scanner(session_factory, gatekeeper_for) -> None:
    organizer = await seed_user(session_factory, "org")
    stranger = await seed_user(session_factory, "stranger")
    ticket, _, _ = await _seed_event_ticket(session_factory, organizer_id=organizer, holder_id=organizer)

    async with session_factory() as session:
        outcome = await gatekeeper_for(session).validate_event_access(ticket, stranger)
    assert not outcome.success
    assert outcome.code is ScanCode.unauthorized_scanner


@pytest.mark.asyncio
async def test_delegated_scanner_is_granted(session_factory, gatekeeper_for) -> None:
    organizer = await seed_user(session_factory, "org")
    holder = await seed_user(session_factory, "holder")
    door = await seed_user(session_factory, "door")
    ticket, _, event_doc = await _seed_event_ticket(
        session_factory, organizer_id=organizer, holder_id=holder
    )
    async with session_factory() as session:
        event = (await session.execute(select(Event).where(Event.document_id == event_doc))).scalar_one()
        session.add(EventScanner(event_id=event.id, user_id=door))
        await session.commit()

    async with session_factory() as session:
        outcome = await gatekeeper_for(session).validate_event_access(ticket, door)

    assert outcome.success
    assert outcome.code is ScanCode.granted
    assert outcome.data == {
        "holder": "holder",
        "event": "Launch Night",
        "ticket": ticket,
        "timestamp": NOW.isoformat(),
    }


@pytest.mark.asyncio
async def test_reusable_tickets_by_default(session_factory, gatekeeper_for) -> None:
    organizer = await seed_user(session_factory, "org")
    ticket, _, _ = await _seed_event_ticket(session_factory, organizer_id=organizer, holder_id=organizer)

    for _ in range(2):
        async with session_factory() as session:
            outcome = await gatekeeper_for(session).validate_event_access(ticket, organizer)
        assert outcome.success


@pytest.mark.asyncio
async def test_single_use_policy_consumes_ticket(session_factory, gatekeeper_for) -> None:
    organizer = await seed_user(session_factory, "org")
    ticket, _, _ = await _seed_event_ticket(session_factory, organizer_id=organizer, holder_id=organizer)

    async with session_factory() as session:
        first = await gatekeeper_for(session, consume_policy="mark_consumed").validate_event_access(
            ticket, organizer
        )
    async with session_factory() as session:
        second = await gatekeeper_for(session, consume_policy="mark_consumed").validate_event_access(
            ticket, organizer
        )
        stored = (
            await session.execute(select(Ticket).where(Ticket.document_id == ticket))
        ).scalar_one_or_none()

    assert first.success
    assert second.code is ScanCode.ticket_expired
    assert stored is not None
    assert stored.status == TicketStatus.accepted
    assert stored.consumed_at == NOW


@pytest.mark.asyncio
async def test_concurrent_single_use_scans_grant_once(session_factory, gatekeeper_for) -> None:
    organizer = await seed_user(session_factory, "org")
    ticket, _, _ = await _seed_event_ticket(session_factory, organizer_id=organizer, holder_id=organizer)

    async def scan():
        async with session_factory() as session:
            return await gatekeeper_for(session, consume_policy="mark_consumed").validate_event_access(
                ticket, organizer
            )

    outcomes = await asyncio.gather(scan(), scan())

    assert sorted(o.code.value for o in outcomes) == ["ACCESS_GRANTED", "TICKET_EXPIRED"]
