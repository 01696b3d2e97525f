"""
access_core.entitlements.gatekeeper

Ticket scan validation at the event door.

Responsibilities:
- Walk the validation chain (ticket -> product -> event -> kind -> validity -> scanner),
  stopping at the first failure with a distinct code.
- Apply the configured consumption policy on a successful scan.
- Produce a `ScanOutcome` for the scan endpoint.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from sqlalchemy.ext.asyncio import AsyncSession

from access_core.db.models import ContentType, Event, Ticket, TicketStatus
from access_core.db.repositories.entitlements import EventRepo, ProductRepo, TicketRepo
from access_core.observability.logging import get_logger

log = get_logger(__name__)

ConsumePolicy = Literal["none", "mark_consumed"]


class ScanCode(enum.StrEnum):
    granted = "ACCESS_GRANTED"
    ticket_not_found = "TICKET_NOT_FOUND"
    product_not_found = "PRODUCT_NOT_FOUND"
    event_not_found = "EVENT_NOT_FOUND"
    not_event_ticket = "NOT_EVENT_TICKET"
    ticket_expired = "TICKET_EXPIRED"
    unauthorized_scanner = "UNAUTHORIZED_SCANNER"


@dataclass(frozen=True, slots=True)
class ScanOutcome:
    success: bool
    code: ScanCode
    message: str
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def fail(cls, code: ScanCode, message: str) -> ScanOutcome:
        return cls(success=False, code=code, message=message)


class EntitlementGatekeeper:
    def __init__(
        self,
        *,
        session: AsyncSession,
        consume_policy: ConsumePolicy = "none",
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._session = session
        self._consume_policy = consume_policy
        self._clock = clock

        self._tickets = TicketRepo(session)
        self._products = ProductRepo(session)
        self._events = EventRepo(session)

    async def validate_event_access(self, ticket_document_id: str, scanner_id: int) -> ScanOutcome:
        ticket = await self._tickets.get_by_document_id(ticket_document_id)
        if ticket is None:
            return ScanOutcome.fail(ScanCode.ticket_not_found, "Invalid ticket reference")

        product = await self._products.get_by_document_id(ticket.product_id)
        if product is None:
            return ScanOutcome.fail(ScanCode.product_not_found, "Ticket product no longer exists")

        event_ref = ticket.event_id or product.item_id
        event = await self._events.get_by_document_id(event_ref) if event_ref else None
        if event is None:
            return ScanOutcome.fail(ScanCode.event_not_found, "Event no longer exists")

        if product.content_type != ContentType.event:
            return ScanOutcome.fail(ScanCode.not_event_ticket, "Not an event ticket")

        now = self._clock()
        if self._is_expired(ticket, now):
            return ScanOutcome.fail(ScanCode.ticket_expired, "Ticket expired or already consumed")

        if not await self._can_scan(event, scanner_id):
            log.info(
                "scan_unauthorized_scanner",
                ticket=ticket_document_id,
                event_id=event.document_id,
                scanner_id=scanner_id,
            )
            return ScanOutcome.fail(
                ScanCode.unauthorized_scanner,
                "You are not an authorized scanner for this event",
            )

        if self._consume_policy == "mark_consumed":
            if not await self._tickets.mark_consumed(ticket, at=now):
                await self._session.rollback()
                log.info("scan_ticket_already_consumed", ticket=ticket_document_id)
                return ScanOutcome.fail(ScanCode.ticket_expired, "Ticket expired or already consumed")
            await self._session.commit()

        log.info("scan_granted", ticket=ticket_document_id, event_id=event.document_id)
        return ScanOutcome(
            success=True,
            code=ScanCode.granted,
            message="Access granted",
            data={
                "holder": ticket.holder.username if ticket.holder else None,
                "event": event.title,
                "ticket": ticket.document_id,
                "timestamp": now.isoformat(),
            },
        )

    @staticmethod
    def _is_expired(ticket: Ticket, now: datetime) -> bool:
        if ticket.valid_until is not None and ticket.valid_until < now:
            return True
        # A consumed or rejected ticket is past its usable life regardless of policy.
        return ticket.consumed_at is not None or ticket.status == TicketStatus.rejected

    async def _can_scan(self, event: Event, scanner_id: int) -> bool:
        if event.organizer_id is not None and event.organizer_id == scanner_id:
            return True
        return await self._events.is_scanner(event_id=event.id, user_id=scanner_id)


# --- Module Notes -----------------------------------------------------------
# Whether a scan consumes the ticket is a deployment decision
# (`Settings.ticket_consume_policy`); the default leaves tickets reusable.
