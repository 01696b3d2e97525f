"""
access_core.db.repositories.entitlements

Repositories for the entities the entitlement gatekeeper reads.

Responsibilities:
- Fetch tickets, products and events by document id.
- Answer the scanner-authority question for an event.
- Persist the scan transition when tickets are single-use.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from access_core.db.models import Event, EventScanner, Product, Ticket, TicketStatus


class TicketRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_document_id(self, document_id: str) -> Ticket | None:
        stmt = select(Ticket).where(Ticket.document_id == document_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def mark_consumed(self, ticket: Ticket, *, at: datetime) -> bool:
        """
        Claim the ticket for a single entry.

        The update only matches an unconsumed row, so of two concurrent scans
        exactly one gets `True`.
        """

        stmt = (
            update(Ticket)
            .where(Ticket.id == ticket.id, Ticket.consumed_at.is_(None))
            .values(status=TicketStatus.accepted, consumed_at=at, updated_at=at)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1


class ProductRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_document_id(self, document_id: str) -> Product | None:
        stmt = select(Product).where(Product.document_id == document_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()


class EventRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_document_id(self, document_id: str) -> Event | None:
        stmt = select(Event).where(Event.document_id == document_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def is_scanner(self, *, event_id: int, user_id: int) -> bool:
        stmt = select(EventScanner.id).where(
            EventScanner.event_id == event_id, EventScanner.user_id == user_id
        )
        return (await self._session.execute(stmt)).first() is not None
