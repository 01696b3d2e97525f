"""
access_core.db.models

Persistence schema consumed by the access core.

Responsibilities:
- Define the ORM models the authorization decisions read:
  - User/Role/RolePermission: identity, role membership and ability grants
  - UploadedFile/FileRelation: protected files and the content they hang off
  - Course/Week/Lesson: the ownership chain walked by the lesson strategy
  - Product/Event/EventScanner/Ticket: entitlements checked at the event door
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Enum, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from access_core.db.base import Base


def _utcnow() -> datetime:
    # Naive UTC timestamps, compared against naive UTC `valid_until` values.
    return datetime.utcnow()


def _document_id() -> str:
    return uuid.uuid4().hex


class ContentType(enum.StrEnum):
    # Values match the product catalogue; treat as stable API contract.
    event = "upevent"
    course = "course"
    livestream = "uplive"
    challenge = "challenge"
    livechat = "livechat"


class TicketStatus(enum.StrEnum):
    issued = "ISSUED"
    presented = "PRESENTED"
    accepted = "ACCEPTED"
    rejected = "REJECTED"


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    # `type` is the machine name role guards compare against (e.g. "authenticated").
    type: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    permissions: Mapped[list[RolePermission]] = relationship(
        back_populates="role", cascade="all, delete-orphan", lazy="selectin"
    )


class RolePermission(Base):
    __tablename__ = "role_permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_id: Mapped[int] = mapped_column(ForeignKey("roles.id"), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(128), nullable=False)
    subject: Mapped[str] = mapped_column(String(128), nullable=False)

    role: Mapped[Role] = relationship(back_populates="permissions")

    __table_args__ = (UniqueConstraint("role_id", "action", "subject"),)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    role_id: Mapped[int | None] = mapped_column(ForeignKey("roles.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    role: Mapped[Role | None] = relationship(lazy="selectin")


class UploadedFile(Base):
    __tablename__ = "files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    url: Mapped[str] = mapped_column(String(512), nullable=False, unique=True)
    mime: Mapped[str] = mapped_column(String(128), nullable=False, default="application/octet-stream")
    # Legacy uploads predate ownership tracking and have no owner.
    owner_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    related: Mapped[list[FileRelation]] = relationship(
        back_populates="file", cascade="all, delete-orphan", lazy="selectin"
    )


class FileRelation(Base):
    __tablename__ = "file_relations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    file_id: Mapped[int] = mapped_column(ForeignKey("files.id"), nullable=False, index=True)
    # Content-type uid such as "api::lesson.lesson"; the strategy registry key.
    content_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    document_id: Mapped[str] = mapped_column(String(64), nullable=False)
    field: Mapped[str | None] = mapped_column(String(64), nullable=True)

    file: Mapped[UploadedFile] = relationship(back_populates="related")


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, default=_document_id)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    owner_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)


class Week(Base):
    __tablename__ = "weeks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, default=_document_id)
    title: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    course_id: Mapped[int | None] = mapped_column(ForeignKey("courses.id"), nullable=True)

    course: Mapped[Course | None] = relationship(lazy="selectin")


class Lesson(Base):
    __tablename__ = "lessons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, default=_document_id)
    title: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    owner_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    week_id: Mapped[int | None] = mapped_column(ForeignKey("weeks.id"), nullable=True)

    week: Mapped[Week | None] = relationship(lazy="selectin")


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, default=_document_id)
    name: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    content_type: Mapped[ContentType] = mapped_column(Enum(ContentType), nullable=False)
    # Document id of the thing being sold (event, course, ...).
    item_id: Mapped[str | None] = mapped_column(String(64), nullable=True)


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, default=_document_id)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    organizer_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)

    scanners: Mapped[list[EventScanner]] = relationship(
        back_populates="event", cascade="all, delete-orphan", lazy="selectin"
    )


class EventScanner(Base):
    __tablename__ = "event_scanners"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    event: Mapped[Event] = relationship(back_populates="scanners")

    __table_args__ = (UniqueConstraint("event_id", "user_id"),)


class Ticket(Base):
    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, default=_document_id)
    holder_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    # Plain document-id references: products/events may be deleted under a live ticket.
    product_id: Mapped[str] = mapped_column(String(64), nullable=False)
    event_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    status: Mapped[TicketStatus] = mapped_column(
        Enum(TicketStatus), nullable=False, default=TicketStatus.issued
    )
    valid_until: Mapped[datetime | None] = mapped_column(nullable=True)
    consumed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    holder: Mapped[User | None] = relationship(lazy="selectin")

    __table_args__ = (Index("ix_tickets_event_status", "event_id", "status"),)


# --- Module Notes -----------------------------------------------------------
# The CRUD side of these content types is owned elsewhere; this schema only
# carries the columns authorization decisions depend on.
