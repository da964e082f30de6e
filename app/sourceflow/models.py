from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class Customer(Base):
    __tablename__ = "customers"

    customer_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    requests: Mapped[list["SourcingRequest"]] = relationship("SourcingRequest", back_populates="customer")


class Status(Base):
    """
    Workflow stage of a sourcing request.
    Ids are explicit (seeded 1..4) so forms can post them and 1 can be the default.
    """

    __tablename__ = "statuses"

    status_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    status_name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)


# Default workflow; (status_id, status_name). The first entry is the status new requests get.
DEFAULT_STATUSES: tuple[tuple[int, str], ...] = (
    (1, "New"),
    (2, "In Progress"),
    (3, "Sourced"),
    (4, "Completed"),
)

DEMO_CUSTOMER = {
    "full_name": "Demo Customer",
    "email": "demo@sourceflow.local",
    "phone": "0000000000",
}


# Ensure module models are imported so Base.metadata includes their tables.
# (Kept at bottom to avoid circular imports.)
from app.sourceflow.modules.sourcing_requests.models import RequestNote, SourcingRequest  # noqa: E402,F401
