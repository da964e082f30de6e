from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.sourceflow.models import Base, Customer, Status


class SourcingRequest(Base):
    __tablename__ = "requests"
    __table_args__ = (
        Index("idx_requests_status_id", "status_id"),
        Index("idx_requests_customer_id", "customer_id"),
    )

    request_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.customer_id"), nullable=False)
    status_id: Mapped[int] = mapped_column(ForeignKey("statuses.status_id"), nullable=False)

    item_name: Mapped[str] = mapped_column(Text, nullable=False)
    brand: Mapped[str | None] = mapped_column(Text, nullable=True)
    budget_gbp: Mapped[float | None] = mapped_column(Float, nullable=True)
    size: Mapped[str | None] = mapped_column(Text, nullable=True)
    colour: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    customer: Mapped[Customer] = relationship("Customer", back_populates="requests", lazy="selectin")
    status: Mapped[Status] = relationship("Status", lazy="selectin")
    notes: Mapped[list["RequestNote"]] = relationship(
        "RequestNote",
        back_populates="request",
        cascade="all, delete-orphan",
        order_by="RequestNote.note_id.desc()",
    )


class RequestNote(Base):
    __tablename__ = "request_notes"
    __table_args__ = (
        Index("idx_request_notes_request_id", "request_id", "note_id"),
    )

    note_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    request_id: Mapped[int] = mapped_column(ForeignKey("requests.request_id", ondelete="CASCADE"), nullable=False)

    note_text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    request: Mapped[SourcingRequest] = relationship("SourcingRequest", back_populates="notes")
