"""Raffle ORM model.

One row per raffle. Sold ticket numbers live in ``sold_tickets``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rafflehub.models.base import Base

if TYPE_CHECKING:
    from rafflehub.models.sold_ticket import SoldTicket


class Raffle(Base):
    """A raffle published by a creator."""

    __tablename__ = "raffles"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    prize: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    ai_hint: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    ticket_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_tickets: Mapped[int] = mapped_column(Integer, nullable=False)
    draw_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    creator_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="open")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    sold_tickets: Mapped[list["SoldTicket"]] = relationship(
        back_populates="raffle",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SoldTicket.number",
    )
