"""Sold ticket numbers (terminal state of a ticket)."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rafflehub.models.base import Base

if TYPE_CHECKING:
    from rafflehub.models.raffle import Raffle


class SoldTicket(Base):
    """One sold number of a raffle and the holder who bought it."""

    __tablename__ = "sold_tickets"
    __table_args__ = (UniqueConstraint("raffle_id", "number", name="uq_sold_ticket_raffle_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    raffle_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("raffles.id", ondelete="CASCADE"), index=True, nullable=False
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    holder_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    purchased_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    raffle: Mapped["Raffle"] = relationship(back_populates="sold_tickets")
