"""Repository layer for raffle and sold-ticket persistence."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from rafflehub.models.raffle import Raffle
from rafflehub.models.sold_ticket import SoldTicket


@dataclass(frozen=True)
class RaffleRecord:
    """Detached snapshot of a raffle and its sold numbers."""

    id: str
    title: str
    prize: str
    description: str
    image: str
    ai_hint: str
    ticket_price: Decimal
    total_tickets: int
    draw_date: datetime
    creator_id: str
    status: str
    created_at: datetime
    sold_tickets: list[int]

    def has_sales(self) -> bool:
        return bool(self.sold_tickets)

    def in_range(self, ticket_number: int) -> bool:
        return 1 <= ticket_number <= self.total_tickets


@dataclass(frozen=True)
class HolderTicketRow:
    raffle_id: str
    raffle_title: str
    number: int


def to_record(raffle: Raffle) -> RaffleRecord:
    return RaffleRecord(
        id=raffle.id,
        title=raffle.title,
        prize=raffle.prize,
        description=raffle.description or "",
        image=raffle.image or "",
        ai_hint=raffle.ai_hint or "",
        ticket_price=Decimal(raffle.ticket_price),
        total_tickets=int(raffle.total_tickets),
        draw_date=raffle.draw_date,
        creator_id=raffle.creator_id,
        status=raffle.status,
        created_at=raffle.created_at,
        sold_tickets=sorted(int(t.number) for t in raffle.sold_tickets),
    )


class RaffleRepository:
    """CRUD operations for Raffle plus the sold-ticket set."""

    EDITABLE_FIELDS = frozenset(
        {"title", "prize", "description", "image", "ai_hint", "ticket_price", "total_tickets", "draw_date", "status"}
    )

    def list_raffles(self, session: Session) -> Sequence[Raffle]:
        stmt = (
            select(Raffle)
            .options(selectinload(Raffle.sold_tickets))
            .order_by(Raffle.draw_date.desc(), Raffle.created_at.desc())
        )
        return list(session.scalars(stmt).all())

    def get_by_id(self, session: Session, raffle_id: str) -> Raffle | None:
        return session.get(Raffle, raffle_id, options=[selectinload(Raffle.sold_tickets)])

    def create(self, session: Session, fields: Mapping[str, Any], created_at: datetime) -> Raffle:
        raffle = Raffle(
            id=uuid.uuid4().hex,
            title=fields["title"],
            prize=fields["prize"],
            description=fields.get("description") or "",
            image=fields.get("image") or "",
            ai_hint=fields.get("ai_hint") or "",
            ticket_price=Decimal(str(fields["ticket_price"])),
            total_tickets=int(fields["total_tickets"]),
            draw_date=fields["draw_date"],
            creator_id=fields["creator_id"],
            status="open",
            created_at=created_at,
        )
        session.add(raffle)
        session.flush()
        return raffle

    def update(self, session: Session, raffle: Raffle, changes: Mapping[str, Any]) -> Raffle:
        for key, value in changes.items():
            if key not in self.EDITABLE_FIELDS:
                continue
            if key == "ticket_price":
                value = Decimal(str(value))
            setattr(raffle, key, value)
        session.flush()
        return raffle

    def delete(self, session: Session, raffle: Raffle) -> None:
        session.delete(raffle)
        session.flush()

    def sold_numbers(self, session: Session, raffle_id: str) -> set[int]:
        stmt = select(SoldTicket.number).where(SoldTicket.raffle_id == raffle_id)
        return {int(n) for n in session.scalars(stmt).all()}

    def add_sold(
        self,
        session: Session,
        raffle_id: str,
        numbers: Iterable[int],
        holder_id: str,
        purchased_at: datetime,
    ) -> None:
        session.add_all(
            SoldTicket(raffle_id=raffle_id, number=int(n), holder_id=holder_id, purchased_at=purchased_at)
            for n in numbers
        )
        session.flush()

    def tickets_for_holder(self, session: Session, holder_id: str) -> list[HolderTicketRow]:
        stmt = (
            select(SoldTicket.raffle_id, Raffle.title, SoldTicket.number)
            .join(Raffle, Raffle.id == SoldTicket.raffle_id)
            .where(SoldTicket.holder_id == holder_id)
            .order_by(SoldTicket.purchased_at.asc(), SoldTicket.raffle_id.asc(), SoldTicket.number.asc())
        )
        return [
            HolderTicketRow(raffle_id=str(rid), raffle_title=str(title), number=int(number))
            for rid, title, number in session.execute(stmt).all()
        ]
