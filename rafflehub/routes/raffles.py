"""Raffle routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from rafflehub.schemas.raffle import (
    RaffleCreateSchema,
    RaffleSchema,
    RaffleUpdateSchema,
    TicketBoardSchema,
)
from rafflehub.services.registry import get_services
from rafflehub.utils.responses import ok

raffles_bp = Blueprint("raffles", __name__)

_raffle_schema = RaffleSchema()
_raffles_schema = RaffleSchema(many=True)
_create_schema = RaffleCreateSchema()
_update_schema = RaffleUpdateSchema()
_board_schema = TicketBoardSchema()


@raffles_bp.get("/raffles")
def list_raffles():
    """List raffles, latest draw date first."""

    raffles = get_services().catalog.list_raffles()
    return ok(_raffles_schema.dump(raffles))


@raffles_bp.post("/raffles")
def create_raffle():
    payload = request.get_json(silent=True) or {}
    data = _create_schema.load(payload)

    raffle = get_services().lifecycle.create_raffle(data)
    return ok(_raffle_schema.dump(raffle), status_code=201)


@raffles_bp.get("/raffles/<raffle_id>")
def get_raffle(raffle_id: str):
    raffle = get_services().catalog.get_raffle(raffle_id)
    return ok(_raffle_schema.dump(raffle))


@raffles_bp.patch("/raffles/<raffle_id>")
def edit_raffle(raffle_id: str):
    """Edit a raffle. Price and ticket count are locked once tickets sell."""

    payload = request.get_json(silent=True) or {}
    changes = _update_schema.load(payload)

    raffle = get_services().lifecycle.edit_raffle(raffle_id, changes)
    return ok(_raffle_schema.dump(raffle))


@raffles_bp.delete("/raffles/<raffle_id>")
def delete_raffle(raffle_id: str):
    get_services().lifecycle.delete_raffle(raffle_id)
    return ok({"id": raffle_id, "deleted": True})


@raffles_bp.get("/raffles/<raffle_id>/tickets")
def ticket_board(raffle_id: str):
    """Sold and currently held numbers for the number grid."""

    services = get_services()
    raffle = services.catalog.get_raffle(raffle_id)
    reserved = [c.ticket_number for c in services.ledger.active_claims(raffle_id)]
    taken = set(raffle.sold_tickets) | set(reserved)
    return ok(
        _board_schema.dump(
            {
                "raffle_id": raffle.id,
                "total_tickets": raffle.total_tickets,
                "sold": raffle.sold_tickets,
                "reserved": reserved,
                "available_count": raffle.total_tickets - len(taken),
            }
        )
    )
