"""Reservation and purchase routes (controllers). No business logic here.

Holder ids are supplied by the caller; authentication happens upstream.
"""

from __future__ import annotations

from flask import Blueprint, request

from rafflehub.errors import raffle_not_found
from rafflehub.schemas.raffle import RaffleSchema
from rafflehub.schemas.reservation import (
    HolderQuerySchema,
    HolderTicketsSchema,
    PurchaseRequestSchema,
    ReservationSchema,
    ReserveRequestSchema,
)
from rafflehub.services.registry import get_services
from rafflehub.utils.responses import ok

reservations_bp = Blueprint("reservations", __name__)

_reserve_schema = ReserveRequestSchema()
_holder_query_schema = HolderQuerySchema()
_purchase_schema = PurchaseRequestSchema()
_reservations_schema = ReservationSchema(many=True)
_raffle_schema = RaffleSchema()
_holder_tickets_schema = HolderTicketsSchema(many=True)


def _require_raffle(raffle_id: str) -> None:
    if not get_services().catalog.exists(raffle_id):
        raise raffle_not_found(raffle_id)


@reservations_bp.post("/raffles/<raffle_id>/reservations")
def reserve_ticket(raffle_id: str):
    """Hold a number. A taken number is not an error: ``reserved`` is false."""

    payload = request.get_json(silent=True) or {}
    data = _reserve_schema.load(payload)

    ledger = get_services().ledger
    reserved = ledger.reserve(raffle_id, data["ticket_number"], data["holder_id"])
    return ok(
        {
            "raffle_id": raffle_id,
            "ticket_number": data["ticket_number"],
            "reserved": reserved,
            "reservations": _reservations_schema.dump(ledger.claims_for_holder(raffle_id, data["holder_id"])),
        }
    )


@reservations_bp.get("/raffles/<raffle_id>/reservations")
def list_holder_reservations(raffle_id: str):
    args = _holder_query_schema.load(request.args)
    _require_raffle(raffle_id)

    claims = get_services().ledger.claims_for_holder(raffle_id, args["holder_id"])
    return ok(_reservations_schema.dump(claims))


@reservations_bp.delete("/raffles/<raffle_id>/reservations/<int:ticket_number>")
def release_ticket(raffle_id: str, ticket_number: int):
    args = _holder_query_schema.load(request.args)

    get_services().ledger.release(raffle_id, ticket_number, args["holder_id"])
    return ok({"raffle_id": raffle_id, "ticket_number": ticket_number})


@reservations_bp.delete("/raffles/<raffle_id>/reservations")
def release_all_tickets(raffle_id: str):
    """Abandon a selection: drop every claim of the holder in this raffle."""

    args = _holder_query_schema.load(request.args)

    get_services().ledger.release_all(args["holder_id"], raffle_id)
    return ok({"raffle_id": raffle_id})


@reservations_bp.post("/raffles/<raffle_id>/purchases")
def purchase_tickets(raffle_id: str):
    payload = request.get_json(silent=True) or {}
    data = _purchase_schema.load(payload)

    raffle = get_services().allocator.purchase(raffle_id, data["ticket_numbers"], data["holder_id"])
    return ok(_raffle_schema.dump(raffle))


@reservations_bp.get("/holders/<holder_id>/tickets")
def holder_tickets(holder_id: str):
    """Ticket history of a buyer, grouped by raffle."""

    history = get_services().allocator.tickets_for_holder(holder_id)
    return ok(_holder_tickets_schema.dump(history))
