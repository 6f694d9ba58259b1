"""Marshmallow schemas for raffles."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from rafflehub.services.catalog_service import MIN_TOTAL_TICKETS, RAFFLE_STATUSES


class RaffleSchema(Schema):
    """Serialize a raffle snapshot."""

    id = fields.Str(required=True)
    title = fields.Str(required=True)
    prize = fields.Str(required=True)
    description = fields.Str()
    image = fields.Str()
    ai_hint = fields.Str()
    ticket_price = fields.Decimal(required=True, places=2, as_string=True)
    total_tickets = fields.Int(required=True)
    draw_date = fields.DateTime(required=True)
    creator_id = fields.Str(required=True)
    status = fields.Str()
    created_at = fields.DateTime()
    sold_tickets = fields.List(fields.Int())


class RaffleCreateSchema(Schema):
    """Validate create raffle payload."""

    title = fields.Str(required=True, validate=validate.Length(min=5))
    prize = fields.Str(required=True, validate=validate.Length(min=3))
    description = fields.Str(required=False, load_default="")
    image = fields.Url(required=True)
    ai_hint = fields.Str(required=False, load_default="")
    ticket_price = fields.Decimal(required=True, places=2, validate=validate.Range(min=0))
    total_tickets = fields.Int(required=True, strict=True, validate=validate.Range(min=MIN_TOTAL_TICKETS))
    draw_date = fields.DateTime(required=True)
    creator_id = fields.Str(required=True, validate=validate.Length(min=1))


class RaffleUpdateSchema(Schema):
    """Validate a partial raffle edit. Creator and sold tickets are not editable."""

    title = fields.Str(validate=validate.Length(min=5))
    prize = fields.Str(validate=validate.Length(min=3))
    description = fields.Str()
    image = fields.Url()
    ai_hint = fields.Str()
    ticket_price = fields.Decimal(places=2, validate=validate.Range(min=0))
    total_tickets = fields.Int(strict=True, validate=validate.Range(min=MIN_TOTAL_TICKETS))
    draw_date = fields.DateTime()
    status = fields.Str(validate=validate.OneOf(RAFFLE_STATUSES))


class TicketBoardSchema(Schema):
    """Number grid state. Reserved numbers carry no holder ids."""

    raffle_id = fields.Str(required=True)
    total_tickets = fields.Int(required=True)
    sold = fields.List(fields.Int(), required=True)
    reserved = fields.List(fields.Int(), required=True)
    available_count = fields.Int(required=True)
