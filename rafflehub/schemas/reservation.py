"""Schemas for reservation and purchase calls."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class ReserveRequestSchema(Schema):
    ticket_number = fields.Int(required=True, strict=True, validate=validate.Range(min=1))
    holder_id = fields.Str(required=True, validate=validate.Length(min=1))


class HolderQuerySchema(Schema):
    """``?holder_id=`` on release and listing calls."""

    holder_id = fields.Str(required=True, validate=validate.Length(min=1))


class PurchaseRequestSchema(Schema):
    ticket_numbers = fields.List(
        fields.Int(strict=True, validate=validate.Range(min=1)),
        required=True,
        validate=validate.Length(min=1),
    )
    holder_id = fields.Str(required=True, validate=validate.Length(min=1))


class ReservationSchema(Schema):
    raffle_id = fields.Str(required=True)
    ticket_number = fields.Int(required=True)
    holder_id = fields.Str(required=True)
    expires_at = fields.DateTime(required=True)


class HolderTicketsSchema(Schema):
    raffle_id = fields.Str(required=True)
    raffle_title = fields.Str(required=True)
    ticket_numbers = fields.List(fields.Int(), required=True)
