"""Tests for the raffle catalog and lifecycle manager."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from rafflehub.errors import NotFoundError, SalesLockedError, ValidationError


def test_new_raffle_is_open_with_no_sales(raffle, clock):
    assert raffle.status == "open"
    assert raffle.sold_tickets == []
    assert raffle.total_tickets == 10
    assert raffle.ticket_price == Decimal("25")
    assert raffle.created_at == clock.now
    assert len(raffle.id) == 32


@pytest.mark.parametrize(
    "overrides",
    [
        {"total_tickets": 9},
        {"total_tickets": 10.5},
        {"ticket_price": -1},
        {"ticket_price": "abc"},
        {"title": "   "},
        {"draw_date": "2026-03-01"},
    ],
)
def test_add_raffle_validates_fields(make_raffle, overrides):
    with pytest.raises(ValidationError):
        make_raffle(**overrides)


def test_add_raffle_requires_core_fields(services):
    with pytest.raises(ValidationError) as info:
        services.catalog.add_raffle({"title": "Solo titulo"})

    assert set(info.value.details) == {"prize", "ticket_price", "total_tickets", "draw_date", "creator_id"}


def test_free_raffle_allowed(make_raffle):
    assert make_raffle(ticket_price=0).ticket_price == Decimal("0")


def test_get_unknown_raffle(services):
    with pytest.raises(NotFoundError):
        services.catalog.get_raffle("nope")
    assert services.catalog.exists("nope") is False


def test_list_raffles_latest_draw_first(services, make_raffle):
    early = make_raffle(draw_date=datetime(2026, 2, 1))
    late = make_raffle(draw_date=datetime(2026, 6, 1))

    assert [r.id for r in services.catalog.list_raffles()] == [late.id, early.id]


def test_edit_before_sales_changes_price_and_count(services, raffle):
    record = services.lifecycle.edit_raffle(raffle.id, {"ticket_price": Decimal("30.50"), "total_tickets": 50})

    assert record.ticket_price == Decimal("30.50")
    assert record.total_tickets == 50


def test_edit_price_after_sale_rejected(services, raffle):
    assert not raffle.has_sales()
    services.allocator.purchase(raffle.id, [1], "A")
    assert services.catalog.get_raffle(raffle.id).has_sales()

    with pytest.raises(SalesLockedError) as info:
        services.lifecycle.edit_raffle(raffle.id, {"ticket_price": 99, "title": "Nuevo titulo"})

    assert info.value.code == "sales_locked"
    assert info.value.details == {"fields": ["ticket_price"]}
    current = services.catalog.get_raffle(raffle.id)
    assert current.ticket_price == Decimal("25")
    assert current.title == raffle.title


def test_edit_title_after_sale_succeeds(services, raffle):
    services.allocator.purchase(raffle.id, [1], "A")

    record = services.lifecycle.edit_raffle(raffle.id, {"title": "Rifa de Moto 0km"})

    assert record.title == "Rifa de Moto 0km"
    assert record.sold_tickets == [1]


def test_resubmitting_locked_values_is_not_a_change(services, raffle):
    services.allocator.purchase(raffle.id, [1], "A")

    record = services.lifecycle.edit_raffle(
        raffle.id, {"ticket_price": Decimal("25.00"), "total_tickets": 10, "prize": "Moto"}
    )

    assert record.prize == "Moto"


def test_lenient_mode_drops_locked_fields(services, raffle):
    services.catalog.strict_sales_lock = False
    services.allocator.purchase(raffle.id, [1], "A")

    record = services.lifecycle.edit_raffle(raffle.id, {"ticket_price": 99, "total_tickets": 500, "title": "Nuevo titulo"})

    assert record.ticket_price == Decimal("25")
    assert record.total_tickets == 10
    assert record.title == "Nuevo titulo"


def test_edit_rejects_non_editable_fields(services, raffle):
    with pytest.raises(ValidationError):
        services.lifecycle.edit_raffle(raffle.id, {"sold_tickets": [1, 2]})
    with pytest.raises(ValidationError):
        services.lifecycle.edit_raffle(raffle.id, {"creator_id": "someone-else"})


def test_edit_unknown_raffle(services):
    with pytest.raises(NotFoundError):
        services.lifecycle.edit_raffle("nope", {"title": "Nuevo titulo"})


def test_shrinking_ticket_count_drops_claims_above(services, make_raffle):
    raffle = make_raffle(total_tickets=20)
    services.ledger.reserve(raffle.id, 5, "A")
    services.ledger.reserve(raffle.id, 15, "B")

    services.lifecycle.edit_raffle(raffle.id, {"total_tickets": 10})

    assert [c.ticket_number for c in services.ledger.active_claims(raffle.id)] == [5]
    with pytest.raises(ValidationError):
        services.ledger.reserve(raffle.id, 15, "B")


def test_delete_raffle_drops_claims_and_sales(services, raffle):
    services.allocator.purchase(raffle.id, [1], "A")
    services.ledger.reserve(raffle.id, 2, "B")

    services.lifecycle.delete_raffle(raffle.id)

    with pytest.raises(NotFoundError):
        services.catalog.get_raffle(raffle.id)
    assert services.ledger.active_claims(raffle.id) == []
    assert services.allocator.tickets_for_holder("A") == []
    with pytest.raises(NotFoundError):
        services.ledger.reserve(raffle.id, 2, "B")


def test_delete_unknown_raffle(services):
    with pytest.raises(NotFoundError):
        services.lifecycle.delete_raffle("nope")
