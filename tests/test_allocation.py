"""Tests for the purchase flow and buyer ticket history."""

from __future__ import annotations

import threading

import pytest

from rafflehub.errors import NotFoundError, ValidationError


def test_purchase_after_reserve_sells_and_clears_claim(services, raffle):
    services.ledger.reserve(raffle.id, 4, "A")

    record = services.allocator.purchase(raffle.id, [4], "A")

    assert record.sold_tickets == [4]
    assert services.catalog.get_sold_tickets(raffle.id) == [4]
    assert services.ledger.active_claims(raffle.id) == []


def test_end_to_end_reserve_expire_purchase(services, raffle, clock):
    ledger = services.ledger

    assert ledger.reserve(raffle.id, 3, "u1") is True
    assert ledger.reserve(raffle.id, 3, "u2") is False
    clock.advance(minutes=5, seconds=1)
    assert ledger.reserve(raffle.id, 3, "u2") is True

    services.allocator.purchase(raffle.id, [3], "u2")

    assert services.catalog.get_sold_tickets(raffle.id) == [3]


def test_purchase_not_resurrected_by_sweep(services, raffle, clock):
    services.ledger.reserve(raffle.id, 8, "A")
    services.allocator.purchase(raffle.id, [8], "A")

    clock.advance(minutes=30)

    assert services.ledger.sweep_expired() == 0
    assert services.catalog.get_sold_tickets(raffle.id) == [8]
    assert services.ledger.reserve(raffle.id, 8, "B") is False


def test_purchase_deduplicates_numbers(services, raffle):
    record = services.allocator.purchase(raffle.id, [5, 3, 5, 3], "A")

    assert record.sold_tickets == [3, 5]


def test_purchase_keeps_unpurchased_claims(services, raffle):
    ledger = services.ledger
    for n in (1, 2, 3):
        ledger.reserve(raffle.id, n, "A")

    services.allocator.purchase(raffle.id, [1, 3], "A")

    assert [c.ticket_number for c in ledger.active_claims(raffle.id)] == [2]


def test_purchase_removes_only_buyer_claims(services, raffle):
    ledger = services.ledger
    ledger.reserve(raffle.id, 2, "B")

    services.allocator.purchase(raffle.id, [1, 2], "A")

    # B's claim stays until it expires or is released; the number is sold anyway.
    assert [c.holder_id for c in ledger.active_claims(raffle.id)] == ["B"]
    assert services.catalog.get_sold_tickets(raffle.id) == [1, 2]


def test_already_sold_numbers_are_skipped(services, raffle):
    services.allocator.purchase(raffle.id, [3], "A")

    record = services.allocator.purchase(raffle.id, [3, 5], "B")

    assert record.sold_tickets == [3, 5]
    history = {h.raffle_id: h.ticket_numbers for h in services.allocator.tickets_for_holder("B")}
    assert history == {raffle.id: [5]}


def test_purchase_rejects_out_of_range_without_selling(services, raffle):
    with pytest.raises(ValidationError) as info:
        services.allocator.purchase(raffle.id, [2, 11], "A")

    assert info.value.details == {"ticket_numbers": [11]}
    assert services.catalog.get_sold_tickets(raffle.id) == []


def test_purchase_requires_numbers_and_holder(services, raffle):
    with pytest.raises(ValidationError):
        services.allocator.purchase(raffle.id, [], "A")
    with pytest.raises(ValidationError):
        services.allocator.purchase(raffle.id, [1], "")


def test_purchase_unknown_raffle(services):
    with pytest.raises(NotFoundError):
        services.allocator.purchase("missing", [1], "A")


def test_tickets_for_holder_grouped_by_raffle(services, make_raffle):
    car = make_raffle(title="Rifa de Auto 0km")
    phone = make_raffle(title="Ultimo Smartphone")

    services.allocator.purchase(car.id, [7, 2], "A")
    services.allocator.purchase(phone.id, [9], "A")
    services.allocator.purchase(car.id, [5], "A")
    services.allocator.purchase(phone.id, [1], "B")

    history = services.allocator.tickets_for_holder("A")

    assert {h.raffle_title: h.ticket_numbers for h in history} == {
        "Rifa de Auto 0km": [2, 5, 7],
        "Ultimo Smartphone": [9],
    }
    assert services.allocator.tickets_for_holder("nobody") == []


def test_concurrent_purchase_and_reserve_never_double_book(services, raffle):
    ledger = services.ledger
    barrier = threading.Barrier(2)
    reserved: list[bool] = []

    def buyer() -> None:
        barrier.wait()
        services.allocator.purchase(raffle.id, list(range(1, 11)), "A")

    def reserver() -> None:
        barrier.wait()
        reserved.extend(ledger.reserve(raffle.id, n, "B") for n in range(1, 11))

    threads = [threading.Thread(target=buyer), threading.Thread(target=reserver)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert services.catalog.get_sold_tickets(raffle.id) == list(range(1, 11))
    # Whatever B managed to hold was taken before the sale committed.
    live = {c.ticket_number for c in ledger.active_claims(raffle.id)}
    assert len(live) == reserved.count(True)
