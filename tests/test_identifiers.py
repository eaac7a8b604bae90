import threading

import pytest
from django.db import DatabaseError, OperationalError, connection

from apps.orders import identifiers
from apps.orders.identifiers import is_fallback_identifier, next_item_code, next_order_number
from apps.orders.models import IdentifierSequence, Order


def _broken_counter(name, start):
    raise DatabaseError("sequence unavailable")


@pytest.mark.django_db
def test_order_numbers_start_at_10000_and_increase():
    numbers = [next_order_number() for _ in range(3)]
    assert numbers == ["10000", "10001", "10002"]


@pytest.mark.django_db
def test_item_codes_have_their_own_sequence():
    assert next_order_number() == "10000"
    assert next_item_code() == "100000"
    assert next_item_code() == "100001"
    assert IdentifierSequence.objects.get(name=IdentifierSequence.KIND_ORDER_NUMBER).value == 10000


@pytest.mark.django_db
def test_counter_skips_values_already_in_use():
    Order.objects.create(order_number="10000", phone="1")
    Order.objects.create(order_number="10001", phone="2")
    assert next_order_number() == "10002"


@pytest.mark.django_db
def test_fallback_scans_numeric_maximum():
    Order.objects.create(order_number="9999", phone="1")
    Order.objects.create(order_number="10005", phone="2")
    Order.objects.create(order_number="10004-1234", phone="3")
    # "9999" > "10005" as strings; the scan compares numbers
    assert next_order_number(counter=_broken_counter) == "10006"


@pytest.mark.django_db
def test_fallback_on_empty_table_uses_start():
    assert next_order_number(counter=_broken_counter) == "10000"


@pytest.mark.django_db
def test_fallback_collision_appends_suffix(monkeypatch):
    Order.objects.create(order_number="10003", phone="1")
    # scan reports a stale maximum so the candidate already exists
    monkeypatch.setattr("apps.orders.identifiers._max_numeric", lambda model, field: 10002)

    value = next_order_number(counter=_broken_counter)

    base, suffix = value.split("-")
    assert base == "10003"
    assert len(suffix) == 4 and suffix.isdigit()
    assert is_fallback_identifier(value)
    assert not is_fallback_identifier("10003")


@pytest.mark.django_db
def test_sequential_identifiers_are_unique(order, product):
    from apps.orders.services import add_item_to_order

    for _ in range(5):
        add_item_to_order(order, product)
    codes = list(order.items.values_list("item_code", flat=True))
    assert len(codes) == len(set(codes)) == 7


@pytest.mark.django_db
def test_fallback_moves_counter_past_issued_value():
    Order.objects.create(order_number="10005", phone="1")

    assert next_order_number(counter=_broken_counter) == "10006"
    assert IdentifierSequence.objects.get(name=IdentifierSequence.KIND_ORDER_NUMBER).value == 10006
    # the counter picks up after the fallback value instead of re-issuing it
    assert next_order_number() == "10007"


@pytest.mark.django_db
def test_fallback_never_moves_counter_backwards():
    for _ in range(3):
        next_order_number()  # counter at 10002

    assert next_order_number(counter=_broken_counter) == "10000"
    assert IdentifierSequence.objects.get(name=IdentifierSequence.KIND_ORDER_NUMBER).value == 10002
    assert next_order_number() == "10003"


@pytest.mark.django_db
def test_busy_counter_is_retried(monkeypatch):
    monkeypatch.setattr(identifiers, "LOCK_RETRY_DELAY", 0)
    calls = []

    def flaky(name, start):
        calls.append(name)
        if len(calls) == 1:
            raise OperationalError("database is locked")
        return identifiers._counter_next(name, start)

    assert next_order_number(counter=flaky) == "10000"
    assert len(calls) == 2
    assert not Order.objects.exists()


@pytest.mark.django_db
def test_counter_locked_on_every_attempt_falls_back(monkeypatch):
    monkeypatch.setattr(identifiers, "LOCK_RETRY_DELAY", 0)
    Order.objects.create(order_number="10010", phone="1")

    def locked(name, start):
        raise OperationalError("database is locked")

    assert next_order_number(counter=locked) == "10011"
    assert next_order_number() == "10012"


@pytest.mark.django_db(transaction=True)
def test_concurrent_order_numbers_are_unique():
    results = []
    errors = []

    def worker():
        try:
            for _ in range(10):
                results.append(next_order_number())
        except Exception as e:  # noqa: BLE001
            errors.append(e)
        finally:
            connection.close()

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    assert len(results) == len(set(results)) == 40
