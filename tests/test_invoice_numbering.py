from concurrent.futures import ThreadPoolExecutor
from datetime import date
import random
import re

import pytest

from billing.errors import NumberGenerationFailed
from billing.models import BusinessOwner, BusinessSettings, Customer, Invoice
from billing.services.counters import next_value
from billing.services.numbering import (
    clean_prefix,
    derive_invoice_number,
    next_item_code,
    next_part_number,
    prefix_for_type,
)
from billing.services.sequence_source import (
    CounterSequenceSource,
    SequenceSource,
    TimestampSequenceSource,
)


class FixedSequenceSource(SequenceSource):
    def __init__(self, suffixes):
        self.suffixes = list(suffixes)
        self.calls = 0

    def next_suffix(self, db, owner_id, invoice_type, year):
        self.calls += 1
        return self.suffixes.pop(0)


def _owner(db_session, business_name="Numbering Co"):
    owner = BusinessOwner(
        name="Ravi",
        phone=f"90{random.randint(10000000, 99999999)}",
        password_hash="x",
        business_name=business_name,
    )
    db_session.add(owner)
    db_session.commit()
    return owner


def _invoice(db_session, owner, number):
    customer = Customer(owner_id=owner.id, name="Walk-in", phone=number)
    db_session.add(customer)
    db_session.flush()
    invoice = Invoice(
        owner_id=owner.id,
        customer_id=customer.id,
        invoice_number=number,
        invoice_date=date(2026, 1, 5),
        due_date=date(2026, 2, 5),
        customer_name=customer.name,
    )
    db_session.add(invoice)
    db_session.commit()
    return invoice


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("inv-2026", "INV-2026"),
        ("  a/b c#1 ", "ABC1"),
        ("--SALE--", "SALE"),
        ("ABCDEFGHIJKLMNOPQRST", "ABCDEFGHIJKLMNO"),
        ("@@@", None),
        ("", None),
        (None, None),
    ],
)
def test_clean_prefix(raw, expected):
    assert clean_prefix(raw) == expected


def test_default_prefixes_per_type():
    assert prefix_for_type(None, "SALES", 2026) == "SALE-2026"
    assert prefix_for_type(None, "PURCHASE", 2026) == "PUR-2026"
    assert prefix_for_type(None, "QUOTATION", 2026) == "QUOT-2026"


def test_configured_prefix_is_used_per_type():
    row = BusinessSettings(sales_invoice_prefix="acme", quotation_invoice_prefix="")

    assert prefix_for_type(row, "SALES", 2026) == "ACME"
    assert prefix_for_type(row, "QUOTATION", 2026) == "QUOT-2026"
    assert prefix_for_type(row, "PURCHASE", 2026) == "PUR-2026"


def test_counter_source_yields_consecutive_numbers(db_session):
    owner = _owner(db_session)

    first = derive_invoice_number(db_session, owner.id, "SALES", year=2026)
    second = derive_invoice_number(db_session, owner.id, "SALES", year=2026)

    assert first == "SALE-2026-00001"
    assert second == "SALE-2026-00002"


def test_counter_series_are_independent_per_type_and_tenant(db_session):
    first_owner = _owner(db_session, "Tenant One")
    second_owner = _owner(db_session, "Tenant Two")

    derive_invoice_number(db_session, first_owner.id, "SALES", year=2026)
    purchase = derive_invoice_number(db_session, first_owner.id, "PURCHASE", year=2026)
    other_tenant = derive_invoice_number(
        db_session, second_owner.id, "SALES", year=2026
    )

    assert purchase == "PUR-2026-00001"
    assert other_tenant == "SALE-2026-00001"


def test_collision_is_retried(db_session):
    owner = _owner(db_session)
    _invoice(db_session, owner, "SALE-2026-00001")
    source = FixedSequenceSource(["00001", "00002"])

    number = derive_invoice_number(
        db_session, owner.id, "SALES", source=source, year=2026
    )

    assert number == "SALE-2026-00002"
    assert source.calls == 2


def test_uniqueness_is_global_across_tenants(db_session):
    first_owner = _owner(db_session, "Tenant One")
    second_owner = _owner(db_session, "Tenant Two")
    _invoice(db_session, first_owner, "SALE-2026-00001")

    number = derive_invoice_number(db_session, second_owner.id, "SALES", year=2026)

    assert number == "SALE-2026-00002"


def test_exhausted_retries_raise(db_session):
    owner = _owner(db_session)
    _invoice(db_session, owner, "SALE-2026-00007")
    source = FixedSequenceSource(["00007"] * 3)

    with pytest.raises(NumberGenerationFailed):
        derive_invoice_number(
            db_session, owner.id, "SALES", source=source, max_attempts=3, year=2026
        )
    assert source.calls == 3


def test_timestamp_source_format(db_session):
    source = TimestampSequenceSource(rng=random.Random(7))

    suffix = source.next_suffix(db_session, 1, "SALES", 2026)

    assert re.fullmatch(r"\d{9}", suffix)


def test_counter_source_pads_to_five_digits(db_session):
    owner = _owner(db_session)
    source = CounterSequenceSource()

    assert source.next_suffix(db_session, owner.id, "QUOTATION", 2026) == "00001"


def test_concurrent_generation_yields_distinct_numbers(SessionLocal, db_session):
    owner_id = _owner(db_session).id

    def generate(_):
        with SessionLocal() as session:
            number = derive_invoice_number(session, owner_id, "SALES", year=2026)
            session.commit()
            return number

    with ThreadPoolExecutor(max_workers=4) as pool:
        numbers = list(pool.map(generate, range(12)))

    assert len(set(numbers)) == 12
    assert sorted(numbers)[-1] == "SALE-2026-00012"


def test_counter_increments_are_atomic_across_sessions(SessionLocal):
    def bump(_):
        with SessionLocal() as session:
            value = next_value(session, "stress")
            session.commit()
            return value

    with ThreadPoolExecutor(max_workers=4) as pool:
        values = list(pool.map(bump, range(20)))

    assert sorted(values) == list(range(1, 21))


def test_item_codes_use_their_own_counters(db_session):
    owner = _owner(db_session)

    assert next_item_code(db_session, owner.id, "ITM") == "ITM-001"
    assert next_item_code(db_session, owner.id, "ITM") == "ITM-002"
    assert next_part_number(db_session, owner.id, "PN") == "PN-001"
