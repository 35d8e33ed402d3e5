from datetime import date
from decimal import Decimal

import pytest

from carecenter.errors import InvalidArgumentError, MedicineNotFoundError
from carecenter.extensions import db
from carecenter.models import Medicine, Transaction, TransactionItem
from carecenter.services import inventory_service, transaction_service
from carecenter.services.concurrency import atomic_unit
from carecenter.services.inventory_service import (
    STOCK_LOW,
    STOCK_OUT,
    STOCK_SUFFICIENT,
    classify_stock,
)


def test_classify_stock():
    assert classify_stock(0, 10) == STOCK_OUT
    assert classify_stock(0, 0) == STOCK_OUT
    assert classify_stock(10, 10) == STOCK_LOW
    assert classify_stock(3, 10) == STOCK_LOW
    assert classify_stock(11, 10) == STOCK_SUFFICIENT


def test_create_medicine_stores_price_in_cents(make_medicine):
    medicine = make_medicine(price="12.30")
    assert medicine.price_cents == 1230
    assert medicine.price == Decimal("12.30")
    assert medicine.to_dict()["price"] == "12.30"


@pytest.mark.parametrize("price", ["0", "-1.00", "1.999", "abc", 1.5])
def test_create_medicine_rejects_bad_price(make_medicine, price):
    with pytest.raises(InvalidArgumentError):
        make_medicine(price=price)


def test_create_medicine_rejects_negative_stock(make_medicine):
    with pytest.raises(InvalidArgumentError):
        make_medicine(stock=-1)


def test_create_medicine_requires_expiry(make_medicine):
    with pytest.raises(InvalidArgumentError):
        make_medicine(expiry=None)
    with pytest.raises(InvalidArgumentError):
        make_medicine(expiry="31/01/2030")


def test_get_medicine_stock(make_medicine):
    medicine = make_medicine(stock=5, minimum=10)

    stock = inventory_service.get_medicine_stock(medicine.id)

    assert stock == {
        "medicine_id": medicine.id,
        "medicine_name": "Paracetamol 500mg",
        "stock_quantity": 5,
        "minimum_stock": 10,
        "stock_status": STOCK_LOW,
    }


def test_get_medicine_stock_not_found(db_session):
    with pytest.raises(MedicineNotFoundError):
        inventory_service.get_medicine_stock(999_999)


def test_low_stock_by_minimum_and_threshold(make_medicine):
    make_medicine(name="Plenty", stock=100, minimum=10)
    make_medicine(name="Short", stock=8, minimum=10)
    make_medicine(name="Empty", stock=0, minimum=0)

    assert [m.name for m in inventory_service.get_low_stock_medicines()] == ["Empty", "Short"]
    assert [m.name for m in inventory_service.get_low_stock_medicines(threshold=50)] == ["Empty", "Short"]
    assert [m.name for m in inventory_service.get_low_stock_medicines(threshold="100")] == ["Empty", "Short", "Plenty"]

    with pytest.raises(InvalidArgumentError):
        inventory_service.get_low_stock_medicines(threshold=-1)


def test_decrement_requires_lock(medicine):
    with pytest.raises(RuntimeError):
        with atomic_unit("unlocked_decrement"):
            inventory_service.decrement_stock(medicine.id, 1)

    assert inventory_service.get_medicine_stock(medicine.id)["stock_quantity"] == 100


def test_lock_and_fetch_reports_first_missing_id(medicine):
    with pytest.raises(MedicineNotFoundError) as exc_info:
        with atomic_unit("lock"):
            inventory_service.lock_and_fetch([999_998, medicine.id, 999_997])

    assert exc_info.value.medicine_id == 999_997


def test_atomic_units_do_not_nest(db_session):
    with pytest.raises(RuntimeError):
        with atomic_unit("outer"):
            with atomic_unit("inner"):
                pass


def test_medicine_expiry_round_trips(make_medicine):
    medicine = make_medicine(expiry="2031-06-30")
    assert medicine.expiry_date == date(2031, 6, 30)
    assert medicine.to_dict()["expiry_date"] == "2031-06-30"


def test_expiry_with_trailing_text_rejected(make_medicine):
    with pytest.raises(InvalidArgumentError):
        make_medicine(expiry="2030-01-31garbage")


def test_stock_above_column_range_rejected(make_medicine):
    with pytest.raises(InvalidArgumentError):
        make_medicine(stock=10**20)


def test_huge_low_stock_threshold_lists_everything(make_medicine):
    make_medicine(name="Plenty", stock=100, minimum=10)
    assert [m.name for m in inventory_service.get_low_stock_medicines(threshold=10**20)] == ["Plenty"]


def test_money_columns_hold_the_full_price_range():
    for column in (
        Medicine.__table__.c.price_cents,
        Transaction.__table__.c.total_amount_cents,
        TransactionItem.__table__.c.unit_price_cents,
        TransactionItem.__table__.c.subtotal_cents,
    ):
        assert isinstance(column.type, db.BigInteger)


def test_most_expensive_medicine_can_be_sold(patient, make_medicine):
    medicine = make_medicine(price="99999999.99", stock=3)
    txn = transaction_service.create_transaction(patient.id, [(medicine.id, 3)])
    assert txn.total_amount == Decimal("299999999.97")
