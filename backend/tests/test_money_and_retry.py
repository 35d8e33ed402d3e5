from datetime import date
from decimal import Decimal

import pytest

from carecenter.errors import ConflictError, InvalidArgumentError, StorageFailureError
from carecenter.money import MoneyError, format_cents, to_cents
from carecenter.time_utils import parse_iso_date
from carecenter.services import patient_service
from carecenter.services.concurrency import run_with_retry
from carecenter.validation import LineItemRequest, parse_line_items, require_int


def test_to_cents_is_exact():
    assert to_cents("5.99") == 599
    assert to_cents(Decimal("8.5")) == 850
    assert to_cents(3) == 300
    assert format_cents(2647) == "26.47"
    assert format_cents(None) is None


@pytest.mark.parametrize("value", [5.99, True, "1.001", "", "NaN", None])
def test_to_cents_rejects(value):
    with pytest.raises(MoneyError):
        to_cents(value)


def test_require_int_is_strict():
    assert require_int(" 42 ", "x") == 42
    for bad in ("1e3", "12.5", 1.0, False, "", "seven"):
        with pytest.raises(InvalidArgumentError):
            require_int(bad, "x")
    with pytest.raises(InvalidArgumentError) as exc_info:
        require_int(0, "quantity", minimum=1)
    assert str(exc_info.value) == "quantity must be > 0"


def test_parse_line_items_accepts_shapes():
    assert parse_line_items([{"medicine_id": "3", "quantity": 2}, (4, 1), LineItemRequest(5, 7)]) == [
        LineItemRequest(3, 2),
        LineItemRequest(4, 1),
        LineItemRequest(5, 7),
    ]


def test_run_with_retry_only_retries_conflicts():
    calls = []

    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise ConflictError("busy")
        return "ok"

    assert run_with_retry(flaky, attempts=3, backoff_base=0) == "ok"
    assert len(calls) == 3

    calls.clear()
    with pytest.raises(ConflictError):
        run_with_retry(flaky, attempts=2, backoff_base=0)
    assert len(calls) == 2

    def broken():
        calls.append(1)
        raise StorageFailureError("disk full")

    calls.clear()
    with pytest.raises(StorageFailureError):
        run_with_retry(broken, attempts=5, backoff_base=0)
    assert len(calls) == 1


def test_parse_iso_date_reads_whole_string():
    assert parse_iso_date("2030-01-31") == date(2030, 1, 31)
    assert parse_iso_date("2030-01-31T08:30:00Z") == date(2030, 1, 31)
    assert parse_iso_date("  ") is None
    for bad in ("2030-01-31garbage", "2030-01-31 extra", "31/01/2030"):
        with pytest.raises(ValueError):
            parse_iso_date(bad)


def test_patient_birth_date_with_trailing_text_rejected(db_session):
    with pytest.raises(InvalidArgumentError):
        patient_service.register_patient(name="Jane", date_of_birth="1990-04-02xyz", gender="female")
