from datetime import date

from carecenter.services import reporting_service, transaction_service


def test_receipt_lists_items_with_names(patient, make_medicine):
    a = make_medicine(name="Amoxicillin", price="5.99", stock=10)
    b = make_medicine(name="Cough Syrup", price="8.50", stock=10)
    txn = transaction_service.create_transaction(patient.id, [(a.id, 3), (b.id, 1)], "walk-in")

    receipt = reporting_service.generate_receipt(txn.id)

    assert receipt["transaction_code"] == "TXN000001"
    assert receipt["patient_code"] == patient.patient_code
    assert receipt["patient_name"] == "Jane Doe"
    assert receipt["total_amount"] == "26.47"
    assert receipt["payment_status"] == "pending"
    assert receipt["notes"] == "walk-in"
    assert [(i["medicine_name"], i["quantity"], i["subtotal"]) for i in receipt["items"]] == [
        ("Amoxicillin", 3, "17.97"),
        ("Cough Syrup", 1, "8.50"),
    ]
    assert receipt["transaction_date"].endswith("Z")


def test_receipt_missing_transaction(db_session):
    assert reporting_service.generate_receipt(999_999) is None


def test_receipt_is_repeatable(patient, medicine):
    txn = transaction_service.create_transaction(patient.id, [(medicine.id, 2)])
    assert reporting_service.generate_receipt(txn.id) == reporting_service.generate_receipt(txn.id)


def test_patient_report_counts_all_statuses(make_patient, make_medicine):
    medicine = make_medicine(price="10.00", stock=50)
    alice = make_patient(name="Alice")
    make_patient(name="Bob")

    t1 = transaction_service.create_transaction(alice.id, [(medicine.id, 1)])
    transaction_service.create_transaction(alice.id, [(medicine.id, 2)])
    transaction_service.update_transaction_status(t1.id, "cancelled")

    rows = reporting_service.patient_report()

    assert [r["patient_name"] for r in rows] == ["Alice", "Bob"]
    alice_row, bob_row = rows
    assert alice_row["total_transactions"] == 2
    assert alice_row["total_amount_spent"] == "30.00"
    assert alice_row["last_visit"] is not None
    assert bob_row["total_transactions"] == 0
    assert bob_row["total_amount_spent"] == "0.00"
    assert bob_row["last_visit"] is None


def test_stock_report_status_and_expiry(make_medicine):
    make_medicine(name="Aspirin", stock=0, minimum=5, expiry=date(2030, 1, 11))
    make_medicine(name="Bandage", stock=3, minimum=5, expiry=date(2029, 12, 31))
    make_medicine(name="Cetirizine", stock=30, minimum=5, expiry=date(2030, 1, 1))

    rows = reporting_service.stock_report(as_of=date(2030, 1, 1))

    assert [(r["medicine_name"], r["stock_status"], r["days_to_expiry"]) for r in rows] == [
        ("Aspirin", "out_of_stock", 10),
        ("Bandage", "low", -1),
        ("Cetirizine", "sufficient", 0),
    ]
    assert rows[0]["expiry_date"] == "2030-01-11"
