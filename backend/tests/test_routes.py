from carecenter.extensions import db
from carecenter.models import Medicine, Transaction


def _create(client, patient_id, items, **extra):
    return client.post('/api/transactions/', json={"patient_id": patient_id, "items": items, **extra})


def test_health(client, db_session):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.json["status"] == "healthy"


def test_create_transaction_201(client, patient, medicine):
    response = _create(client, patient.id, [{"medicine_id": medicine.id, "quantity": 2}], notes="walk-in")

    assert response.status_code == 201
    body = response.json["transaction"]
    assert body["transaction_code"] == "TXN000001"
    assert body["total_amount"] == "11.98"
    assert body["total_amount_cents"] == 1198
    assert body["payment_status"] == "pending"
    assert body["items"][0]["unit_price"] == "5.99"

    db.session.expire_all()
    assert db.session.get(Medicine, medicine.id).stock_quantity == 98


def test_create_transaction_insufficient_stock_409(client, patient, make_medicine):
    medicine = make_medicine(name="Ibuprofen", stock=1)

    response = _create(client, patient.id, [{"medicine_id": medicine.id, "quantity": 2}])

    assert response.status_code == 409
    assert response.json["code"] == "insufficient_stock"
    assert response.json["details"] == {
        "medicine_id": medicine.id,
        "medicine_name": "Ibuprofen",
        "available": 1,
        "required": 2,
    }
    assert db.session.query(Transaction).count() == 0


def test_create_transaction_unknown_patient_404(client, medicine):
    response = _create(client, 999_999, [{"medicine_id": medicine.id, "quantity": 1}])
    assert response.status_code == 404
    assert response.json["code"] == "patient_not_found"


def test_create_transaction_bad_input_400(client, patient, medicine):
    assert _create(client, patient.id, []).status_code == 400
    assert _create(client, patient.id, [{"medicine_id": medicine.id, "quantity": 0}]).status_code == 400
    assert client.post('/api/transactions/', data="nope", content_type="text/plain").status_code == 400


def test_get_list_and_receipt(client, patient, medicine):
    txn_id = _create(client, patient.id, [{"medicine_id": medicine.id, "quantity": 1}]).json["transaction"]["id"]

    assert client.get(f'/api/transactions/{txn_id}').json["transaction"]["id"] == txn_id
    assert len(client.get('/api/transactions/').json["transactions"]) == 1
    assert client.get(f'/api/transactions/?patient_id={patient.id}&payment_status=paid').json["transactions"] == []

    receipt = client.get(f'/api/transactions/{txn_id}/receipt')
    assert receipt.status_code == 200
    assert receipt.json["receipt"]["items"][0]["medicine_name"] == "Paracetamol 500mg"

    assert client.get('/api/transactions/999999').status_code == 404
    assert client.get('/api/transactions/999999/receipt').status_code == 404


def test_update_status(client, patient, medicine):
    txn_id = _create(client, patient.id, [{"medicine_id": medicine.id, "quantity": 1}]).json["transaction"]["id"]

    paid = client.patch(f'/api/transactions/{txn_id}/status', json={"payment_status": "paid"})
    assert paid.status_code == 200
    assert paid.json["transaction"]["payment_status"] == "paid"

    back = client.patch(f'/api/transactions/{txn_id}/status', json={"payment_status": "pending"})
    assert back.status_code == 409
    assert back.json["code"] == "invalid_status_transition"


def test_record_and_list_usage(client, make_medicine):
    medicine = make_medicine(stock=30)

    response = client.post('/api/medicine-usage/', json={"medicine_id": medicine.id, "quantity_used": 30})
    assert response.status_code == 201
    assert response.json["usage"]["quantity_used"] == 30

    short = client.post('/api/medicine-usage/', json={"medicine_id": medicine.id, "quantity_used": 1})
    assert short.status_code == 409

    missing = client.post('/api/medicine-usage/', json={"medicine_id": 999_999, "quantity_used": 1})
    assert missing.status_code == 404

    rows = client.get('/api/medicine-usage/').json["usage"]
    assert len(rows) == 1


def test_medicine_stock_views(client, make_medicine):
    medicine = make_medicine(stock=5, minimum=10)

    stock = client.get(f'/api/medicines/{medicine.id}/stock')
    assert stock.status_code == 200
    assert stock.json["stock_status"] == "low"

    assert client.get('/api/medicines/999999/stock').status_code == 404
    assert len(client.get('/api/medicines/low-stock').json["medicines"]) == 1
    assert client.get('/api/medicines/low-stock?threshold=abc').status_code == 400


def test_reports(client, patient, medicine):
    _create(client, patient.id, [{"medicine_id": medicine.id, "quantity": 1}])

    stock_rows = client.get('/api/reports/stock').json["rows"]
    assert stock_rows[0]["current_stock"] == 99

    patient_rows = client.get('/api/reports/patients').json["rows"]
    assert patient_rows[0]["total_transactions"] == 1


def test_collection_paths_without_trailing_slash(client, patient, make_medicine):
    medicine = make_medicine(stock=10)

    created = client.post('/api/transactions', json={
        "patient_id": patient.id, "items": [{"medicine_id": medicine.id, "quantity": 1}],
    })
    assert created.status_code == 201
    assert client.get('/api/transactions').status_code == 200

    used = client.post('/api/medicine-usage', json={"medicine_id": medicine.id, "quantity_used": 1})
    assert used.status_code == 201
    assert client.get('/api/medicine-usage').status_code == 200


def test_out_of_range_ids_are_404(client, patient, medicine):
    response = _create(client, patient.id, [{"medicine_id": 10**20, "quantity": 1}])
    assert response.status_code == 404
    assert response.json["code"] == "medicine_not_found"

    response = _create(client, 10**20, [{"medicine_id": medicine.id, "quantity": 1}])
    assert response.status_code == 404
    assert response.json["code"] == "patient_not_found"

    assert client.get(f'/api/transactions/{10**20}').status_code == 404
    assert client.get(f'/api/transactions/{10**20}/receipt').status_code == 404
    assert client.get(f'/api/medicines/{10**20}/stock').status_code == 404
