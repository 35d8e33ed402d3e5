from carecenter.extensions import db
from carecenter.models import Medicine, Patient


def test_cli_sale_flow(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        'medicines', 'add', '--name', 'Paracetamol', '--category', 'Analgesic',
        '--unit', 'tablet', '--price', '5.99', '--stock', '100', '--expiry', '2030-01-31',
    ])
    assert result.exit_code == 0, result.output
    medicine_id = db.session.query(Medicine.id).filter_by(name='Paracetamol').scalar()

    result = runner.invoke(args=['patients', 'register', '--name', 'Jane Doe', '--dob', '1990-04-02', '--gender', 'female'])
    assert result.exit_code == 0, result.output
    assert 'P000001' in result.output

    result = runner.invoke(args=['system', 'sequences'])
    assert 'TXN000001' in result.output

    # Ids keep counting across tests (AUTOINCREMENT), so look the patient up
    patient_id = db.session.query(Patient.id).filter_by(patient_code='P000001').scalar()
    result = runner.invoke(args=[
        'transactions', 'create', '--patient-id', str(patient_id), '--item', f'{medicine_id}:2',
    ])
    assert result.exit_code == 0, result.output
    assert 'TXN000001 total 11.98' in result.output

    result = runner.invoke(args=['medicines', 'stock', str(medicine_id)])
    assert '98 on hand' in result.output


def test_cli_reports_errors(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['usage', 'record', '--medicine-id', '999999', '--quantity', '1'])
    assert result.exit_code != 0
    assert 'not found' in result.output

    result = runner.invoke(args=['transactions', 'create', '--patient-id', '1', '--item', 'bogus'])
    assert result.exit_code != 0
