# Overview: Flask CLI command groups for bootstrap, data entry, and inspection.

# backend/carecenter/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to carecenter (PowerShell: $env:FLASK_APP="carecenter").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system sequences
#   Show the next code each series will hand out.
#
# Medicines:
# - python -m flask medicines add --name "Paracetamol 500mg" --category Analgesic --unit tablet --price 5.99 --stock 100 --minimum 10 --expiry 2027-01-31
# - python -m flask medicines list
# - python -m flask medicines stock 1
#
# Patients:
# - python -m flask patients register --name "Jane Doe" --dob 1990-04-02 --gender female
# - python -m flask patients show 1
#
# Transactions / usage:
# - python -m flask transactions create --patient-id 1 --item 1:2 --item 3:1 --notes "walk-in"
# - python -m flask transactions receipt 1
# - python -m flask transactions set-status 1 paid
# - python -m flask usage record --medicine-id 1 --quantity 5 --notes "ward restock"
#
# Reports:
# - python -m flask reports stock
# - python -m flask reports patients

import click
from flask.cli import with_appcontext

from .errors import CareCenterError
from .extensions import db
from .services import (
    inventory_service,
    patient_service,
    reporting_service,
    sequence_service,
    transaction_service,
    usage_service,
)


def _fail(exc: CareCenterError):
    raise click.ClickException(exc.message)


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database schema ready.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@system_group.command('sequences')
@with_appcontext
def show_sequences():
    """Show the next code of every series (read-only, not a reservation)."""
    for name in sorted(sequence_service.SERIES):
        click.echo(f"{name:<15} {sequence_service.peek_next_code(name)}")


@click.group('medicines')
def medicines_group():
    """Medicine inventory commands."""


@medicines_group.command('add')
@click.option('--name', required=True)
@click.option('--category', required=True)
@click.option('--unit', required=True, help='e.g. tablet, bottle, box')
@click.option('--price', required=True, help='Decimal price, e.g. 5.99')
@click.option('--stock', 'stock_quantity', type=int, required=True)
@click.option('--minimum', 'minimum_stock', type=int, default=0, show_default=True)
@click.option('--expiry', 'expiry_date', required=True, help='YYYY-MM-DD')
@click.option('--description')
@click.option('--supplier')
@with_appcontext
def add_medicine(**kwargs):
    """Register a medicine with its opening stock."""
    try:
        medicine = inventory_service.create_medicine(**kwargs)
    except CareCenterError as exc:
        _fail(exc)
    click.echo(f"PASS Created medicine {medicine.name} (ID: {medicine.id}, stock: {medicine.stock_quantity})")


@medicines_group.command('list')
@with_appcontext
def list_medicines():
    """List medicines with stock status."""
    medicines = inventory_service.list_medicines()
    if not medicines:
        click.echo("No medicines found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Name':<30} {'Price':>10} {'Stock':>7} {'Min':>5}  {'Status':<13} {'Expiry'}")
    click.echo("="*90)
    for m in medicines:
        status = inventory_service.classify_stock(m.stock_quantity, m.minimum_stock)
        click.echo(f"{m.id:<5} {m.name[:30]:<30} {str(m.price):>10} {m.stock_quantity:>7} {m.minimum_stock:>5}  {status:<13} {m.expiry_date}")
    click.echo("="*90 + "\n")


@medicines_group.command('stock')
@click.argument('medicine_id', type=int)
@with_appcontext
def medicine_stock(medicine_id):
    """Show the current stock of one medicine."""
    try:
        stock = inventory_service.get_medicine_stock(medicine_id)
    except CareCenterError as exc:
        _fail(exc)
    click.echo(
        f"{stock['medicine_name']}: {stock['stock_quantity']} on hand, "
        f"minimum {stock['minimum_stock']} ({stock['stock_status']})"
    )


@click.group('patients')
def patients_group():
    """Patient registration commands."""


@patients_group.command('register')
@click.option('--name', required=True)
@click.option('--dob', 'date_of_birth', required=True, help='YYYY-MM-DD')
@click.option('--gender', type=click.Choice(['male', 'female']), required=True)
@click.option('--phone')
@click.option('--email')
@click.option('--address')
@click.option('--emergency-contact')
@click.option('--medical-history')
@click.option('--allergies')
@with_appcontext
def register_patient(**kwargs):
    """Register a patient and assign the next patient code."""
    try:
        patient = patient_service.register_patient(**kwargs)
    except CareCenterError as exc:
        _fail(exc)
    click.echo(f"PASS Registered {patient.name} as {patient.patient_code} (ID: {patient.id})")


@patients_group.command('show')
@click.argument('patient_id', type=int)
@with_appcontext
def show_patient(patient_id):
    try:
        patient = patient_service.get_patient(patient_id)
    except CareCenterError as exc:
        _fail(exc)
    for key, value in patient.to_dict().items():
        click.echo(f"{key:<18} {value if value is not None else '-'}")


@click.group('transactions')
def transactions_group():
    """Sales transaction commands."""


def _parse_item(value: str) -> dict:
    medicine_id, sep, quantity = value.partition(":")
    if not sep:
        raise click.BadParameter(f"expected MEDICINE_ID:QTY, got {value!r}")
    return {"medicine_id": medicine_id, "quantity": quantity}


@transactions_group.command('create')
@click.option('--patient-id', type=int, required=True)
@click.option('--item', 'items', multiple=True, required=True, help='MEDICINE_ID:QTY (repeatable)')
@click.option('--notes')
@with_appcontext
def create_transaction(patient_id, items, notes):
    """Create a transaction and debit stock."""
    try:
        transaction = transaction_service.create_transaction(
            patient_id, [_parse_item(i) for i in items], notes
        )
    except CareCenterError as exc:
        _fail(exc)
    click.echo(f"PASS {transaction.transaction_code} total {transaction.total_amount} ({transaction.payment_status})")


@transactions_group.command('set-status')
@click.argument('transaction_id', type=int)
@click.argument('payment_status', type=click.Choice(['pending', 'paid', 'cancelled']))
@with_appcontext
def set_status(transaction_id, payment_status):
    """Change the payment status of a transaction."""
    try:
        transaction = transaction_service.update_transaction_status(transaction_id, payment_status)
    except CareCenterError as exc:
        _fail(exc)
    click.echo(f"PASS {transaction.transaction_code} is now {transaction.payment_status}")


@transactions_group.command('receipt')
@click.argument('transaction_id', type=int)
@with_appcontext
def print_receipt(transaction_id):
    """Print a plain-text receipt."""
    receipt = reporting_service.generate_receipt(transaction_id)
    if receipt is None:
        raise click.ClickException(f"Transaction with id {transaction_id} not found")

    click.echo("\n" + "="*60)
    click.echo(f"Receipt {receipt['transaction_code']}   {receipt['transaction_date']}")
    click.echo(f"Patient {receipt['patient_code']}  {receipt['patient_name']}")
    click.echo("-"*60)
    for item in receipt["items"]:
        click.echo(f"{item['medicine_name'][:28]:<28} {item['quantity']:>4} x {item['unit_price']:>9} = {item['subtotal']:>10}")
    click.echo("-"*60)
    click.echo(f"{'TOTAL':<45} {receipt['total_amount']:>14}")
    click.echo(f"Status: {receipt['payment_status']}")
    if receipt["notes"]:
        click.echo(f"Notes: {receipt['notes']}")
    click.echo("="*60 + "\n")


@click.group('usage')
def usage_group():
    """Medicine usage commands."""


@usage_group.command('record')
@click.option('--medicine-id', type=int, required=True)
@click.option('--quantity', 'quantity_used', type=int, required=True)
@click.option('--notes')
@with_appcontext
def record_usage(medicine_id, quantity_used, notes):
    """Consume stock for non-sale use."""
    try:
        usage = usage_service.record_usage(medicine_id, quantity_used, notes)
    except CareCenterError as exc:
        _fail(exc)
    click.echo(f"PASS Recorded usage {usage.id}: medicine {usage.medicine_id} x{usage.quantity_used}")


@click.group('reports')
def reports_group():
    """Read-only reports."""


@reports_group.command('stock')
@with_appcontext
def stock_report():
    rows = reporting_service.stock_report()
    click.echo(f"{'ID':<5} {'Name':<30} {'Stock':>7} {'Min':>5}  {'Status':<13} {'Days to expiry':>14}")
    for row in rows:
        click.echo(
            f"{row['medicine_id']:<5} {row['medicine_name'][:30]:<30} {row['current_stock']:>7} "
            f"{row['minimum_stock']:>5}  {row['stock_status']:<13} {row['days_to_expiry']:>14}"
        )


@reports_group.command('patients')
@with_appcontext
def patient_report():
    rows = reporting_service.patient_report()
    click.echo(f"{'Code':<9} {'Name':<30} {'Txns':>5} {'Spent':>12}  {'Last visit'}")
    for row in rows:
        click.echo(
            f"{row['patient_code']:<9} {row['patient_name'][:30]:<30} {row['total_transactions']:>5} "
            f"{row['total_amount_spent']:>12}  {row['last_visit'] or '-'}"
        )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(medicines_group)
    app.cli.add_command(patients_group)
    app.cli.add_command(transactions_group)
    app.cli.add_command(usage_group)
    app.cli.add_command(reports_group)
