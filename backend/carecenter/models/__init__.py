from .inventory import Medicine, MedicineUsage
from .patients import Patient
from .transactions import Transaction, TransactionItem
from .sequences import CodeSequence

__all__ = [
    'Medicine', 'MedicineUsage',
    'Patient',
    'Transaction', 'TransactionItem',
    'CodeSequence',
]
