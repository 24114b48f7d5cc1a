from .counter_repository import CounterRepository
from .invoice_repository import InvoiceRepository

__all__ = [
    "CounterRepository",
    "InvoiceRepository",
]
