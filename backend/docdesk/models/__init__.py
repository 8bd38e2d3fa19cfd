from .ledger import LedgerRecord
from .settings import CompanySettings
from .inventory import Product
from .customers import Client
from .documents import Document, DocItem, QUOTE, DELIVERY, STATUS_DRAFT, STATUS_FINAL

__all__ = [
    'LedgerRecord',
    'CompanySettings',
    'Product',
    'Client',
    'Document', 'DocItem',
    'QUOTE', 'DELIVERY', 'STATUS_DRAFT', 'STATUS_FINAL',
]
