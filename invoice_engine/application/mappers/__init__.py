"""
Mappers between application DTOs and domain entities.
"""

from .invoice_mapper import InvoiceMapper

__all__ = [
    "InvoiceMapper",
]
