from typing import Dict

from app.utils.invoice_formats.base import (
    CompanyInvoiceFormat,
    InvoiceFormat,
    snapshot_invoice_format,
)
from app.utils.invoice_formats.builtin import (
    AutoInvoiceFormat,
    PaystackInvoiceFormat,
    PrefixInvoiceFormat,
)

_REGISTRY: Dict[str, InvoiceFormat] = {}
DEFAULT_FORMAT = "auto"


def register_format(invoice_format: InvoiceFormat) -> None:
    _REGISTRY[invoice_format.name] = invoice_format


def get_invoice_format(name: str = DEFAULT_FORMAT) -> InvoiceFormat:
    # unknown types are numbered like "auto"
    return _REGISTRY.get(name) or _REGISTRY[DEFAULT_FORMAT]


register_format(AutoInvoiceFormat())
register_format(PrefixInvoiceFormat())
register_format(PaystackInvoiceFormat())

__all__ = [
    "CompanyInvoiceFormat",
    "InvoiceFormat",
    "get_invoice_format",
    "register_format",
    "snapshot_invoice_format",
]
