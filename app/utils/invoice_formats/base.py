from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from app.core.config import settings


@dataclass(frozen=True)
class CompanyInvoiceFormat:
    type: str = "auto"
    prefix: Optional[str] = None
    next_number: Optional[int] = None
    padding: Optional[int] = None

    @property
    def effective_next_number(self) -> int:
        return self.next_number or 1

    @property
    def effective_padding(self) -> int:
        return self.padding or settings.DEFAULT_INVOICE_PADDING


def snapshot_invoice_format(record: Any) -> CompanyInvoiceFormat:
    """Capture a tenant's stored invoiceFormat (dict or object) as a CompanyInvoiceFormat."""
    if isinstance(record, CompanyInvoiceFormat):
        return record
    if record is None:
        return CompanyInvoiceFormat()
    get = record.get if isinstance(record, dict) else lambda key: getattr(record, key, None)
    next_number = get("next_number")
    if next_number is None:
        next_number = get("nextNumber")
    return CompanyInvoiceFormat(
        type=get("type") or "auto",
        prefix=get("prefix"),
        next_number=next_number,
        padding=get("padding"),
    )


class InvoiceFormat(ABC):
    name: str = "base"

    @abstractmethod
    def resolve_prefix(self, company_format: CompanyInvoiceFormat) -> str:
        raise NotImplementedError

    def suggestion_prefix(
        self, company_format: CompanyInvoiceFormat, company_initials: str
    ) -> str:
        return self.resolve_prefix(company_format)
