from app.core.config import settings
from app.utils.invoice_formats.base import CompanyInvoiceFormat, InvoiceFormat


class AutoInvoiceFormat(InvoiceFormat):
    name = "auto"

    def resolve_prefix(self, company_format: CompanyInvoiceFormat) -> str:
        return settings.DEFAULT_INVOICE_PREFIX


class PrefixInvoiceFormat(InvoiceFormat):
    """Tenant-chosen prefix, e.g. TIL-2025-03-0007."""

    name = "prefix"

    def resolve_prefix(self, company_format: CompanyInvoiceFormat) -> str:
        return company_format.prefix or settings.DEFAULT_INVOICE_PREFIX

    def suggestion_prefix(
        self, company_format: CompanyInvoiceFormat, company_initials: str
    ) -> str:
        return company_format.prefix or company_initials


class PaystackInvoiceFormat(InvoiceFormat):
    name = "paystack"

    def resolve_prefix(self, company_format: CompanyInvoiceFormat) -> str:
        return settings.PAYSTACK_INVOICE_PREFIX
