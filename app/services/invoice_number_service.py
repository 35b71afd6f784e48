from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, List, Optional

from app.core.config import settings
from app.utils.invoice_formats import (
    CompanyInvoiceFormat,
    get_invoice_format,
    snapshot_invoice_format,
)

logger = logging.getLogger("invoice_numbers")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class ParsedInvoiceNumber:
    prefix: str
    sequence: int
    raw: str
    year: Optional[str] = None
    month: Optional[str] = None


@dataclass(frozen=True)
class InvoiceNumberConfig:
    prefix: str
    next_number: int
    padding: int
    year: str
    month: str


def _period(now: Optional[datetime]) -> tuple[str, str]:
    now = now or datetime.now()
    return str(now.year), f"{now.month:02d}"


def _parse_int(value: str) -> int:
    """Lenient integer parse: leading digits count, trailing junk is ignored."""
    match = _LEADING_INT.match(value)
    if not match:
        raise ValueError(f"invalid integer segment: {value!r}")
    return int(match.group(1))


def _format(prefix: str, year: str, month: str, sequence: int, padding: int) -> str:
    return f"{prefix}-{year}-{month}-{str(sequence).zfill(padding)}"


def generate_invoice_number(
    company_format: Any,
    last_invoice_number: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Format the tenant's next invoice number as PREFIX-YYYY-MM-SEQUENCE.

    The sequence comes straight from ``company_format.next_number``; run the format
    through ``update_company_invoice_format`` first to account for the last issued
    number. ``last_invoice_number`` is accepted for call-site compatibility only.
    """
    company_format = snapshot_invoice_format(company_format)
    year, month = _period(now)
    prefix = get_invoice_format(company_format.type).resolve_prefix(company_format)
    return _format(
        prefix,
        year,
        month,
        company_format.effective_next_number,
        company_format.effective_padding,
    )


def parse_invoice_number(invoice_number: str) -> ParsedInvoiceNumber:
    """
    Split an invoice number on "-" into its parts.

    PREFIX-YYYY-MM-SEQ yields every field, PREFIX-SEQ (or three parts) only the
    prefix and sequence. Anything unparseable comes back zeroed instead of raising.
    """
    raw = invoice_number
    parts = (invoice_number or "").split("-")

    try:
        if len(parts) >= 4:
            return ParsedInvoiceNumber(
                prefix=parts[0],
                year=parts[1],
                month=parts[2],
                sequence=_parse_int(parts[3]),
                raw=raw,
            )
        if len(parts) >= 2:
            return ParsedInvoiceNumber(
                prefix=parts[0], sequence=_parse_int(parts[1]), raw=raw
            )
    except ValueError as e:
        logger.warning("Error parsing invoice number %r: %s", raw, e)

    return ParsedInvoiceNumber(prefix="", sequence=0, raw=raw)


def get_next_invoice_config(
    company_format: Any,
    last_invoice_number: Optional[str] = None,
    now: Optional[datetime] = None,
) -> InvoiceNumberConfig:
    """
    Work out the sequence for the next invoice.

    With a usable last number the sequence continues from it, or restarts at 1
    when the last number belongs to a different year/month. Without one the
    tenant's stored counter is used. The counter belongs to the caller, who must
    serialize issuance per tenant.
    """
    company_format = snapshot_invoice_format(company_format)
    current_year, current_month = _period(now)

    next_number = company_format.effective_next_number

    if last_invoice_number:
        parsed = parse_invoice_number(last_invoice_number)
        if parsed.sequence > 0:
            if parsed.year != current_year or parsed.month != current_month:
                next_number = 1
            else:
                next_number = parsed.sequence + 1

    return InvoiceNumberConfig(
        prefix=company_format.prefix or settings.DEFAULT_INVOICE_PREFIX,
        next_number=next_number,
        padding=company_format.effective_padding,
        year=current_year,
        month=current_month,
    )


def _in_range(value: str, low: int, high: int) -> bool:
    try:
        number = _parse_int(value)
    except ValueError:
        return False
    return low <= number <= high


def validate_invoice_number(invoice_number: str, company_format: Any) -> bool:
    company_format = snapshot_invoice_format(company_format)
    parsed = parse_invoice_number(invoice_number)

    if parsed.sequence <= 0:
        return False

    if parsed.year and not _in_range(
        parsed.year, settings.INVOICE_MIN_YEAR, settings.INVOICE_MAX_YEAR
    ):
        return False

    if parsed.month and not _in_range(parsed.month, 1, 12):
        return False

    if company_format.type == "prefix" and company_format.prefix:
        if parsed.prefix != company_format.prefix:
            return False

    return True


def _company_initials(company_name: str) -> str:
    return "".join(word[:1].upper() for word in (company_name or "").split(" "))[:3]


def get_invoice_number_suggestions(
    company_name: str, company_format: Any, now: Optional[datetime] = None
) -> List[str]:
    """Example numbers an admin can pick from when setting up invoicing."""
    company_format = snapshot_invoice_format(company_format)
    year, month = _period(now)
    padding = company_format.effective_padding
    initials = _company_initials(company_name)
    first = "1".zfill(padding)

    suggestions: List[str] = []
    if company_format.type in ("auto", "prefix", "paystack"):
        prefix = get_invoice_format(company_format.type).suggestion_prefix(
            company_format, initials
        )
        suggestions.append(f"{prefix}-{year}-{month}-{first}")

    suggestions.append(f"{initials}-{year}-{month}-{first}")
    suggestions.append(
        f"{company_format.prefix or settings.DEFAULT_INVOICE_PREFIX}-{first}"
    )
    return suggestions


def update_company_invoice_format(
    company_format: Any,
    last_invoice_number: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CompanyInvoiceFormat:
    """Return a copy of the format carrying the next counter value, ready to persist."""
    company_format = snapshot_invoice_format(company_format)
    config = get_next_invoice_config(company_format, last_invoice_number, now=now)
    return replace(company_format, next_number=config.next_number)
