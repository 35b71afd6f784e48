import logging
from dataclasses import asdict, replace
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter

from app.schemas.models import (
    InvoiceFormatPayload,
    InvoiceSuggestionsRequest,
    NextInvoiceRequest,
    ParseInvoiceRequest,
    ValidateInvoiceRequest,
)
from app.services.invoice_number_service import (
    generate_invoice_number,
    get_invoice_number_suggestions,
    get_next_invoice_config,
    parse_invoice_number,
    update_company_invoice_format,
    validate_invoice_number,
)
from app.utils.invoice_formats import CompanyInvoiceFormat, snapshot_invoice_format

router = APIRouter(prefix="/api/invoices", tags=["Invoices"])
logger = logging.getLogger("invoices")


def _to_format(payload: InvoiceFormatPayload) -> CompanyInvoiceFormat:
    return snapshot_invoice_format(payload.model_dump())


def serialize_format(company_format: CompanyInvoiceFormat) -> Dict[str, Any]:
    return {
        "type": company_format.type,
        "prefix": company_format.prefix,
        "nextNumber": company_format.next_number,
        "padding": company_format.padding,
    }


@router.post("/next")
def next_invoice_number(payload: NextInvoiceRequest):
    """
    Issue the next number for a tenant and hand back the format to persist.

    The returned nextNumber already points past the issued number, so the saved
    format alone yields a fresh number on the next call. Pass lastInvoiceNumber to
    get the year/month reset. The caller must hold its per-tenant lock across this
    call and the save.
    """
    company_format = _to_format(payload.invoiceFormat)
    last = payload.lastInvoiceNumber

    if last and not validate_invoice_number(last, company_format):
        logger.warning(
            "Last invoice number %r does not match format %s", last, company_format.type
        )

    now = datetime.now()
    updated = update_company_invoice_format(company_format, last, now=now)
    config = get_next_invoice_config(company_format, last, now=now)
    invoice_number = generate_invoice_number(updated, now=now)
    persisted = replace(updated, next_number=config.next_number + 1)

    logger.info("Issued invoice number %s (previous=%s)", invoice_number, last)
    return {
        "invoiceNumber": invoice_number,
        "config": {
            "prefix": config.prefix,
            "nextNumber": config.next_number,
            "padding": config.padding,
            "year": config.year,
            "month": config.month,
        },
        "invoiceFormat": serialize_format(persisted),
    }


@router.post("/parse")
def parse(payload: ParseInvoiceRequest):
    return asdict(parse_invoice_number(payload.invoiceNumber))


@router.post("/validate")
def validate(payload: ValidateInvoiceRequest):
    return {"valid": validate_invoice_number(payload.invoiceNumber, _to_format(payload.invoiceFormat))}


@router.post("/suggestions")
def suggestions(payload: InvoiceSuggestionsRequest):
    return {
        "suggestions": get_invoice_number_suggestions(
            payload.companyName, _to_format(payload.invoiceFormat)
        )
    }
