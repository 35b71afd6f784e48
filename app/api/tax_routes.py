import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Request

from app.schemas.models import (
    ApplicableTaxesRequest,
    TaxCalculationRequest,
    TaxRulePayload,
    VatTaxRequest,
)
from app.services.tax_service import (
    TaxCalculationResult,
    TaxRule,
    calculate_taxes,
    format_tax_breakdown,
    get_applicable_taxes,
    get_vat_tax,
    snapshot_tax_rule,
)

router = APIRouter(prefix="/api/taxes", tags=["Taxes"])
logger = logging.getLogger("taxes")


def _resolve_company_id(request: Request, body_company_id: Optional[str]) -> Optional[str]:
    return body_company_id or request.headers.get("X-Company-ID")


def _to_rules(payloads: List[TaxRulePayload]) -> List[TaxRule]:
    return [snapshot_tax_rule(p.model_dump()) for p in payloads]


def _number(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def serialize_rule(rule: TaxRule) -> Dict[str, Any]:
    return {
        "id": rule.id,
        "name": rule.name,
        "rate": _number(rule.rate),
        "appliesTo": rule.applies_to,
        "active": rule.active,
        "isSuperAdminTax": rule.is_super_admin_tax,
        "company": rule.company,
        "type": rule.type,
    }


def serialize_result(result: TaxCalculationResult) -> Dict[str, Any]:
    return {
        "subtotal": _number(result.subtotal),
        "serviceFee": result.service_fee,
        "tax": result.tax,
        "total": _number(result.total),
        "serviceFeeRate": _number(result.service_fee_rate),
        "totalTaxRate": _number(result.total_tax_rate),
        "applicableTaxes": [serialize_rule(r) for r in result.applicable_taxes],
        "taxBreakdown": [
            {
                "tax": serialize_rule(item.tax),
                "amount": item.amount,
                "rate": _number(item.rate),
            }
            for item in result.tax_breakdown
        ],
    }


@router.post("/calculate")
def calculate(payload: TaxCalculationRequest, request: Request):
    company_id = _resolve_company_id(request, payload.companyId)
    try:
        result = calculate_taxes(
            payload.subtotal,
            _to_rules(payload.taxes),
            payload.appliesTo,
            company_id=company_id,
            is_taxable=payload.isTaxable,
            is_tax_inclusive=payload.isTaxInclusive,
            is_tax_on_tax=payload.isTaxOnTax,
        )
        breakdown = format_tax_breakdown(result, payload.currency)
    except Exception:
        logger.exception("Tax calculation failed")
        raise HTTPException(status_code=500, detail="Tax calculation failed")

    logger.info(
        "Tax calculated company=%s scope=%s total=%s",
        company_id,
        payload.appliesTo,
        result.total,
    )
    return {**serialize_result(result), "breakdown": breakdown}


@router.post("/applicable")
def applicable(payload: ApplicableTaxesRequest, request: Request):
    company_id = _resolve_company_id(request, payload.companyId)
    rules = get_applicable_taxes(_to_rules(payload.taxes), payload.appliesTo, company_id)
    return {"taxes": [serialize_rule(r) for r in rules]}


@router.post("/vat")
def vat(payload: VatTaxRequest, request: Request):
    company_id = _resolve_company_id(request, payload.companyId)
    rule = get_vat_tax(_to_rules(payload.taxes), company_id)
    return {"vat": serialize_rule(rule) if rule else None}
