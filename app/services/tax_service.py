from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple, Union

from app.core.config import settings

logger = logging.getLogger("taxes")

AppliesTo = Literal["facility", "inventory_item", "both"]
Number = Union[int, float, Decimal]

SERVICE_FEE_MARKER = "servicefee"
VAT_NAME = "vat"

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class TaxRule:
    name: str
    rate: Number = 0
    applies_to: Optional[str] = "both"
    active: bool = True
    is_super_admin_tax: bool = False
    company: Optional[str] = None
    type: Optional[str] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class TaxBreakdownItem:
    tax: TaxRule
    amount: int
    rate: Number


@dataclass(frozen=True)
class TaxCalculationResult:
    subtotal: Number
    service_fee: int
    tax: int
    total: Number
    service_fee_rate: Number
    total_tax_rate: Number
    applicable_taxes: Tuple[TaxRule, ...] = ()
    tax_breakdown: Tuple[TaxBreakdownItem, ...] = ()


@dataclass(frozen=True)
class TaxConfiguration:
    is_tax_inclusive: bool
    is_tax_on_tax: bool
    default_taxes: List[TaxRule] = field(default_factory=list)


def _pick(record: Any, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if isinstance(record, dict):
            if key in record and record[key] is not None:
                return record[key]
        else:
            value = getattr(record, key, None)
            if value is not None:
                return value
    return default


def snapshot_tax_rule(record: Any) -> TaxRule:
    """
    Capture a catalog record (dict or ORM-ish object, camelCase or snake_case)
    as an immutable TaxRule.
    """
    if isinstance(record, TaxRule):
        return record
    company = _pick(record, "company", "company_id", "companyId")
    rule_id = _pick(record, "id", "_id")
    return TaxRule(
        id=str(rule_id) if rule_id is not None else None,
        name=_pick(record, "name", default=""),
        rate=_pick(record, "rate", default=0) or 0,
        applies_to=_pick(record, "applies_to", "appliesTo"),
        active=bool(_pick(record, "active", default=False)),
        is_super_admin_tax=bool(
            _pick(record, "is_super_admin_tax", "isSuperAdminTax", default=False)
        ),
        company=str(company) if company is not None else None,
        type=_pick(record, "type"),
    )


def normalize_name(value: str) -> str:
    """Trim, drop every whitespace character and lower-case."""
    return "".join((value or "").strip().split()).lower()


def is_service_fee(rule: TaxRule) -> bool:
    return SERVICE_FEE_MARKER in normalize_name(rule.name)


def is_vat(rule: TaxRule) -> bool:
    return normalize_name(rule.name) == VAT_NAME


def _is_owned(rule: TaxRule, company_id: Optional[str]) -> bool:
    if rule.is_super_admin_tax:
        return True
    return bool(company_id) and rule.company is not None and rule.company == str(
        company_id
    )


def _matches_scope(rule: TaxRule, applies_to: str) -> bool:
    return rule.applies_to == applies_to or rule.applies_to == "both"


def _filter_applicable(
    taxes: Iterable[TaxRule], applies_to: str, company_id: Optional[str]
) -> List[TaxRule]:
    return [
        rule
        for rule in taxes
        if rule.active and _matches_scope(rule, applies_to) and _is_owned(rule, company_id)
    ]


def _vat_first(rules: Iterable[TaxRule]) -> List[TaxRule]:
    return sorted(rules, key=lambda rule: (not is_vat(rule), rule.name.casefold(), rule.name))


def _percent_of(base: Number, rate: Number) -> int:
    # double arithmetic and Math.round, in the order historical invoices were priced
    return math.floor(float(base) * (float(rate) / 100) + 0.5)


def _format_rate(rate: Number) -> str:
    # toFixed(2) on the binary value, ties away from zero
    return f"{Decimal(float(rate)).quantize(_CENT, rounding=ROUND_HALF_UP)}%"


def _zero_result(subtotal: Number) -> TaxCalculationResult:
    return TaxCalculationResult(
        subtotal=subtotal,
        service_fee=0,
        tax=0,
        total=subtotal,
        service_fee_rate=0,
        total_tax_rate=0,
    )


def calculate_taxes(
    subtotal: Number,
    taxes: Iterable[TaxRule],
    applies_to: AppliesTo,
    company_id: Optional[str] = None,
    is_taxable: bool = True,
    is_tax_inclusive: bool = False,
    is_tax_on_tax: bool = False,
) -> TaxCalculationResult:
    """
    Resolve the tax rules that apply to a transaction and compute the payable total.

    Service-fee rules (name contains "service fee") are summed into a single fee on
    the subtotal. Regular rules are charged on the subtotal, or on subtotal + fee
    when tax-on-tax is enabled. Every line is rounded on its own before summing.
    Inputs are not validated: negative rates or amounts flow straight through.
    """
    if not is_taxable or subtotal <= 0:
        return _zero_result(subtotal)

    applicable = _filter_applicable(taxes, applies_to, company_id)
    service_fee_taxes = [rule for rule in applicable if is_service_fee(rule)]
    regular_taxes = _vat_first(rule for rule in applicable if not is_service_fee(rule))

    service_fee_rate = sum(rule.rate or 0 for rule in service_fee_taxes)
    service_fee = _percent_of(subtotal, service_fee_rate)

    tax_base = subtotal + service_fee if is_tax_on_tax else subtotal

    tax_breakdown = tuple(
        TaxBreakdownItem(
            tax=rule, amount=_percent_of(tax_base, rule.rate or 0), rate=rule.rate or 0
        )
        for rule in regular_taxes
    )
    total_tax_rate = sum(rule.rate or 0 for rule in regular_taxes)
    tax = sum(item.amount for item in tax_breakdown)

    if is_tax_inclusive:
        total = subtotal
    else:
        total = subtotal + service_fee + tax

    logger.debug(
        "Calculated taxes scope=%s company=%s subtotal=%s fee=%s tax=%s total=%s",
        applies_to,
        company_id,
        subtotal,
        service_fee,
        tax,
        total,
    )

    return TaxCalculationResult(
        subtotal=subtotal,
        service_fee=service_fee,
        tax=tax,
        total=total,
        service_fee_rate=service_fee_rate,
        total_tax_rate=total_tax_rate,
        applicable_taxes=tuple(regular_taxes),
        tax_breakdown=tax_breakdown,
    )


def calculate_rental_taxes(
    subtotal: Number,
    taxes: Iterable[TaxRule],
    company_id: Optional[str] = None,
    is_taxable: bool = True,
    is_tax_inclusive: bool = False,
    is_tax_on_tax: bool = False,
) -> TaxCalculationResult:
    """Taxes for inventory-item rentals."""
    return calculate_taxes(
        subtotal,
        taxes,
        "inventory_item",
        company_id=company_id,
        is_taxable=is_taxable,
        is_tax_inclusive=is_tax_inclusive,
        is_tax_on_tax=is_tax_on_tax,
    )


def calculate_booking_taxes(
    subtotal: Number,
    taxes: Iterable[TaxRule],
    company_id: Optional[str] = None,
    is_taxable: bool = True,
    is_tax_inclusive: bool = False,
    is_tax_on_tax: bool = False,
) -> TaxCalculationResult:
    """Taxes for facility bookings."""
    return calculate_taxes(
        subtotal,
        taxes,
        "facility",
        company_id=company_id,
        is_taxable=is_taxable,
        is_tax_inclusive=is_tax_inclusive,
        is_tax_on_tax=is_tax_on_tax,
    )


def calculate_transaction_taxes(
    subtotal: Number,
    taxes: Iterable[TaxRule],
    company_id: Optional[str] = None,
    is_taxable: bool = True,
    is_tax_inclusive: bool = False,
    is_tax_on_tax: bool = False,
) -> TaxCalculationResult:
    return calculate_taxes(
        subtotal,
        taxes,
        "both",
        company_id=company_id,
        is_taxable=is_taxable,
        is_tax_inclusive=is_tax_inclusive,
        is_tax_on_tax=is_tax_on_tax,
    )


def get_tax_configuration(
    taxes: Iterable[TaxRule], company_id: Optional[str] = None
) -> TaxConfiguration:
    """
    Active rules a tenant may charge (platform-wide or its own, any scope) plus the
    service-wide inclusive / tax-on-tax policy defaults.
    """
    return TaxConfiguration(
        is_tax_inclusive=settings.DEFAULT_TAX_INCLUSIVE,
        is_tax_on_tax=settings.DEFAULT_TAX_ON_TAX,
        default_taxes=[
            rule for rule in taxes if rule.active and _is_owned(rule, company_id)
        ],
    )


def _format_amount(currency: str, amount: Number) -> str:
    if isinstance(amount, int) or amount == int(amount):
        return f"{currency}{int(amount):,}"
    return f"{currency}{amount:,}"


def format_tax_breakdown(
    result: TaxCalculationResult, currency: Optional[str] = None
) -> List[Dict[str, str]]:
    """Display rows for receipts and checkout summaries. Not a source of truth."""
    symbol = settings.DEFAULT_CURRENCY_SYMBOL if currency is None else currency
    breakdown: List[Dict[str, str]] = []

    if result.service_fee > 0:
        breakdown.append(
            {
                "name": "Service Fee",
                "rate": _format_rate(result.service_fee_rate),
                "amount": _format_amount(symbol, result.service_fee),
                "type": "service",
            }
        )

    for item in result.tax_breakdown:
        breakdown.append(
            {
                "name": item.tax.name,
                "rate": _format_rate(item.rate),
                "amount": _format_amount(symbol, item.amount),
                "type": "tax",
            }
        )

    return breakdown


def get_vat_tax(
    taxes: Iterable[TaxRule], company_id: Optional[str] = None
) -> Optional[TaxRule]:
    # first qualifying rule in catalog order wins
    for rule in taxes:
        if (
            rule.active
            and is_vat(rule)
            and rule.applies_to in ("both", "inventory_item")
            and _is_owned(rule, company_id)
        ):
            return rule
    return None


def get_applicable_taxes(
    taxes: Iterable[TaxRule],
    applies_to: AppliesTo,
    company_id: Optional[str] = None,
) -> List[TaxRule]:
    """Filtered rules, VAT first and the rest by name."""
    return _vat_first(_filter_applicable(taxes, applies_to, company_id))
