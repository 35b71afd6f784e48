from decimal import Decimal

import pytest

from app.services.tax_service import (
    TaxRule,
    calculate_booking_taxes,
    calculate_rental_taxes,
    calculate_taxes,
    calculate_transaction_taxes,
    format_tax_breakdown,
    get_applicable_taxes,
    get_tax_configuration,
    get_vat_tax,
    normalize_name,
    snapshot_tax_rule,
)


def test_vat_and_service_fee_exclusive(vat, service_fee):
    result = calculate_taxes(10000, [vat, service_fee], "both")
    assert result.service_fee == 500
    assert result.tax == 1500
    assert result.total == 12000
    assert result.service_fee_rate == 5
    assert result.total_tax_rate == 15
    assert result.applicable_taxes == (vat,)
    assert [(i.tax, i.amount, i.rate) for i in result.tax_breakdown] == [(vat, 1500, 15)]


def test_tax_on_tax_uses_subtotal_plus_fee(vat, service_fee):
    result = calculate_taxes(10000, [vat, service_fee], "both", is_tax_on_tax=True)
    assert result.service_fee == 500
    assert result.tax == 1575
    assert result.total == 12075


def test_tax_inclusive_keeps_subtotal_as_total(vat, service_fee):
    result = calculate_taxes(10000, [vat, service_fee], "both", is_tax_inclusive=True)
    assert result.total == 10000
    assert result.service_fee == 500
    assert result.tax == 1500


@pytest.mark.parametrize("subtotal,is_taxable", [(0, True), (-50, True), (10000, False)])
def test_zero_short_circuit(vat, service_fee, subtotal, is_taxable):
    result = calculate_taxes(subtotal, [vat, service_fee], "both", is_taxable=is_taxable)
    assert result.service_fee == 0
    assert result.tax == 0
    assert result.total == subtotal
    assert result.service_fee_rate == 0
    assert result.total_tax_rate == 0
    assert result.applicable_taxes == ()
    assert result.tax_breakdown == ()


def test_tenant_rules_resolved_for_owner(tax_catalog, vat):
    result = calculate_taxes(10000, tax_catalog, "facility", company_id="acme")
    assert [r.name for r in result.applicable_taxes] == ["VAT", "NHIL"]
    assert [i.amount for i in result.tax_breakdown] == [1500, 250]
    assert result.total_tax_rate == 17.5
    assert result.service_fee == 500
    assert result.tax == 1750
    assert result.total == 12250


def test_tenant_rules_ignored_without_company(tax_catalog):
    result = calculate_taxes(10000, tax_catalog, "facility")
    assert [r.name for r in result.applicable_taxes] == ["VAT"]
    assert result.total == 12000


def test_other_tenants_rules_never_apply(tax_catalog):
    result = calculate_taxes(10000, tax_catalog, "both", company_id="other-co")
    assert [r.name for r in result.applicable_taxes] == ["VAT", "COVID Levy"]


def test_each_line_rounded_before_summing():
    rules = [
        TaxRule(name="NHIL", rate=2.5, is_super_admin_tax=True),
        TaxRule(name="GETFund", rate=2.5, is_super_admin_tax=True),
    ]
    result = calculate_taxes(20, rules, "both")
    # 0.5 + 0.5 rounded per line, not 1.0 rounded once
    assert [i.amount for i in result.tax_breakdown] == [1, 1]
    assert result.tax == 2
    assert result.total == 22


def test_half_rounds_up():
    fee = TaxRule(name="Service Fee", rate=5, is_super_admin_tax=True)
    assert calculate_taxes(10, [fee], "both").service_fee == 1
    assert calculate_taxes(30, [fee], "both").service_fee == 2
    assert calculate_taxes(333, [TaxRule(name="VAT", rate=15, is_super_admin_tax=True)], "both").tax == 50


def test_decimal_subtotal_supported(vat):
    result = calculate_taxes(Decimal("99.50"), [vat], "both")
    assert result.tax == 15
    assert result.total == Decimal("114.50")


def test_service_fee_detection_is_name_based():
    rules = [
        TaxRule(name="Platform Service  Fee (online)", rate=2, is_super_admin_tax=True),
        TaxRule(name="Service-Fee", rate=3, is_super_admin_tax=True),
    ]
    result = calculate_taxes(1000, rules, "both")
    assert result.service_fee_rate == 2
    assert result.service_fee == 20
    assert [r.name for r in result.applicable_taxes] == ["Service-Fee"]
    assert result.tax == 30


def test_tax_on_tax_never_lowers_tax(tax_catalog):
    for subtotal in (1, 99, 1000, 12345, 10 ** 6):
        plain = calculate_taxes(subtotal, tax_catalog, "both", company_id="acme")
        compounded = calculate_taxes(
            subtotal, tax_catalog, "both", company_id="acme", is_tax_on_tax=True
        )
        assert compounded.tax >= plain.tax


def test_scope_wrappers(tax_catalog):
    rental = calculate_rental_taxes(10000, tax_catalog, "acme")
    booking = calculate_booking_taxes(10000, tax_catalog, "acme")
    transaction = calculate_transaction_taxes(10000, tax_catalog, "acme")
    assert [r.name for r in rental.applicable_taxes] == ["VAT", "GETFund"]
    assert [r.name for r in booking.applicable_taxes] == ["VAT", "NHIL"]
    assert [r.name for r in transaction.applicable_taxes] == ["VAT"]


def test_scope_wrappers_pass_policy_flags(vat, service_fee):
    result = calculate_booking_taxes(10000, [vat, service_fee], None, True, False, True)
    assert result.total == 12075
    assert calculate_rental_taxes(10000, [vat], None, False).total == 10000


def test_result_is_immutable(vat):
    result = calculate_taxes(10000, [vat], "both")
    with pytest.raises(AttributeError):
        result.total = 0


def test_get_applicable_taxes_vat_first_then_name():
    rules = [
        TaxRule(name="beta", rate=1, is_super_admin_tax=True),
        TaxRule(name="Alpha", rate=1, is_super_admin_tax=True),
        TaxRule(name=" v A t ", rate=1, is_super_admin_tax=True),
    ]
    ordered = get_applicable_taxes(rules, "facility")
    assert [r.name for r in ordered] == [" v A t ", "Alpha", "beta"]
    assert get_applicable_taxes(rules, "facility") == ordered


def test_get_applicable_taxes_keeps_service_fees(tax_catalog):
    names = [r.name for r in get_applicable_taxes(tax_catalog, "inventory_item", "acme")]
    assert names == ["VAT", "GETFund", "Service Fee"]


def test_get_vat_tax_first_match_wins():
    first = TaxRule(id="a", name="VAT", rate=15, applies_to="inventory_item", company="acme")
    second = TaxRule(id="b", name="vat", rate=12.5, is_super_admin_tax=True)
    assert get_vat_tax([first, second], "acme") is first
    assert get_vat_tax([first, second]) is second


def test_get_vat_tax_ignores_facility_only_and_inactive():
    rules = [
        TaxRule(name="VAT", rate=15, applies_to="facility", is_super_admin_tax=True),
        TaxRule(name="VAT", rate=15, active=False, is_super_admin_tax=True),
        TaxRule(name="VAT Flat", rate=3, is_super_admin_tax=True),
    ]
    assert get_vat_tax(rules) is None


def test_format_tax_breakdown(vat, service_fee):
    result = calculate_taxes(10000, [vat, service_fee], "both")
    assert format_tax_breakdown(result) == [
        {"name": "Service Fee", "rate": "5.00%", "amount": "₵500", "type": "service"},
        {"name": "VAT", "rate": "15.00%", "amount": "₵1,500", "type": "tax"},
    ]
    rows = format_tax_breakdown(calculate_taxes(10000, [vat], "both"), "$")
    assert rows == [{"name": "VAT", "rate": "15.00%", "amount": "$1,500", "type": "tax"}]


def test_get_tax_configuration(tax_catalog):
    config = get_tax_configuration(tax_catalog, "acme")
    assert config.is_tax_inclusive is False
    assert config.is_tax_on_tax is False
    assert [r.name for r in config.default_taxes] == ["NHIL", "Service Fee", "GETFund", "VAT"]


def test_snapshot_tax_rule_from_catalog_record():
    rule = snapshot_tax_rule(
        {
            "_id": "abc",
            "name": "VAT",
            "rate": None,
            "appliesTo": "facility",
            "active": True,
            "isSuperAdminTax": False,
            "company": 42,
            "type": "GH",
        }
    )
    assert rule == TaxRule(
        id="abc", name="VAT", rate=0, applies_to="facility", company="42", type="GH"
    )
    assert calculate_taxes(1000, [rule], "facility", company_id=42).tax == 0


def test_normalize_name():
    assert normalize_name("  Service\tFee ") == "servicefee"
    assert normalize_name("V A T") == "vat"


def test_lines_rounded_on_double_products():
    # 180 * (17.5 / 100) is 31.499999999999996 in double arithmetic
    rule = TaxRule(name="VAT", rate=17.5, is_super_admin_tax=True)
    assert calculate_taxes(180, [rule], "both").tax == 31
    assert calculate_taxes(180, [rule], "both").total == 211


def test_rate_display_rounds_ties_up():
    rule = TaxRule(name="Tourism Levy", rate=0.125, is_super_admin_tax=True)
    rows = format_tax_breakdown(calculate_taxes(10000, [rule], "both"))
    assert rows[0]["rate"] == "0.13%"


def test_snapshot_without_scope_matches_nothing():
    rule = snapshot_tax_rule({"name": "VAT", "rate": 15, "active": True, "isSuperAdminTax": True})
    assert rule.applies_to is None
    for scope in ("facility", "inventory_item", "both"):
        assert get_applicable_taxes([rule], scope) == []
    assert get_vat_tax([rule]) is None
