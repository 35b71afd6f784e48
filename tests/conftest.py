from datetime import datetime

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.tax_service import TaxRule

MARCH_2025 = datetime(2025, 3, 14, 10, 30)


@pytest.fixture
def now():
    return MARCH_2025


@pytest.fixture
def vat():
    return TaxRule(id="t1", name="VAT", rate=15, applies_to="both", is_super_admin_tax=True)


@pytest.fixture
def service_fee():
    return TaxRule(
        id="t2", name="Service Fee", rate=5, applies_to="both", is_super_admin_tax=True
    )


@pytest.fixture
def tax_catalog(vat, service_fee):
    return [
        TaxRule(id="t3", name="NHIL", rate=2.5, applies_to="facility", company="acme"),
        service_fee,
        TaxRule(id="t4", name="GETFund", rate=2.5, applies_to="inventory_item", company="acme"),
        vat,
        TaxRule(id="t5", name="Tourism Levy", rate=1, applies_to="both", active=False, is_super_admin_tax=True),
        TaxRule(id="t6", name="COVID Levy", rate=1, applies_to="both", company="other-co"),
    ]


@pytest.fixture
def sync_client():
    return TestClient(app)


@pytest.fixture
async def async_client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
