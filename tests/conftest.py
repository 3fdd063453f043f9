"""
Pytest configuration and shared fixtures.

Registers the integration marker and builds collaborators pointed at a
fake S/4HANA host that respx intercepts.
"""

import pytest

from src.services.payload_builder import EnvironmentDefaults, SalesOrderPayloadBuilder
from src.services.s4hana_gateway import Destination, S4HanaGateway
from src.services.storage import InMemoryPurchaseOrderStore
from src.services.validation_rules import create_extraction_rules, create_sales_order_rules

S4_URL = "https://s4.example.com"
SALES_ORDER_URL = f"{S4_URL}/sap/opu/odata/sap/API_SALES_ORDER_SRV/A_SalesOrder"
PRODUCT_URL = f"{S4_URL}/sap/opu/odata/sap/API_PRODUCT_SRV/A_Product"
PRODUCT_DESCRIPTION_URL = f"{S4_URL}/sap/opu/odata/sap/API_PRODUCT_SRV/A_ProductDescription"


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against a real S/4HANA system"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring a real S/4HANA system"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def gateway():
    return S4HanaGateway(Destination(name="TEST", url=S4_URL, username="user", password="secret"))


@pytest.fixture
def builder():
    return SalesOrderPayloadBuilder(EnvironmentDefaults())


@pytest.fixture
def extraction_rules():
    return create_extraction_rules(default_currency="AED")


@pytest.fixture
def sales_order_rules():
    return create_sales_order_rules()


@pytest.fixture
def po_store():
    return InMemoryPurchaseOrderStore()


def _make_document(header: dict, lines: list[dict], confidence: float = 0.9) -> dict:
    return {
        "extraction": {
            "headerFields": [{"name": k, "value": v} for k, v in header.items()],
            "lineItems": [[{"name": k, "value": v} for k, v in line.items()] for line in lines],
            "confidence": confidence,
        }
    }


@pytest.fixture
def make_document():
    """Build an extraction document from plain {name: value} dicts."""
    return _make_document
