"""
FastAPI dependency providers.

Collaborators are created once from environment configuration;
tests replace them with app.dependency_overrides.
"""

from functools import lru_cache

from ..core.config import settings
from ..services.payload_builder import SalesOrderPayloadBuilder, create_payload_builder
from ..services.s4hana_gateway import S4HanaGateway, create_gateway
from ..services.storage import PurchaseOrderStoreBase, SQLitePurchaseOrderStore
from ..services.validation_rules import (
    OrderValidationRules,
    create_extraction_rules,
    create_sales_order_rules,
)


@lru_cache
def get_gateway() -> S4HanaGateway:
    return create_gateway()


@lru_cache
def get_payload_builder() -> SalesOrderPayloadBuilder:
    return create_payload_builder()


@lru_cache
def get_extraction_rules() -> OrderValidationRules:
    return create_extraction_rules()


@lru_cache
def get_sales_order_rules() -> OrderValidationRules:
    return create_sales_order_rules()


@lru_cache
def get_purchase_order_store() -> PurchaseOrderStoreBase:
    return SQLitePurchaseOrderStore(settings.po_db_path)
