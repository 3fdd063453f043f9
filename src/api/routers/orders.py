from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from ..deps import (
    get_extraction_rules,
    get_gateway,
    get_payload_builder,
    get_purchase_order_store,
    get_sales_order_rules,
)
from ...models.extraction import ExtractionRequest, ProductLookupRequest, SalesOrderRequest
from ...models.responses import ProductLookupResult, PurchaseOrder, SalesOrderResult, ValidationResponse
from ...services import sales_orders
from ...services.errors import MalformedInputError
from ...services.payload_builder import SalesOrderPayloadBuilder
from ...services.s4hana_gateway import S4HanaGateway
from ...services.storage import PurchaseOrderStoreBase
from ...services.validation_rules import OrderValidationRules

router = APIRouter(prefix="/ocr", tags=["ocr"])


@router.post("/createPOFromExtraction", response_model=PurchaseOrder)
def create_po_from_extraction(
    req: ExtractionRequest,
    store: PurchaseOrderStoreBase = Depends(get_purchase_order_store),
):
    """
    Store an extraction document as a purchase order with line items.

    Returns the stored purchase order, read back by its generated ID.
    """
    try:
        return sales_orders.create_po_from_extraction(req.extractionData, store)
    except MalformedInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Storing purchase order failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Storing purchase order failed")


@router.get("/PurchaseOrders/{purchase_order_id}", response_model=PurchaseOrder)
def get_purchase_order(
    purchase_order_id: str,
    store: PurchaseOrderStoreBase = Depends(get_purchase_order_store),
):
    """Read a stored purchase order with its line items"""
    order = store.get_purchase_order(purchase_order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Purchase order not found")
    return PurchaseOrder.model_validate(order)


@router.post("/createSalesOrder", response_model=SalesOrderResult)
async def create_sales_order(
    req: SalesOrderRequest,
    gateway: S4HanaGateway = Depends(get_gateway),
    rules: OrderValidationRules = Depends(get_sales_order_rules),
):
    """
    Post an API_SALES_ORDER_SRV payload as-is after checking order type,
    sales organization, distribution channel, division, sold-to party and items.
    """
    return await sales_orders.create_sales_order(req.payload, gateway, rules)


@router.post("/createSalesOrderFromExtraction", response_model=SalesOrderResult)
async def create_sales_order_from_extraction(
    req: ExtractionRequest,
    gateway: S4HanaGateway = Depends(get_gateway),
    builder: SalesOrderPayloadBuilder = Depends(get_payload_builder),
    rules: OrderValidationRules = Depends(get_extraction_rules),
):
    """
    Turn an extraction document into an S/4HANA sales order.

    Example response:
    {
        "salesOrderNumber": "1000123",
        "message": "Sales order 1000123 created successfully",
        "success": true
    }
    """
    return await sales_orders.create_sales_order_from_extraction(req.extractionData, gateway, builder, rules)


@router.post("/validateExtraction", response_model=ValidationResponse)
async def validate_extraction(
    req: ExtractionRequest,
    rules: OrderValidationRules = Depends(get_extraction_rules),
):
    """Map and validate an extraction document without calling S/4HANA"""
    return sales_orders.validate_extraction(req.extractionData, rules)


@router.post("/lookupProducts", response_model=ProductLookupResult)
async def lookup_products(
    req: ProductLookupRequest,
    gateway: S4HanaGateway = Depends(get_gateway),
):
    """
    Resolve EANs (lookupType "ean") or model names (lookupType "model")
    to S/4HANA product numbers. `products` is a JSON object string.
    """
    return await sales_orders.lookup_products(req.identifiers, req.lookupType, gateway)
