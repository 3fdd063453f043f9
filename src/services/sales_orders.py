"""
Actions exposed by the adapter.

Each create/lookup action returns a result object with success=False
instead of raising: malformed input, validation failures, build errors
and gateway failures all end up in `message`. validate_extraction()
always returns a ValidationResponse, even on unexpected errors.
"""

import json
from typing import Any
from loguru import logger
from pydantic import ValidationError

from ..models.extraction import ExtractionDocument
from ..models.responses import (
    ProductLookupResult,
    PurchaseOrder,
    SalesOrderResult,
    ValidationResponse,
)
from .errors import AdapterError, MalformedInputError
from .field_mapper import map_fields, map_line_items
from .payload_builder import SalesOrderPayloadBuilder
from .s4hana_gateway import LOOKUP_FIELDS, GatewayOutcome, S4HanaGateway
from .storage import PurchaseOrderStoreBase
from .validation_rules import OrderValidationRules


def parse_json_input(raw: Any, what: str = "extractionData") -> dict:
    """Accept a JSON string or an already-decoded object."""
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise MalformedInputError(f"{what} is not valid JSON: {e}")

    if not isinstance(raw, dict):
        raise MalformedInputError(f"{what} must be a JSON object")
    return raw


def parse_extraction_document(raw: Any) -> ExtractionDocument:
    data = parse_json_input(raw)
    try:
        return ExtractionDocument.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise MalformedInputError(f"Invalid extraction document at '{location}': {first['msg']}")


def map_document(document: ExtractionDocument) -> tuple[dict, list[dict]]:
    extraction = document.extraction
    return map_fields(extraction.headerFields), map_line_items(extraction.lineItems)


def _payload_items(payload: dict) -> list[dict]:
    """to_Item may be a plain list or an OData v2 {"results": [...]} wrapper."""
    items = payload.get("to_Item")
    if isinstance(items, dict):
        items = items.get("results")
    return items if isinstance(items, list) else []


def _sales_order_result(outcome: GatewayOutcome) -> SalesOrderResult:
    if outcome.success:
        return SalesOrderResult(
            sales_order_number=outcome.result_id,
            message=outcome.message,
            success=True,
        )
    return SalesOrderResult(sales_order_number=None, message=outcome.message, success=False)


def validate_extraction(raw: Any, rules: OrderValidationRules) -> ValidationResponse:
    """Dry run: map and validate, collecting every violation. No outbound call."""
    try:
        header, lines = map_document(parse_extraction_document(raw))
        result = rules.validate(header, lines)
        return ValidationResponse(valid=result.valid, errors=result.errors)
    except AdapterError as e:
        return ValidationResponse(valid=False, errors=[str(e)])
    except Exception as e:
        logger.exception("Unexpected error while validating extraction")
        return ValidationResponse(valid=False, errors=[f"Validation failed: {e}"])


async def create_sales_order_from_extraction(
    raw: Any,
    gateway: S4HanaGateway,
    builder: SalesOrderPayloadBuilder,
    rules: OrderValidationRules,
) -> SalesOrderResult:
    """Map, validate (fail fast), build and post a sales order."""
    try:
        header, lines = map_document(parse_extraction_document(raw))
        rules.ensure_valid(header, lines)
        payload = builder.build(header, lines)

        logger.info(
            "Submitting sales order from extraction",
            purchase_order=payload.get("PurchaseOrderByCustomer"),
            items=len(payload["to_Item"]),
        )
        return _sales_order_result(await gateway.create_sales_order(payload))
    except AdapterError as e:
        logger.warning("Sales order not created", reason=str(e))
        return SalesOrderResult(message=str(e), success=False)
    except Exception as e:
        logger.exception("Unexpected error while creating sales order")
        return SalesOrderResult(message=f"Unexpected error: {e}", success=False)


async def create_sales_order(
    raw: Any,
    gateway: S4HanaGateway,
    rules: OrderValidationRules,
) -> SalesOrderResult:
    """Post an already S/4HANA-shaped payload after validating it."""
    try:
        payload = parse_json_input(raw, what="payload")
        rules.ensure_valid(payload, _payload_items(payload))
        return _sales_order_result(await gateway.create_sales_order(payload))
    except AdapterError as e:
        logger.warning("Sales order payload rejected", reason=str(e))
        return SalesOrderResult(message=str(e), success=False)
    except Exception as e:
        logger.exception("Unexpected error while creating sales order")
        return SalesOrderResult(message=f"Unexpected error: {e}", success=False)


def create_po_from_extraction(raw: Any, store: PurchaseOrderStoreBase) -> PurchaseOrder:
    """
    Store an extraction document as a purchase order with line items.

    Raises:
        MalformedInputError: the document could not be parsed
    """
    document = parse_extraction_document(raw)
    header, lines = map_document(document)
    for position, line in enumerate(lines, start=1):
        line["itemNumber"] = str(position)

    po_id = store.insert_purchase_order(
        header,
        extraction_confidence=document.extraction.confidence,
        processing_status="EXTRACTED",
    )
    store.insert_line_items(po_id, lines)
    logger.info("Purchase order stored", purchase_order_id=po_id, lines=len(lines))

    return PurchaseOrder.model_validate(store.get_purchase_order(po_id))


async def lookup_products(
    identifiers: list[str],
    lookup_type: str,
    gateway: S4HanaGateway,
) -> ProductLookupResult:
    """Resolve EANs or model names to S/4HANA product ids."""
    lookup_type = (lookup_type or "ean").strip().lower()
    if lookup_type not in LOOKUP_FIELDS:
        return ProductLookupResult(
            success=False,
            message=f"Unsupported lookupType '{lookup_type}' (expected one of: {', '.join(LOOKUP_FIELDS)})",
        )

    # de-duplicate, keep order
    requested = list(dict.fromkeys(str(i).strip() for i in identifiers or [] if str(i).strip()))
    if not requested:
        return ProductLookupResult(success=False, message="No identifiers supplied")

    outcome = await gateway.lookup_products(requested, lookup_type)
    return ProductLookupResult(
        products=json.dumps(outcome.products),
        success=outcome.success,
        message=outcome.message,
    )
