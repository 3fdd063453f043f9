from typing import Any
from pydantic import BaseModel, Field

class SalesOrderResult(BaseModel):
    sales_order_number: str | None = Field(default=None, alias="salesOrderNumber")
    message: str = ""
    success: bool = False

    model_config = {"populate_by_name": True}

class ValidationResponse(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)

class ProductLookupResult(BaseModel):
    products: str = "{}"  # JSON object: source identifier -> S/4HANA product id
    success: bool = False
    message: str = ""

class LineItem(BaseModel):
    id: str
    purchase_order_id: str = Field(alias="purchaseOrder_ID")
    item_number: str = Field(alias="itemNumber")
    data: dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}

class PurchaseOrder(BaseModel):
    id: str = Field(alias="ID")
    header: dict[str, Any] = Field(default_factory=dict)
    extraction_confidence: float = Field(default=0.0, alias="extractionConfidence")
    processing_status: str = Field(default="EXTRACTED", alias="processingStatus")
    created_at: str | None = Field(default=None, alias="createdAt")
    line_items: list[LineItem] = Field(default_factory=list, alias="lineItems")

    model_config = {"populate_by_name": True}
