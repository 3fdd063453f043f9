from typing import Any
from pydantic import BaseModel, Field

class ExtractionField(BaseModel):
    name: str
    value: str | int | float | None = None

class Extraction(BaseModel):
    headerFields: list[ExtractionField] = Field(default_factory=list)
    lineItems: list[list[ExtractionField]] = Field(default_factory=list)
    confidence: float = Field(default=0.0)

class ExtractionDocument(BaseModel):
    extraction: Extraction

class ExtractionRequest(BaseModel):
    """Body of the extraction-driven actions. extractionData may be a JSON string or an object."""
    extractionData: Any = None

class SalesOrderRequest(BaseModel):
    """Body of createSalesOrder. payload is an API_SALES_ORDER_SRV-shaped order (string or object)."""
    payload: Any = None

class ProductLookupRequest(BaseModel):
    identifiers: list[str] = Field(default_factory=list)
    lookupType: str = Field(default="ean")
