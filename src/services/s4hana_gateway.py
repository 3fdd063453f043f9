"""
Outbound calls to the S/4HANA OData v2 APIs.

Every method issues exactly one HTTP request. Nothing is retried or cached.
Failures (transport errors, timeouts, non-2xx responses, unexpected
envelopes) come back as outcomes with success=False and a message from
normalize_error(); they are never raised.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional
import httpx
from loguru import logger
from pydantic import BaseModel

from .error_normalizer import normalize_error

LOOKUP_FIELDS = {
    "ean": "ProductStandardID",
    "model": "ProductDescription",
}


class Destination(BaseModel):
    """Named connection profile: base URL plus credentials."""
    name: str
    url: str | None = None
    username: str | None = None
    password: str | None = None
    sap_client: str | None = None


def resolve_destination(name: str | None = None) -> Destination:
    """Resolve a destination from environment configuration."""
    from ..core.config import settings

    return Destination(
        name=name or settings.s4hana_destination,
        url=settings.s4hana_url,
        username=settings.s4hana_user,
        password=settings.s4hana_password,
        sap_client=settings.s4hana_client,
    )


@dataclass
class GatewayFailure:
    description: str
    status_code: Optional[int] = None
    body: Any = None


@dataclass
class GatewayOutcome:
    success: bool
    status_code: Optional[int] = None
    body: Any = None
    result_id: Optional[str] = None
    message: str = ""
    failure: Optional[GatewayFailure] = None


@dataclass
class ProductLookupOutcome:
    success: bool
    message: str
    products: dict[str, str] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)


def _failed(failure: GatewayFailure) -> GatewayOutcome:
    return GatewayOutcome(
        success=False,
        status_code=failure.status_code,
        body=failure.body,
        message=normalize_error(failure),
        failure=failure,
    )


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _odata_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def build_lookup_filter(identifiers: Iterable[str], field_name: str) -> str:
    """OData filter matching any of the identifiers: "F eq 'a' or F eq 'b'"."""
    return " or ".join(f"{field_name} eq {_odata_literal(i)}" for i in identifiers)


class S4HanaGateway:
    """
    HTTP gateway for one S/4HANA destination.

    Usage:
        gateway = S4HanaGateway(resolve_destination())
        outcome = await gateway.create_sales_order(payload)
        if outcome.success:
            print(outcome.result_id)
    """

    def __init__(
        self,
        destination: Destination,
        sales_order_path: str = "/sap/opu/odata/sap/API_SALES_ORDER_SRV/A_SalesOrder",
        product_path: str = "/sap/opu/odata/sap/API_PRODUCT_SRV/A_Product",
        product_description_path: str = "/sap/opu/odata/sap/API_PRODUCT_SRV/A_ProductDescription",
        create_timeout: float = 60.0,
        lookup_timeout: float = 30.0,
    ):
        self.destination = destination
        self.sales_order_path = sales_order_path
        self.product_path = product_path
        self.product_description_path = product_description_path
        self.create_timeout = create_timeout
        self.lookup_timeout = lookup_timeout

    async def call(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        params: Optional[dict[str, str]] = None,
        timeout: float = 30.0,
    ) -> GatewayOutcome:
        """Issue one request against the destination and classify the response."""
        dest = self.destination
        if not dest.url:
            return _failed(GatewayFailure(description=f"Destination '{dest.name}' has no URL configured"))

        query = dict(params or {})
        if dest.sap_client:
            query["sap-client"] = dest.sap_client

        auth = httpx.BasicAuth(dest.username, dest.password or "") if dest.username else None
        headers = {"Accept": "application/json", "Content-Type": "application/json"}

        logger.info("Calling S/4HANA", destination=dest.name, method=method, path=path)
        try:
            async with httpx.AsyncClient(base_url=dest.url, auth=auth, headers=headers, timeout=timeout) as client:
                response = await client.request(method, path, json=body, params=query or None)
        except httpx.HTTPError as e:
            logger.error("S/4HANA request failed", destination=dest.name, path=path, error=repr(e))
            return _failed(GatewayFailure(description=f"S/4HANA request failed: {str(e) or type(e).__name__}"))

        parsed = _json_body(response)
        if not response.is_success:
            logger.warning("S/4HANA returned an error", status=response.status_code, path=path)
            return _failed(GatewayFailure(
                description=f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
                body=parsed,
            ))

        return GatewayOutcome(success=True, status_code=response.status_code, body=parsed)

    async def create_sales_order(self, payload: dict) -> GatewayOutcome:
        """POST a sales order; result_id is the SalesOrder number from the `d` envelope."""
        outcome = await self.call("POST", self.sales_order_path, body=payload, timeout=self.create_timeout)
        if not outcome.success:
            return outcome

        envelope = outcome.body.get("d") if isinstance(outcome.body, dict) else None
        sales_order = envelope.get("SalesOrder") if isinstance(envelope, dict) else None
        if sales_order is None or str(sales_order).strip() == "":
            return _failed(GatewayFailure(
                description="S/4HANA response did not contain a sales order number",
                status_code=outcome.status_code,
                body=outcome.body,
            ))

        sales_order = str(sales_order)
        logger.info("Sales order created", sales_order=sales_order)
        return GatewayOutcome(
            success=True,
            status_code=outcome.status_code,
            body=outcome.body,
            result_id=sales_order,
            message=f"Sales order {sales_order} created successfully",
        )

    async def lookup_products(self, identifiers: list[str], lookup_type: str = "ean") -> ProductLookupOutcome:
        """
        Resolve EANs (ProductStandardID) or model names (ProductDescription)
        to S/4HANA product ids.

        Raises:
            KeyError: unknown lookup_type (callers check LOOKUP_FIELDS first)
        """
        field_name = LOOKUP_FIELDS[lookup_type]
        path = self.product_path if lookup_type == "ean" else self.product_description_path

        params = {
            "$filter": build_lookup_filter(identifiers, field_name),
            "$select": f"Product,{field_name}",
            "$format": "json",
        }
        outcome = await self.call("GET", path, params=params, timeout=self.lookup_timeout)
        if not outcome.success:
            return ProductLookupOutcome(success=False, message=outcome.message, missing=list(identifiers))

        envelope = outcome.body.get("d") if isinstance(outcome.body, dict) else None
        results = envelope.get("results") if isinstance(envelope, dict) else None
        if not isinstance(results, list):
            return ProductLookupOutcome(
                success=False,
                message="S/4HANA response did not contain a result list",
                missing=list(identifiers),
            )

        requested = set(identifiers)
        products: dict[str, str] = {}
        for row in results:
            if not isinstance(row, dict):
                continue
            source = str(row.get(field_name, "")).strip()
            if source in requested and source not in products and row.get("Product"):
                products[source] = str(row["Product"])

        missing = [i for i in identifiers if i not in products]
        logger.info("Product lookup", lookup_type=lookup_type, requested=len(identifiers), found=len(products))

        if missing:
            return ProductLookupOutcome(
                success=False,
                message=f"{len(missing)} of {len(identifiers)} products not found: {', '.join(missing)}",
                products=products,
                missing=missing,
            )
        return ProductLookupOutcome(
            success=True,
            message=f"Found {len(products)} of {len(identifiers)} products",
            products=products,
        )


def create_gateway(destination: Destination | None = None) -> S4HanaGateway:
    """Factory using environment configuration."""
    from ..core.config import settings

    return S4HanaGateway(
        destination or resolve_destination(),
        sales_order_path=settings.sales_order_path,
        product_path=settings.product_path,
        product_description_path=settings.product_description_path,
        create_timeout=settings.create_timeout,
        lookup_timeout=settings.lookup_timeout,
    )
