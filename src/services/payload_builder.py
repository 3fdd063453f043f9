"""
Builds API_SALES_ORDER_SRV deep-insert payloads from mapped extraction records.

The builder does not validate business rules; run the validation rules
first. It only refuses to build when a customer or material identifier is
missing entirely. Identifiers without a mapping entry are sent unchanged.
"""

from datetime import date, datetime
from typing import Any, Literal, Optional
from loguru import logger
from pydantic import BaseModel, Field

from .errors import PayloadBuildError
from .field_mapper import parse_number
from .identifier_mapping import IdentifierMapperBase, IdentityMapper

SHIP_TO_PARTNER = "WE"
BILL_TO_PARTNER = "RE"

CONDITION_UNIT_PRICE = "ZMAN"
CONDITION_DISCOUNT = "ZRDV"
CONDITION_VAT = "ZVAT"

DATE_INPUT_FORMATS = ("%Y-%m-%d", "%d.%m.%Y", "%d/%m/%Y", "%Y/%m/%d")


class EnvironmentDefaults(BaseModel):
    """Deployment configuration applied to every order (loaded once at start)."""
    sales_org: str = "D106"
    dist_channel: str = "02"
    division: str = "00"
    so_type: str = "1SDS"
    payment_terms: str = "Z000"
    plant: str = "DODY"
    currency: str = "AED"
    city: str = "Dubai"
    country: str = "AE"
    quantity_unit: str = "EA"
    item_numbering: Literal["sequential", "step10"] = "sequential"
    date_format: Literal["datetime", "date"] = "datetime"

    @classmethod
    def from_settings(cls, settings) -> "EnvironmentDefaults":
        return cls(
            sales_org=settings.sales_org,
            dist_channel=settings.dist_channel,
            division=settings.division,
            so_type=settings.so_type,
            payment_terms=settings.payment_terms,
            plant=settings.plant,
            currency=settings.default_currency,
            city=settings.default_city,
            country=settings.default_country,
            quantity_unit=settings.default_unit,
            item_numbering=settings.item_numbering,
            date_format=settings.date_format,
        )


class Address(BaseModel):
    name: str = ""
    street: str = ""
    street_prefix: str = Field(default="", alias="streetPrefix")
    city: str = "Dubai"

    model_config = {"populate_by_name": True}


def split_address(text: Any, default_city: str = "Dubai") -> Address:
    """
    Best-effort split of a one-line address: "name, street, street prefix, city".

    At most four slots are filled; anything after the third comma stays in city.
    """
    if not isinstance(text, str) or not text.strip():
        return Address(city=default_city)

    parts = [part.strip() for part in text.split(",", 3)]
    parts += [""] * (4 - len(parts))
    name, street, street_prefix, city = parts
    return Address(name=name, street=street, street_prefix=street_prefix, city=city or default_city)


def format_decimal(value: Any) -> str:
    """Edm.Decimal values travel as strings: 2.0 -> "2", 10.50 -> "10.5"."""
    text = f"{parse_number(value):.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def format_item_number(position: int, numbering: str) -> str:
    if numbering == "step10":
        return f"{position * 10:06d}"
    return str(position)


def format_date(value: Any, date_format: str) -> Optional[str]:
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    else:
        text = str(value).strip()
        parsed = None
        for fmt in DATE_INPUT_FORMATS:
            try:
                parsed = datetime.strptime(text[:10], fmt).date()
                break
            except ValueError:
                continue
        if parsed is None:
            logger.warning("Ignoring unparseable date", value=value)
            return None

    if date_format == "date":
        return parsed.isoformat()
    return f"{parsed.isoformat()}T00:00:00"


class SalesOrderPayloadBuilder:
    """
    Assembles the sales order header, items, pricing elements and partners.

    Usage:
        builder = SalesOrderPayloadBuilder(EnvironmentDefaults(), customer_mapper, material_mapper)
        payload = builder.build(header, lines)
    """

    def __init__(
        self,
        defaults: EnvironmentDefaults,
        customer_mapper: IdentifierMapperBase | None = None,
        material_mapper: IdentifierMapperBase | None = None,
    ):
        self.defaults = defaults
        self.customer_mapper = customer_mapper or IdentityMapper()
        self.material_mapper = material_mapper or IdentityMapper()

    def _translate(self, mapper: IdentifierMapperBase, identifier: Any, kind: str) -> str:
        identifier = str(identifier).strip()
        mapped = mapper.lookup(identifier)
        if mapped is None:
            logger.warning(f"No {kind} mapping found, sending identifier unchanged", identifier=identifier)
            return identifier
        return mapped

    def _customer(self, header: dict) -> str:
        raw = header.get("receiverId") or header.get("senderId")
        if raw is None or str(raw).strip() == "":
            raise PayloadBuildError("Customer identifier (receiverId or senderId) is missing")
        return self._translate(self.customer_mapper, raw, "customer")

    def _material(self, line: dict, position: int) -> str:
        raw = line.get("materialNumber") or line.get("customerMaterialNumber")
        if raw is None or str(raw).strip() == "":
            raise PayloadBuildError(f"Line {position}: material number is missing")
        return self._translate(self.material_mapper, raw, "material")

    def _pricing_elements(self, line: dict, currency: str, unit: str) -> list[dict]:
        conditions = (
            (CONDITION_UNIT_PRICE, line.get("unitPrice")),
            (CONDITION_DISCOUNT, line.get("discountValue", line.get("DiscValue"))),
            (CONDITION_VAT, line.get("vatValue", line.get("VATValue"))),
        )
        return [
            {
                "ConditionType": condition_type,
                "ConditionRateValue": format_decimal(value),
                "ConditionCurrency": currency,
                "ConditionQuantityUnit": unit,
            }
            for condition_type, value in conditions
            if value is not None and value != ""
        ]

    def _item(self, line: dict, position: int, currency: str) -> dict:
        unit = line.get("unitOfMeasure") or line.get("unit") or self.defaults.quantity_unit
        item = {
            "SalesOrderItem": format_item_number(position, self.defaults.item_numbering),
            "Material": self._material(line, position),
            "RequestedQuantity": format_decimal(line.get("quantity")),
            "RequestedQuantityUnit": unit,
            "ProductionPlant": line.get("plant") or self.defaults.plant,
        }
        if line.get("customerMaterialNumber"):
            item["MaterialByCustomer"] = str(line["customerMaterialNumber"])
        if line.get("description"):
            item["SalesOrderItemText"] = str(line["description"])

        pricing = self._pricing_elements(line, line.get("currencyCode") or currency, unit)
        if pricing:
            item["to_PricingElement"] = pricing
        return item

    def _partners(self, customer: str, address: Address) -> list[dict]:
        address_block = {
            "OrganizationName1": address.name,
            "StreetName": address.street,
            "StreetPrefixName": address.street_prefix,
            "CityName": address.city,
            "Country": self.defaults.country,
        }
        return [
            {"PartnerFunction": role, "Customer": customer, "to_Address": [dict(address_block)]}
            for role in (SHIP_TO_PARTNER, BILL_TO_PARTNER)
        ]

    def build(self, header: dict, lines: list[dict], today: date | None = None) -> dict:
        """
        Build the sales order payload.

        Args:
            header: Mapped header record
            lines: Mapped line records, in document order
            today: Order date used when the document has none (defaults to today)

        Raises:
            PayloadBuildError: customer or material identifier missing entirely
        """
        d = self.defaults
        customer = self._customer(header)
        currency = header.get("currencyCode") or d.currency
        fmt = d.date_format

        payload: dict[str, Any] = {
            "SalesOrderType": header.get("orderType") or d.so_type,
            "SalesOrganization": header.get("salesOrganization") or d.sales_org,
            "DistributionChannel": header.get("distributionChannel") or d.dist_channel,
            "OrganizationDivision": header.get("division") or d.division,
            "SoldToParty": customer,
            "PurchaseOrderByCustomer": str(header.get("documentNumber", "")),
            "CustomerPaymentTerms": header.get("paymentTerms") or d.payment_terms,
            "TransactionCurrency": currency,
            "SalesOrderDate": format_date(header.get("documentDate"), fmt) or format_date(today or date.today(), fmt),
        }

        po_date = format_date(header.get("documentDate"), fmt)
        if po_date:
            payload["CustomerPurchaseOrderDate"] = po_date

        delivery = header.get("deliveryDate") or next(
            (line["deliveryDate"] for line in lines if line.get("deliveryDate")), None
        )
        delivery_date = format_date(delivery, fmt)
        if delivery_date:
            payload["RequestedDeliveryDate"] = delivery_date

        payload["to_Item"] = [
            self._item(line, position, currency) for position, line in enumerate(lines, start=1)
        ]
        payload["to_Partner"] = self._partners(
            customer, split_address(header.get("shipToAddress"), d.city)
        )

        logger.debug(
            "Built sales order payload",
            purchase_order=payload["PurchaseOrderByCustomer"],
            sold_to=customer,
            items=len(payload["to_Item"]),
        )
        return payload


def create_payload_builder(
    customer_mapper: IdentifierMapperBase | None = None,
    material_mapper: IdentifierMapperBase | None = None,
) -> SalesOrderPayloadBuilder:
    """Factory using environment configuration for the defaults and mapping tables."""
    from ..core.config import settings
    from .identifier_mapping import create_customer_mapper, create_material_mapper

    return SalesOrderPayloadBuilder(
        EnvironmentDefaults.from_settings(settings),
        customer_mapper or create_customer_mapper(),
        material_mapper or create_material_mapper(),
    )
