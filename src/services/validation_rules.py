"""
Business rules checked before an order is sent to S/4HANA.

One generator evaluates the rules and yields violations in order
(header fields first, then lines). Callers pick the policy:

- validate(): run to completion, return every violation (validateExtraction)
- ensure_valid(): stop at the first violation and raise (create actions)
"""

from typing import Any, Iterator
from loguru import logger
from pydantic import BaseModel, Field

from .errors import ValidationFailedError
from .field_mapper import parse_number


class RequiredField(BaseModel):
    """A required header value. Any one of `keys` satisfies it."""
    label: str
    keys: list[str]


class ValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


class ValidationRulesConfig(BaseModel):
    required_header_fields: list[RequiredField] = Field(default_factory=list)
    material_fields: list[str] = Field(default_factory=lambda: ["materialNumber", "customerMaterialNumber"])
    quantity_field: str = "quantity"
    require_lines: bool = True
    # Configured defaults that satisfy a required key when the document omits it
    defaults: dict[str, Any] = Field(default_factory=dict)


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


class OrderValidationRules:
    """Required-field and per-line checks shared by both validation policies."""

    def __init__(self, config: ValidationRulesConfig):
        self.config = config

    def _present(self, record: dict, key: str) -> bool:
        return _has_value(record.get(key)) or _has_value(self.config.defaults.get(key))

    def iter_violations(self, header: dict, lines: list[dict]) -> Iterator[str]:
        header = header if isinstance(header, dict) else {}
        lines = lines if isinstance(lines, list) else []

        for required in self.config.required_header_fields:
            if not any(self._present(header, key) for key in required.keys):
                names = " or ".join(f"'{key}'" for key in required.keys)
                yield f"Missing required field {names} ({required.label})"

        if self.config.require_lines and not lines:
            yield "At least one line item is required"

        for index, line in enumerate(lines, start=1):
            line = line if isinstance(line, dict) else {}
            if not any(_has_value(line.get(key)) for key in self.config.material_fields):
                yield f"Line {index}: material number is missing"

            quantity = line.get(self.config.quantity_field)
            if not _has_value(quantity) or parse_number(quantity) <= 0:
                yield f"Line {index}: quantity must be greater than 0"

    def validate(self, header: dict, lines: list[dict]) -> ValidationResult:
        """Collect every violation."""
        errors = list(self.iter_violations(header, lines))
        logger.info("Order validation", valid=not errors, error_count=len(errors))
        return ValidationResult(valid=not errors, errors=errors)

    def ensure_valid(self, header: dict, lines: list[dict]) -> None:
        """Raise ValidationFailedError on the first violation."""
        first = next(self.iter_violations(header, lines), None)
        if first is not None:
            logger.warning("Order rejected by validation", reason=first)
            raise ValidationFailedError(first)


EXTRACTION_REQUIRED_FIELDS = [
    RequiredField(label="customer", keys=["receiverId", "senderId"]),
    RequiredField(label="purchase order number", keys=["documentNumber"]),
    RequiredField(label="currency", keys=["currencyCode"]),
]

SALES_ORDER_REQUIRED_FIELDS = [
    RequiredField(label="order type", keys=["SalesOrderType"]),
    RequiredField(label="sales organization", keys=["SalesOrganization"]),
    RequiredField(label="distribution channel", keys=["DistributionChannel"]),
    RequiredField(label="division", keys=["OrganizationDivision"]),
    RequiredField(label="sold-to party", keys=["SoldToParty"]),
]


def create_extraction_rules(default_currency: str | None = None) -> OrderValidationRules:
    """
    Rules for mapped extraction documents.

    The configured default currency satisfies the currency requirement;
    pass an empty string to require it on every document.
    """
    from ..core.config import settings

    currency = settings.default_currency if default_currency is None else default_currency
    return OrderValidationRules(ValidationRulesConfig(
        required_header_fields=EXTRACTION_REQUIRED_FIELDS,
        defaults={"currencyCode": currency} if currency else {},
    ))


def create_sales_order_rules() -> OrderValidationRules:
    """Rules for API_SALES_ORDER_SRV-shaped payloads submitted directly."""
    return OrderValidationRules(ValidationRulesConfig(
        required_header_fields=SALES_ORDER_REQUIRED_FIELDS,
        material_fields=["Material", "MaterialByCustomer"],
        quantity_field="RequestedQuantity",
    ))
