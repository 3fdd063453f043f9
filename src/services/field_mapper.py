"""
Maps extraction output (name/value pairs) into keyed records.

The extraction schema ships with a few misspelled field names
("vendorAdress", "deliveryAdress"); they are accepted verbatim and
renamed to the vocabulary the payload builder reads.
"""

import math
import re
from typing import Any, Iterable
from loguru import logger

NUMERIC_FIELDS = frozenset({
    "netAmount",
    "grossAmount",
    "discount",
    "totalVAT",
    "DiscValue",
    "VATValue",
    "quantity",
    "unitPrice",
})

FIELD_RENAMES = {
    "purchaseOrder": "documentNumber",
    "vendorNo": "senderId",
    "vendorAdress": "vendorAddress",
    "deliveryAdress": "shipToAddress",
}

THOUSANDS_GROUPED = re.compile(r"^-?\d{1,3}(,\d{3})+(\.\d+)?$")


def parse_number(value: Any) -> float:
    """Parse a monetary or quantity value; anything unparseable becomes 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        # commas are only accepted as thousands separators: "1,250.50" but not "12,50"
        if THOUSANDS_GROUPED.match(text):
            text = text.replace(",", "")
        try:
            number = float(text)
        except (TypeError, ValueError):
            logger.debug("Could not parse numeric field value", value=value)
            return 0.0
    return number if math.isfinite(number) else 0.0


def _name_and_value(field: Any) -> tuple[Any, Any]:
    if isinstance(field, dict):
        return field.get("name"), field.get("value")
    return getattr(field, "name", None), getattr(field, "value", None)


def map_fields(fields: Iterable[Any]) -> dict[str, Any]:
    """
    Translate a sequence of extraction fields into a flat keyed record.

    Fields without a value are skipped; duplicate names are last-write-wins.
    A non-list input yields an empty record.
    """
    if not isinstance(fields, (list, tuple)):
        return {}

    record: dict[str, Any] = {}
    for field in fields:
        name, value = _name_and_value(field)
        if not name or value is None or value == "":
            continue

        if name in NUMERIC_FIELDS:
            value = parse_number(value)

        record[FIELD_RENAMES.get(name, name)] = value

    return record


def map_line_items(lines: Iterable[Any]) -> list[dict[str, Any]]:
    """Map each line's field array, dropping lines that end up empty."""
    if not isinstance(lines, (list, tuple)):
        return []

    mapped = [map_fields(line) for line in lines]
    items = [item for item in mapped if item]

    if len(items) != len(mapped):
        logger.debug("Dropped empty line items", raw_lines=len(mapped), kept=len(items))

    return items
