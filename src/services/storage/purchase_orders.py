"""
In-memory purchase order store (for demo and tests).
In production, use the SQLite store or a database.
"""
from datetime import datetime, UTC
from typing import Dict, Optional
import copy
import uuid

from .purchase_order_store_base import PurchaseOrderStoreBase


class InMemoryPurchaseOrderStore(PurchaseOrderStoreBase):
    def __init__(self):
        self._orders: Dict[str, dict] = {}

    def insert_purchase_order(self, header: dict, extraction_confidence: float = 0.0,
                              processing_status: str = "EXTRACTED") -> str:
        po_id = str(uuid.uuid4())
        self._orders[po_id] = {
            "id": po_id,
            "header": dict(header),
            "extraction_confidence": extraction_confidence,
            "processing_status": processing_status,
            "created_at": datetime.now(UTC).isoformat(),
            "line_items": [],
        }
        return po_id

    def insert_line_items(self, purchase_order_id: str, line_items: list[dict]) -> int:
        if purchase_order_id not in self._orders:
            raise KeyError(f"Purchase order {purchase_order_id} not found")

        stored = self._orders[purchase_order_id]["line_items"]
        for line in line_items:
            data = dict(line)
            stored.append({
                "id": str(uuid.uuid4()),
                "purchase_order_id": purchase_order_id,
                "item_number": str(data.pop("itemNumber", len(stored) + 1)),
                "data": data,
            })
        return len(line_items)

    def get_purchase_order(self, purchase_order_id: str) -> Optional[dict]:
        order = self._orders.get(purchase_order_id)
        return copy.deepcopy(order) if order else None
