"""
Abstract base class for purchase order persistence.

Defines the interface the createPOFromExtraction action depends on,
so the storage backend can be swapped without touching the action.
"""

from abc import ABC, abstractmethod
from typing import Optional


class PurchaseOrderStoreBase(ABC):
    """
    Abstract purchase order store.

    Implementations can use:
    - In-memory storage (for testing/demo)
    - SQLite (for single-instance deployments)
    - A managed database (for production)
    """

    @abstractmethod
    def insert_purchase_order(
        self,
        header: dict,
        extraction_confidence: float = 0.0,
        processing_status: str = "EXTRACTED",
    ) -> str:
        """
        Insert a purchase order header and return its generated ID.

        Args:
            header: Mapped header fields
            extraction_confidence: Confidence reported by the extraction
            processing_status: Initial processing status

        Returns:
            Purchase order ID (unique identifier)
        """
        pass

    @abstractmethod
    def insert_line_items(self, purchase_order_id: str, line_items: list[dict]) -> int:
        """
        Insert line items belonging to a purchase order.

        Args:
            purchase_order_id: Parent purchase order ID
            line_items: Mapped line records; each must carry an "itemNumber"

        Returns:
            Number of line items inserted
        """
        pass

    @abstractmethod
    def get_purchase_order(self, purchase_order_id: str) -> Optional[dict]:
        """
        Get a purchase order with its line items.

        Returns:
            Dictionary with keys:
                - id, header, extraction_confidence, processing_status, created_at
                - line_items: list of {id, purchase_order_id, item_number, data}
            Returns None if not found.
        """
        pass
