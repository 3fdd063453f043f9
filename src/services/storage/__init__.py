from .purchase_order_store_base import PurchaseOrderStoreBase
from .purchase_orders import InMemoryPurchaseOrderStore
from .purchase_orders_sqlite import SQLitePurchaseOrderStore

__all__ = ["PurchaseOrderStoreBase", "InMemoryPurchaseOrderStore", "SQLitePurchaseOrderStore"]
