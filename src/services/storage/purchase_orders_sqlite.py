"""
SQLite-based purchase order persistence.

Stores extracted purchase orders and their line items so they can be
reviewed or turned into sales orders later.
"""

import sqlite3
import json
import uuid
from datetime import datetime, UTC
from typing import Optional
from .purchase_order_store_base import PurchaseOrderStoreBase


class SQLitePurchaseOrderStore(PurchaseOrderStoreBase):
    """
    SQLite-backed purchase order store.

    Header and line fields are kept as JSON; the purchase order number and
    customer are also stored in columns for querying.
    """

    def __init__(self, db_path: str = "purchase_orders.db"):
        """
        Initialize store with database path.

        Args:
            db_path: Path to SQLite database file (default: purchase_orders.db)
        """
        self.db_path = db_path
        self._init_database()

    def _init_database(self):
        """Create tables if they don't exist"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS purchase_orders (
                id TEXT PRIMARY KEY,
                document_number TEXT,
                customer_id TEXT,
                header TEXT NOT NULL,
                extraction_confidence REAL NOT NULL DEFAULT 0,
                processing_status TEXT NOT NULL DEFAULT 'EXTRACTED',
                created_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS line_items (
                id TEXT PRIMARY KEY,
                purchase_order_id TEXT NOT NULL REFERENCES purchase_orders(id),
                item_number TEXT NOT NULL,
                data TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_line_items_purchase_order
            ON line_items(purchase_order_id)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_purchase_orders_document_number
            ON purchase_orders(document_number)
        """)

        conn.commit()
        conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def insert_purchase_order(self, header: dict, extraction_confidence: float = 0.0,
                              processing_status: str = "EXTRACTED") -> str:
        po_id = str(uuid.uuid4())
        created_at = datetime.now(UTC).isoformat()
        customer = header.get("receiverId") or header.get("senderId")

        conn = self._get_connection()
        conn.execute("""
            INSERT INTO purchase_orders
                (id, document_number, customer_id, header, extraction_confidence, processing_status, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            po_id,
            header.get("documentNumber"),
            str(customer) if customer is not None else None,
            json.dumps(header),
            extraction_confidence,
            processing_status,
            created_at,
        ))
        conn.commit()
        conn.close()

        return po_id

    def insert_line_items(self, purchase_order_id: str, line_items: list[dict]) -> int:
        rows = []
        for position, line in enumerate(line_items, start=1):
            data = dict(line)
            item_number = str(data.pop("itemNumber", position))
            rows.append((str(uuid.uuid4()), purchase_order_id, item_number, json.dumps(data)))

        conn = self._get_connection()
        conn.executemany("""
            INSERT INTO line_items (id, purchase_order_id, item_number, data)
            VALUES (?, ?, ?, ?)
        """, rows)
        conn.commit()
        conn.close()

        return len(rows)

    def get_purchase_order(self, purchase_order_id: str) -> Optional[dict]:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("""
            SELECT id, header, extraction_confidence, processing_status, created_at
            FROM purchase_orders
            WHERE id = ?
        """, (purchase_order_id,))
        row = cursor.fetchone()

        if row is None:
            conn.close()
            return None

        cursor.execute("""
            SELECT id, purchase_order_id, item_number, data
            FROM line_items
            WHERE purchase_order_id = ?
            ORDER BY rowid
        """, (purchase_order_id,))
        lines = cursor.fetchall()
        conn.close()

        return {
            "id": row["id"],
            "header": json.loads(row["header"]),
            "extraction_confidence": row["extraction_confidence"],
            "processing_status": row["processing_status"],
            "created_at": row["created_at"],
            "line_items": [
                {
                    "id": line["id"],
                    "purchase_order_id": line["purchase_order_id"],
                    "item_number": line["item_number"],
                    "data": json.loads(line["data"]),
                }
                for line in lines
            ],
        }
