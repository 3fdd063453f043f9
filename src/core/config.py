from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("s4-ocr-adapter", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")
    port: int = Field(4004, alias="PORT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # CORS allowed origins (comma-separated list, "*" for any)
    cors_origins: str = Field("*", alias="CORS_ORIGINS")

    # S/4HANA destination
    s4hana_destination: str = Field("S4HANA", alias="S4HANA_DESTINATION")
    s4hana_url: str | None = Field(default=None, alias="S4HANA_URL")
    s4hana_user: str | None = Field(default=None, alias="S4HANA_USER")
    s4hana_password: str | None = Field(default=None, alias="S4HANA_PASSWORD")
    s4hana_client: str | None = Field(default=None, alias="S4HANA_CLIENT")  # sap-client

    # OData service paths
    sales_order_path: str = Field(
        "/sap/opu/odata/sap/API_SALES_ORDER_SRV/A_SalesOrder", alias="S4HANA_SALES_ORDER_PATH"
    )
    product_path: str = Field(
        "/sap/opu/odata/sap/API_PRODUCT_SRV/A_Product", alias="S4HANA_PRODUCT_PATH"
    )
    product_description_path: str = Field(
        "/sap/opu/odata/sap/API_PRODUCT_SRV/A_ProductDescription", alias="S4HANA_PRODUCT_DESCRIPTION_PATH"
    )

    # Timeouts (seconds)
    create_timeout: float = Field(60.0, alias="S4HANA_CREATE_TIMEOUT")
    lookup_timeout: float = Field(30.0, alias="S4HANA_LOOKUP_TIMEOUT")

    # Sales order defaults
    so_type: str = Field("1SDS", alias="S4HANA_SO_TYPE")
    sales_org: str = Field("D106", alias="S4HANA_SALES_ORG")
    dist_channel: str = Field("02", alias="S4HANA_DIST_CHANNEL")
    division: str = Field("00", alias="S4HANA_DIVISION")
    payment_terms: str = Field("Z000", alias="S4HANA_PAYMENT_TERMS")
    plant: str = Field("DODY", alias="S4HANA_PLANT")
    default_currency: str = Field("AED", alias="S4HANA_DEFAULT_CURRENCY")
    default_city: str = Field("Dubai", alias="S4HANA_DEFAULT_CITY")
    default_country: str = Field("AE", alias="S4HANA_DEFAULT_COUNTRY")
    default_unit: str = Field("EA", alias="S4HANA_DEFAULT_UNIT")

    # Deployment conventions: "sequential" (1, 2, ...) or "step10" (000010, 000020, ...)
    item_numbering: str = Field("sequential", alias="S4HANA_ITEM_NUMBERING")
    # "datetime" (2025-01-31T00:00:00) or "date" (2025-01-31)
    date_format: str = Field("datetime", alias="S4HANA_DATE_FORMAT")

    # Identifier translation tables (JSON objects, e.g. {"V-1": "17100001"})
    customer_id_map: dict[str, str] = Field(default_factory=dict, alias="S4HANA_CUSTOMER_MAP")
    material_id_map: dict[str, str] = Field(default_factory=dict, alias="S4HANA_MATERIAL_MAP")

    # Purchase order persistence
    po_db_path: str = Field("purchase_orders.db", alias="PO_DB_PATH")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "populate_by_name": True}

settings = Settings()
