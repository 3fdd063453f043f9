"""
Unit tests for payload_builder.

Checks header defaults, address decomposition, partners, item numbering,
pricing elements and identifier translation.
"""

from datetime import date

import pytest
from src.services.errors import PayloadBuildError
from src.services.identifier_mapping import InMemoryIdentifierMapper
from src.services.payload_builder import (
    EnvironmentDefaults,
    SalesOrderPayloadBuilder,
    format_date,
    format_decimal,
    format_item_number,
    split_address,
)

TODAY = date(2025, 3, 14)
HEADER = {"documentNumber": "PO-1", "senderId": "V-1"}
LINES = [{"materialNumber": "M-1", "quantity": 2.0}]


class TestSplitAddress:

    def test_four_parts(self):
        address = split_address("Acme Villa, Villa 39, Umm Suqeim 2, Dubai")
        assert address.name == "Acme Villa"
        assert address.street == "Villa 39"
        assert address.street_prefix == "Umm Suqeim 2"
        assert address.city == "Dubai"

    @pytest.mark.parametrize("text", ["", None, "   "])
    def test_empty_address_defaults_city(self, text):
        address = split_address(text)
        assert address.model_dump(by_alias=True) == {"name": "", "street": "", "streetPrefix": "", "city": "Dubai"}

    def test_partial_address(self):
        address = split_address("Acme Villa, Villa 39")
        assert (address.name, address.street, address.street_prefix, address.city) == ("Acme Villa", "Villa 39", "", "Dubai")

    def test_extra_parts_stay_in_city(self):
        address = split_address("A, B, C, Abu Dhabi, UAE")
        assert address.city == "Abu Dhabi, UAE"

    def test_custom_default_city(self):
        assert split_address("", default_city="Sharjah").city == "Sharjah"


class TestFormatting:

    def test_format_decimal(self):
        assert format_decimal(2.0) == "2"
        assert format_decimal(10.5) == "10.5"
        assert format_decimal("abc") == "0"
        assert format_decimal(-0.0) == "0"

    def test_item_numbering(self):
        assert format_item_number(1, "sequential") == "1"
        assert format_item_number(3, "sequential") == "3"
        assert format_item_number(1, "step10") == "000010"
        assert format_item_number(12, "step10") == "000120"

    def test_format_date(self):
        assert format_date("2025-01-31", "datetime") == "2025-01-31T00:00:00"
        assert format_date("2025-01-31", "date") == "2025-01-31"
        assert format_date("31.01.2025", "date") == "2025-01-31"
        assert format_date("2025-01-31T10:15:00Z", "date") == "2025-01-31"
        assert format_date("soon", "date") is None
        assert format_date(None, "date") is None


class TestBuild:

    def test_minimal_document(self, builder):
        payload = builder.build(HEADER, LINES, today=TODAY)

        assert payload["SalesOrderType"] == "1SDS"
        assert payload["SalesOrganization"] == "D106"
        assert payload["DistributionChannel"] == "02"
        assert payload["OrganizationDivision"] == "00"
        assert payload["CustomerPaymentTerms"] == "Z000"
        assert payload["SoldToParty"] == "V-1"
        assert payload["PurchaseOrderByCustomer"] == "PO-1"
        assert payload["TransactionCurrency"] == "AED"
        assert payload["SalesOrderDate"] == "2025-03-14T00:00:00"
        assert "RequestedDeliveryDate" not in payload

        assert payload["to_Item"] == [{
            "SalesOrderItem": "1",
            "Material": "M-1",
            "RequestedQuantity": "2",
            "RequestedQuantityUnit": "EA",
            "ProductionPlant": "DODY",
        }]

    def test_build_is_deterministic(self, builder):
        assert builder.build(HEADER, LINES, today=TODAY) == builder.build(HEADER, LINES, today=TODAY)

    def test_receiver_id_preferred_over_sender(self, builder):
        payload = builder.build(dict(HEADER, receiverId="C-9"), LINES, today=TODAY)
        assert payload["SoldToParty"] == "C-9"

    def test_header_values_and_dates(self, builder):
        header = dict(HEADER, currencyCode="USD", documentDate="2025-02-01", deliveryDate="2025-02-10")
        payload = builder.build(header, LINES, today=TODAY)
        assert payload["TransactionCurrency"] == "USD"
        assert payload["SalesOrderDate"] == "2025-02-01T00:00:00"
        assert payload["CustomerPurchaseOrderDate"] == "2025-02-01T00:00:00"
        assert payload["RequestedDeliveryDate"] == "2025-02-10T00:00:00"

    def test_delivery_date_from_line(self, builder):
        lines = [{"materialNumber": "M-1", "quantity": 1.0, "deliveryDate": "2025-04-01"}]
        payload = builder.build(HEADER, lines, today=TODAY)
        assert payload["RequestedDeliveryDate"] == "2025-04-01T00:00:00"

    def test_partners_share_address_and_customer(self, builder):
        header = dict(HEADER, shipToAddress="Acme Villa, Villa 39, Umm Suqeim 2, Dubai")
        payload = builder.build(header, LINES, today=TODAY)

        partners = payload["to_Partner"]
        assert [p["PartnerFunction"] for p in partners] == ["WE", "RE"]
        assert all(p["Customer"] == "V-1" for p in partners)
        assert partners[0]["to_Address"] == partners[1]["to_Address"] == [{
            "OrganizationName1": "Acme Villa",
            "StreetName": "Villa 39",
            "StreetPrefixName": "Umm Suqeim 2",
            "CityName": "Dubai",
            "Country": "AE",
        }]

    def test_partners_without_address(self, builder):
        payload = builder.build(HEADER, LINES, today=TODAY)
        address = payload["to_Partner"][0]["to_Address"][0]
        assert address["OrganizationName1"] == ""
        assert address["CityName"] == "Dubai"

    def test_pricing_elements(self, builder):
        lines = [{"materialNumber": "M-1", "quantity": 4.0, "unitPrice": 12.5, "DiscValue": 1.0, "vatValue": 0.63}]
        item = builder.build(dict(HEADER, currencyCode="AED"), lines, today=TODAY)["to_Item"][0]

        assert item["to_PricingElement"] == [
            {"ConditionType": "ZMAN", "ConditionRateValue": "12.5", "ConditionCurrency": "AED", "ConditionQuantityUnit": "EA"},
            {"ConditionType": "ZRDV", "ConditionRateValue": "1", "ConditionCurrency": "AED", "ConditionQuantityUnit": "EA"},
            {"ConditionType": "ZVAT", "ConditionRateValue": "0.63", "ConditionCurrency": "AED", "ConditionQuantityUnit": "EA"},
        ]

    def test_line_currency_overrides_header(self, builder):
        lines = [
            {"materialNumber": "M-1", "quantity": 1.0, "unitPrice": 10.0, "currencyCode": "USD"},
            {"materialNumber": "M-2", "quantity": 1.0, "unitPrice": 20.0},
        ]
        payload = builder.build(dict(HEADER, currencyCode="EUR"), lines, today=TODAY)

        assert payload["TransactionCurrency"] == "EUR"
        assert payload["to_Item"][0]["to_PricingElement"][0]["ConditionCurrency"] == "USD"
        assert payload["to_Item"][1]["to_PricingElement"][0]["ConditionCurrency"] == "EUR"

    def test_only_present_conditions(self, builder):
        lines = [{"materialNumber": "M-1", "quantity": 1.0, "VATValue": 5.0}, {"materialNumber": "M-2", "quantity": 1.0}]
        items = builder.build(HEADER, lines, today=TODAY)["to_Item"]
        assert [c["ConditionType"] for c in items[0]["to_PricingElement"]] == ["ZVAT"]
        assert "to_PricingElement" not in items[1]

    def test_item_order_and_numbering(self):
        builder = SalesOrderPayloadBuilder(EnvironmentDefaults(item_numbering="step10"))
        lines = [{"materialNumber": f"M-{n}", "quantity": 1.0} for n in range(1, 4)]
        items = builder.build(HEADER, lines, today=TODAY)["to_Item"]
        assert [(i["SalesOrderItem"], i["Material"]) for i in items] == [("000010", "M-1"), ("000020", "M-2"), ("000030", "M-3")]

    def test_customer_material_and_description(self, builder):
        lines = [{"customerMaterialNumber": "CM-1", "quantity": 1.0, "description": "Blue widget", "unit": "PC"}]
        item = builder.build(HEADER, lines, today=TODAY)["to_Item"][0]
        assert item["Material"] == "CM-1"
        assert item["MaterialByCustomer"] == "CM-1"
        assert item["SalesOrderItemText"] == "Blue widget"
        assert item["RequestedQuantityUnit"] == "PC"

    def test_environment_defaults_applied(self):
        defaults = EnvironmentDefaults(sales_org="1710", dist_channel="10", division="00", so_type="OR", plant="1710", date_format="date")
        payload = SalesOrderPayloadBuilder(defaults).build(HEADER, LINES, today=TODAY)
        assert payload["SalesOrganization"] == "1710"
        assert payload["SalesOrderType"] == "OR"
        assert payload["SalesOrderDate"] == "2025-03-14"
        assert payload["to_Item"][0]["ProductionPlant"] == "1710"

    def test_identifier_mapping(self):
        builder = SalesOrderPayloadBuilder(
            EnvironmentDefaults(),
            customer_mapper=InMemoryIdentifierMapper({"V-1": "17100001"}),
            material_mapper=InMemoryIdentifierMapper({"M-1": "TG11"}),
        )
        payload = builder.build(HEADER, LINES + [{"materialNumber": "M-2", "quantity": 1.0}], today=TODAY)

        assert payload["SoldToParty"] == "17100001"
        assert payload["to_Partner"][0]["Customer"] == "17100001"
        assert payload["to_Item"][0]["Material"] == "TG11"
        # unmapped identifiers are forwarded unchanged
        assert payload["to_Item"][1]["Material"] == "M-2"

    def test_missing_customer_is_an_error(self, builder):
        with pytest.raises(PayloadBuildError, match="Customer identifier"):
            builder.build({"documentNumber": "PO-1"}, LINES, today=TODAY)

    def test_missing_material_is_an_error(self, builder):
        with pytest.raises(PayloadBuildError, match="Line 2: material number is missing"):
            builder.build(HEADER, LINES + [{"quantity": 1.0}], today=TODAY)
