"""
Unit tests for error_normalizer.

normalize_error must be total: any input gives a non-empty string.
"""

import pytest
from src.services.error_normalizer import normalize_error
from src.services.s4hana_gateway import GatewayFailure


def test_prefers_message_value():
    body = {
        "error": {
            "code": "V1/320",
            "message": {"lang": "en", "value": "Sold-to party V-1 does not exist"},
            "innererror": {"errordetails": [{"message": "detail"}]},
        }
    }
    assert normalize_error(body) == "Sold-to party V-1 does not exist"


def test_joins_error_details():
    body = {"error": {"innererror": {"errordetails": [{"message": "A"}, {"message": "B"}]}}}
    assert normalize_error(body) == "A; B"


def test_skips_blank_details():
    body = {"error": {"innererror": {"errordetails": [{"message": ""}, {"code": "X"}, {"message": "B"}, "junk"]}}}
    assert normalize_error(body) == "B"


def test_falls_back_to_transport_description():
    failure = GatewayFailure(description="Request failed with status code 503", status_code=503, body=None)
    assert normalize_error(failure) == "Request failed with status code 503"


def test_envelope_wins_over_description():
    failure = GatewayFailure(
        description="Request failed with status code 400",
        status_code=400,
        body={"error": {"message": {"value": "Material TG99 not found"}}},
    )
    assert normalize_error(failure) == "Material TG99 not found"


@pytest.mark.parametrize("failure", [
    None,
    {},
    "",
    42,
    {"error": None},
    {"error": {"message": {"value": "   "}}},
    {"error": {"innererror": {"errordetails": "not a list"}}},
    GatewayFailure(description=""),
])
def test_unknown_error(failure):
    assert normalize_error(failure) == "Unknown error"
