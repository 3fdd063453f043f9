"""
Reduces a failed S/4HANA call to one readable message.

OData v2 error envelopes look like:

    {"error": {"code": "...",
               "message": {"lang": "en", "value": "Sold-to party 42 does not exist"},
               "innererror": {"errordetails": [{"message": "..."}, ...]}}}

normalize_error() never raises and never returns an empty string.
"""

from typing import Any

UNKNOWN_ERROR = "Unknown error"


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _error_object(body: Any) -> dict:
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"]
    return {}


def normalize_error(failure: Any) -> str:
    """
    Pick the best message from a failure.

    Args:
        failure: A GatewayFailure (anything with `body` and `description`
            attributes) or the parsed response body itself

    Priority: error.message.value, then the joined
    error.innererror.errordetails[].message, then the transport error
    description, then "Unknown error".
    """
    if isinstance(failure, dict):
        body, description = failure, None
    else:
        body = getattr(failure, "body", None)
        description = getattr(failure, "description", None)

    error = _error_object(body)

    message = error.get("message")
    if isinstance(message, dict):
        value = _text(message.get("value"))
        if value:
            return value
    elif _text(message):
        return _text(message)

    inner = error.get("innererror")
    details = inner.get("errordetails") if isinstance(inner, dict) else None
    if isinstance(details, list):
        messages = [
            _text(detail.get("message")) for detail in details if isinstance(detail, dict)
        ]
        joined = "; ".join(m for m in messages if m)
        if joined:
            return joined

    return _text(description) or UNKNOWN_ERROR
