"""
JSON-Cadence codec.

The Access API ships Cadence values in the JSON-Cadence interchange format
({"type": ..., "value": ...}), usually base64 encoded. Event payloads and
script results are decoded into plain Python values; transaction arguments
keep their type annotations.
"""

import base64
import json
from typing import Any

INTEGER_TYPES = frozenset({
    "Int", "Int8", "Int16", "Int32", "Int64", "Int128", "Int256",
    "UInt", "UInt8", "UInt16", "UInt32", "UInt64", "UInt128", "UInt256",
    "Word8", "Word16", "Word32", "Word64", "Word128", "Word256",
})
FIXED_POINT_TYPES = frozenset({"Fix64", "UFix64"})
COMPOSITE_TYPES = frozenset({"Struct", "Resource", "Event", "Contract", "Enum"})
PATH_TYPES = frozenset({
    "Path", "StoragePath", "PublicPath", "PrivatePath", "CapabilityPath",
})


def b64decode_text(value: str | None) -> str:
    """Decode base64 encoded UTF-8 text (empty for missing values)."""
    if not value:
        return ""
    return base64.b64decode(value).decode("utf-8")


def b64encode_text(value: str) -> str:
    """Encode UTF-8 text as base64."""
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def decode_json_cadence(encoded: str) -> dict[str, Any]:
    """
    Decode a base64 JSON-Cadence value, keeping type annotations.

    Args:
        encoded: Base64 encoded JSON-Cadence document

    Returns:
        Type-annotated value ({"type": ..., "value": ...})
    """
    return json.loads(b64decode_text(encoded))


def encode_argument(type_name: str, value: Any) -> str:
    """Encode a simple script argument as base64 JSON-Cadence."""
    return b64encode_text(json.dumps({"type": type_name, "value": value}))


def _static_type_id(type_value: Any) -> Any:
    if isinstance(type_value, dict):
        return type_value.get("typeID") or type_value.get("kind")
    return type_value


def decode_cadence_value(annotated: Any) -> Any:
    """
    Convert a type-annotated JSON-Cadence value into a plain Python value.

    Integers become int, fixed point numbers stay strings (exact decimal
    text), composites become dicts of their fields, paths become
    {"domain", "identifier"} dicts and types become their type id.

    Args:
        annotated: JSON-Cadence value

    Returns:
        Plain Python value
    """
    if not isinstance(annotated, dict) or "type" not in annotated:
        return annotated

    type_name = annotated["type"]
    value = annotated.get("value")

    if type_name in ("Void",) or value is None:
        return None
    if type_name == "Optional":
        return decode_cadence_value(value)
    if type_name in INTEGER_TYPES:
        return int(value)
    if type_name in FIXED_POINT_TYPES:
        return str(value)
    if type_name == "Array":
        return [decode_cadence_value(element) for element in value]
    if type_name == "Dictionary":
        return {
            _hashable(decode_cadence_value(entry["key"])): decode_cadence_value(
                entry["value"]
            )
            for entry in value
        }
    if type_name in COMPOSITE_TYPES:
        return {
            item["name"]: decode_cadence_value(item["value"])
            for item in value.get("fields", [])
        }
    if type_name in PATH_TYPES:
        return {"domain": value["domain"], "identifier": value["identifier"]}
    if type_name == "Type":
        return _static_type_id(value.get("staticType"))
    if type_name == "Capability":
        return {
            "path": decode_cadence_value(value.get("path")),
            "address": value.get("address"),
            "borrow_type": _static_type_id(value.get("borrowType")),
        }
    if type_name == "Function":
        return _static_type_id(value.get("functionType"))

    # Bool, String, Character, Address and anything unknown
    return value


def _hashable(key: Any) -> Any:
    if isinstance(key, (list, dict)):
        return json.dumps(key, sort_keys=True)
    return key


def decode_event_payload(encoded: str) -> tuple[str | None, dict[str, Any]]:
    """
    Decode a base64 event payload.

    Args:
        encoded: Base64 JSON-Cadence event

    Returns:
        Tuple of (event type id, field map)
    """
    if not encoded:
        return None, {}

    annotated = decode_json_cadence(encoded)
    value = annotated.get("value") or {}
    data = decode_cadence_value(annotated)
    return value.get("id"), data if isinstance(data, dict) else {"value": data}
