"""
Firestore wire-value decoder.

The REST API returns every stored value as a single-key tagged object, e.g.
``{"integerValue": "42"}`` or ``{"mapValue": {"fields": {...}}}``. This module
turns such values into plain Python values (None, bool, int, float, str,
list, dict). Timestamps stay as their ISO-8601 strings.

Decoding never fails: an absent value, an unknown tag or a malformed payload
decodes to None.
"""

import math
from typing import Any, Callable, Dict, Mapping, Optional, Tuple


def _decode_string(payload):
    if not isinstance(payload, str):
        raise TypeError("stringValue must be a string")
    return payload


def _decode_integer(payload):
    # int64 values arrive as decimal strings
    if isinstance(payload, bool):
        raise TypeError("integerValue must not be a boolean")
    if isinstance(payload, float):
        if not payload.is_integer():
            raise ValueError("integerValue must be integral")
        return int(payload)
    return int(payload)


def _decode_double(payload):
    if isinstance(payload, bool):
        raise TypeError("doubleValue must not be a boolean")
    value = float(payload)
    if isinstance(payload, str) and not (math.isnan(value) or math.isinf(value)):
        # Only the special values are sent as strings
        raise ValueError("doubleValue strings are limited to NaN and Infinity")
    return value


def _decode_boolean(payload):
    if not isinstance(payload, bool):
        raise TypeError("booleanValue must be a boolean")
    return payload


def _decode_array(payload):
    values = payload.get('values')
    if values is None:
        return []
    if not isinstance(values, list):
        raise TypeError("arrayValue.values must be a list")
    return [decode_value(item) for item in values]


def _decode_map(payload):
    fields = payload.get('fields')
    if fields is None:
        return {}
    if not isinstance(fields, Mapping):
        raise TypeError("mapValue.fields must be a mapping")
    return decode_fields(fields)


def _decode_null(payload):
    return None


# Checked in order; a well-formed value carries exactly one of these tags
_DECODERS: Tuple[Tuple[str, Callable[[Any], Any]], ...] = (
    ('stringValue', _decode_string),
    ('integerValue', _decode_integer),
    ('doubleValue', _decode_double),
    ('booleanValue', _decode_boolean),
    ('timestampValue', _decode_string),
    ('arrayValue', _decode_array),
    ('mapValue', _decode_map),
    ('nullValue', _decode_null),
)


def decode_value(wire_value: Optional[Mapping[str, Any]]) -> Any:
    """
    Decode one tagged wire value.

    Args:
        wire_value: Tagged value as returned by the Firestore REST API

    Returns:
        The plain Python value, or None when the value is absent,
        unrecognized or malformed
    """
    if not isinstance(wire_value, Mapping):
        return None

    for tag, decoder in _DECODERS:
        if tag in wire_value:
            try:
                return decoder(wire_value[tag])
            except (TypeError, ValueError, AttributeError, OverflowError):
                return None

    return None


def decode_fields(fields: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Decode a document's (or map's) named wire values"""
    if not isinstance(fields, Mapping):
        return {}
    return {str(name): decode_value(value) for name, value in fields.items()}
