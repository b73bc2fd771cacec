"""
Field observation aggregator.

Merges decoded values into a CollectionReport, one FieldObservation per
field path. Flattening of nested maps is left to the caller.
"""

from typing import Any

from ..models import CollectionReport, FieldObservation


def detect_type(value: Any) -> str:
    """Map a decoded value to its type tag"""
    if value is None:
        return 'null'
    # bool before number: bool is an int subclass
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, list):
        return 'array'
    if isinstance(value, dict):
        return 'map'
    raise TypeError(f"Not a decoded Firestore value: {type(value).__name__}")


def observe(report: CollectionReport, field_path: str, value: Any):
    """
    Record one value for a field path.

    Args:
        report: Report of the collection being sampled
        field_path: Bare field name or dotted ``parent.child`` path
        value: Decoded value
    """
    if report.frozen:
        raise ValueError(f"Cannot observe '{field_path}': report is frozen")

    type_name = detect_type(value)
    observation = report.fields.get(field_path)
    if observation is None:
        observation = FieldObservation()
        report.fields[field_path] = observation
    observation.record(value, type_name)
