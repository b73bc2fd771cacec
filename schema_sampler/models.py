"""
Data classes produced by a sampling run.

FieldObservation -> CollectionReport -> SchemaSnapshot, each with a
to_dict() that yields the persisted JSON layout.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from .core.config import TargetIdentity

MAX_SAMPLES = 3


def json_safe_sample(value: Any) -> Any:
    """Copy a sample with NaN and infinities replaced by None, which JSON cannot express"""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, list):
        return [json_safe_sample(item) for item in value]
    if isinstance(value, dict):
        return {key: json_safe_sample(item) for key, item in value.items()}
    return value


@dataclass
class FieldObservation:
    """Running summary of the values seen for one field path"""
    count: int = 0
    types: List[str] = field(default_factory=list)  # ordered set
    samples: List[Any] = field(default_factory=list)

    def record(self, value: Any, type_name: str):
        self.count += 1
        if type_name not in self.types:
            self.types.append(type_name)
        if len(self.samples) < MAX_SAMPLES:
            self.samples.append(value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'count': self.count,
            'types': list(self.types),
            'samples': [json_safe_sample(sample) for sample in self.samples]
        }


@dataclass
class CollectionReport:
    """Field observations for one collection path"""
    fields: Dict[str, FieldObservation] = field(default_factory=dict)
    total_sampled: int = 0
    frozen: bool = False

    def freeze(self):
        """Mark the sampling pass complete; later observations are rejected"""
        self.frozen = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fields': {path: obs.to_dict() for path, obs in self.fields.items()},
            'totalSampled': self.total_sampled
        }


@dataclass
class SchemaSnapshot:
    """Everything learned about one database during one run"""
    target: TargetIdentity
    collected_at: datetime
    collections: Dict[str, CollectionReport] = field(default_factory=dict)

    def add_report(self, collection_path: str, report: CollectionReport):
        self.collections[collection_path] = report

    @property
    def documents_sampled(self) -> int:
        return sum(report.total_sampled for report in self.collections.values())

    @property
    def fields_observed(self) -> int:
        return sum(len(report.fields) for report in self.collections.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'targetIdentity': self.target.to_dict(),
            'collectedAt': self.collected_at.isoformat(),
            'collections': {path: report.to_dict() for path, report in self.collections.items()}
        }
