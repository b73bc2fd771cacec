"""
Firestore Schema Sampler

Infers the shape of a Firestore database (field names, types, counts and
example values) by sampling live documents, without a predefined schema or an
administrative export.

Stages:
1. Decoding: Convert Firestore wire values into plain Python values
2. Aggregation: Merge per-field type observations for one collection
3. Traversal: Walk collections (and optionally sub-collections) and sample them
"""

__version__ = "1.0.0"
__author__ = "Schema Sampler Team"

from .jobs.schema_inference_job import SchemaInferenceJob
from .stages.traversal import SchemaTraversalEngine

__all__ = ["SchemaInferenceJob", "SchemaTraversalEngine"]
