"""
Schema Inference Job

Runs one sampling pass over a Firestore database and writes the resulting
schema report to a JSON file.
"""

import asyncio
from typing import Dict, Any, Optional

from ..clients.base_store import DocumentStore
from ..core.base_job import BaseJob
from ..core.config import InferenceConfig
from ..models import SchemaSnapshot
from ..output.report_writer import write_snapshot
from ..stages.traversal import SchemaTraversalEngine


class SchemaInferenceJob(BaseJob):
    """
    Job wrapper around the traversal engine.

    Config options:
        output_path: Where to write the report (default: generated file name)
    """

    def __init__(self, job_name: str, inference_config: InferenceConfig,
                 store: DocumentStore, config: Dict[str, Any] = None):
        super().__init__(job_name, config)
        self.inference_config = inference_config
        self.store = store
        self.snapshot: Optional[SchemaSnapshot] = None
        self.output_path = None

    def _validate_prerequisites(self):
        self.inference_config.validate()

    def _execute_job(self, **kwargs) -> Dict[str, Any]:
        cfg = self.inference_config
        self.logger.info(f"Target: {cfg.target.documents_root}")
        self.logger.info(f"  Sample size: {cfg.sample_size}")
        self.logger.info(f"  Start path: {cfg.start_path or 'all root collections'}")
        self.logger.info(f"  Recurse: {cfg.recurse} (max depth {cfg.max_depth})")

        engine = SchemaTraversalEngine(self.store)
        snapshot = asyncio.run(engine.run(cfg))

        # Only a complete snapshot is ever written
        self.output_path = write_snapshot(snapshot, self.config.get('output_path'))
        self.snapshot = snapshot

        return {
            'collections_visited': len(snapshot.collections),
            'documents_sampled': snapshot.documents_sampled,
            'fields_observed': snapshot.fields_observed,
            'metadata': {
                'target': cfg.target.to_dict(),
                'output_path': str(self.output_path),
                'collected_at': snapshot.collected_at.isoformat()
            }
        }
