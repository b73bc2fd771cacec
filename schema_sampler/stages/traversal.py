"""
Schema traversal engine.

Walks Firestore collections depth first, samples a bounded page of documents
from each one, and records what it sees in a SchemaSnapshot. Sub-collections
of sampled documents are followed when recursion is enabled and the depth
budget allows it.

Store calls are blocking; each one is awaited through asyncio.to_thread, one
at a time, so a run never has two requests in flight.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Set

from .aggregator import observe
from .decoder import decode_fields
from ..clients.base_store import DocumentStore
from ..core.config import InferenceConfig
from ..models import CollectionReport, SchemaSnapshot

PATH_SEPARATOR = "/"


class TraversalSession:
    """Mutable state owned by one run: the snapshot being built and the visited paths"""

    def __init__(self, config: InferenceConfig, snapshot: SchemaSnapshot):
        self.config = config
        self.snapshot = snapshot
        self.visited: Set[str] = set()

    def mark_visited(self, collection_path: str) -> bool:
        """Return False if the path was already processed in this run"""
        if collection_path in self.visited:
            return False
        self.visited.add(collection_path)
        return True


class SchemaTraversalEngine:
    """
    Infers collection schemas by sampling a document store.

    Any store failure propagates out of run(); there is no partial result.
    """

    def __init__(self, store: DocumentStore):
        self.store = store
        self.logger = logging.getLogger("schema_sampler.traversal")

    async def run(self, config: InferenceConfig) -> SchemaSnapshot:
        """
        Sample the configured database.

        Args:
            config: Run configuration (validated before any store call)

        Returns:
            SchemaSnapshot with one CollectionReport per visited collection path
        """
        config.validate()

        snapshot = SchemaSnapshot(target=config.target, collected_at=datetime.now(timezone.utc))
        session = TraversalSession(config, snapshot)

        if config.start_path:
            start_paths = [config.start_path]
        else:
            start_paths = await self._list_subcollection_ids(None)
            self.logger.info(f"Found {len(start_paths)} root collection(s)")

        for collection_path in start_paths:
            await self._process_collection(session, collection_path, 0)

        self.logger.info(
            f"Sampled {snapshot.documents_sampled} documents across "
            f"{len(snapshot.collections)} collection(s)"
        )
        return snapshot

    async def _process_collection(self, session: TraversalSession, collection_path: str, depth: int):
        if not session.mark_visited(collection_path):
            self.logger.debug(f"Skipping already visited collection: {collection_path}")
            return

        config = session.config
        self.logger.info(f"Sampling collection '{collection_path}' (depth {depth})")
        documents = await asyncio.to_thread(self.store.list_documents, collection_path, config.sample_size)

        report = CollectionReport(total_sampled=len(documents))
        for document in documents:
            self._observe_document(report, decode_fields(document.fields))
        report.freeze()
        session.snapshot.add_report(collection_path, report)

        self.logger.info(
            f"Sampled {report.total_sampled} document(s), {len(report.fields)} field path(s) "
            f"from '{collection_path}'"
        )

        if not (config.recurse and depth < config.max_depth):
            return

        for document in documents:
            document_path = f"{collection_path}{PATH_SEPARATOR}{document.document_id}"
            for subcollection_id in await self._list_subcollection_ids(document_path):
                await self._process_collection(
                    session, f"{document_path}{PATH_SEPARATOR}{subcollection_id}", depth + 1
                )

    def _observe_document(self, report: CollectionReport, data: Mapping[str, Any]):
        """Observe top-level fields plus the immediate children of map fields"""
        for name, value in data.items():
            observe(report, name, value)
            if isinstance(value, dict):
                # One level only: grandchildren are not flattened
                for child_name, child_value in value.items():
                    observe(report, f"{name}.{child_name}", child_value)

    async def _list_subcollection_ids(self, parent_path: Optional[str]) -> List[str]:
        return await asyncio.to_thread(self.store.list_subcollection_ids, parent_path)
