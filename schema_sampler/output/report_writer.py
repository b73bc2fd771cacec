"""
JSON sink for finished schema snapshots.
"""

import json
import logging
import time
from pathlib import Path
from typing import Optional, Union

from ..core.config import TargetIdentity
from ..models import SchemaSnapshot

logger = logging.getLogger(__name__)


def default_output_path(target: TargetIdentity, now_ms: Optional[int] = None) -> Path:
    """firestore-schema-<project>-<database>-<epoch millis>.json in the working directory"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return Path(f"firestore-schema-{target.project_id}-{target.database_id}-{now_ms}.json")


def write_snapshot(snapshot: SchemaSnapshot, output_path: Union[str, Path, None] = None) -> Path:
    """
    Write a snapshot as indented JSON.

    Args:
        snapshot: Completed snapshot
        output_path: Destination file; defaults to default_output_path()

    Returns:
        Path of the written file
    """
    path = Path(output_path) if output_path else default_output_path(snapshot.target)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(snapshot.to_dict(), f, indent=2, ensure_ascii=False, allow_nan=False)

    logger.info(f"Wrote schema for {len(snapshot.collections)} collection(s) to {path}")
    return path
