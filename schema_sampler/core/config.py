"""
Run configuration for the schema sampler.

Values come from the command line first and fall back to environment
variables (a .env file is loaded by the CLI runner before this module is used).
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Dict, Any, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_ID = "(default)"
DEFAULT_SAMPLE_SIZE = 10
DEFAULT_MAX_DEPTH = 0


@dataclass(frozen=True)
class TargetIdentity:
    """The Firestore database being sampled"""
    project_id: str
    database_id: str = DEFAULT_DATABASE_ID

    @property
    def documents_root(self) -> str:
        """Resource name under which all documents of the database live"""
        return f"projects/{self.project_id}/databases/{self.database_id}/documents"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'projectId': self.project_id,
            'database': self.database_id
        }


@dataclass
class InferenceConfig:
    """
    Configuration for a single inference run.

    Recursion needs both ``recurse`` and a ``max_depth`` above zero; the two
    are independent settings and the default depth of 0 keeps the walk flat.
    """
    target: TargetIdentity
    sample_size: int = DEFAULT_SAMPLE_SIZE
    start_path: Optional[str] = None
    recurse: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self):
        if self.start_path is not None:
            self.start_path = self.start_path.strip('/') or None

    def validate(self):
        """Raise ConfigurationError if the run cannot start"""
        if not self.target or not self.target.project_id:
            raise ConfigurationError("Missing project (pass --project or set FIREBASE_PROJECT_ID)")
        if not self.target.database_id:
            raise ConfigurationError("Missing database (pass --database or set FIRESTORE_DATABASE_ID)")
        if isinstance(self.sample_size, bool) or not isinstance(self.sample_size, int) or self.sample_size < 1:
            raise ConfigurationError(f"Sample size must be a positive integer, got {self.sample_size!r}")
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int) or self.max_depth < 0:
            raise ConfigurationError(f"Max depth must be a non-negative integer, got {self.max_depth!r}")


def resolve_project_id(project_arg: Optional[str] = None) -> Optional[str]:
    return project_arg or os.getenv('FIREBASE_PROJECT_ID')


def resolve_database_id(database_arg: Optional[str] = None) -> str:
    return database_arg or os.getenv('FIRESTORE_DATABASE_ID') or DEFAULT_DATABASE_ID


def get_emulator_host() -> Optional[str]:
    """Host:port of a local Firestore emulator, if one is configured"""
    return os.getenv('FIRESTORE_EMULATOR_HOST') or None


def resolve_credential(token_arg: Optional[str] = None, use_gcloud: bool = False) -> str:
    """
    Find the bearer token for the REST API.

    Args:
        token_arg: Token passed explicitly on the command line
        use_gcloud: Ask the gcloud CLI for an access token when none is given

    Returns:
        The bearer token

    Raises:
        ConfigurationError: If no token can be found
    """
    token = token_arg or os.getenv('FIRESTORE_API_TOKEN')
    if token:
        return token

    if use_gcloud:
        return get_gcloud_access_token()

    raise ConfigurationError("Missing token (pass --token or set FIRESTORE_API_TOKEN)")


def get_gcloud_access_token() -> str:
    """Read an access token from the locally authenticated gcloud CLI"""
    logger.info("Requesting access token from gcloud")
    try:
        completed = subprocess.run(
            ['gcloud', 'auth', 'print-access-token'],
            capture_output=True, text=True, check=True
        )
    except (OSError, subprocess.CalledProcessError) as e:
        raise ConfigurationError(
            "Failed to get gcloud access token. Ensure gcloud is installed and you are "
            f"logged in: gcloud auth login ({e})"
        ) from e

    token = completed.stdout.strip()
    if not token:
        raise ConfigurationError("gcloud returned an empty access token")
    return token
