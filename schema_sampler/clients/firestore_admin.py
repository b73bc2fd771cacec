"""
Firestore Admin SDK Client

Samples Firestore through the Firebase Admin SDK instead of the REST API.
SDK values are re-encoded into the REST wire format so the same decoder
handles both backends.

Authentication follows the Admin SDK: application default credentials from
GOOGLE_APPLICATION_CREDENTIALS, or no credentials at all against a local
emulator (FIRESTORE_EMULATOR_HOST).
"""

import base64
import logging
import os
import time
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions
from google.auth.credentials import AnonymousCredentials
from google.cloud.firestore_v1 import DocumentReference, GeoPoint

from .base_store import DocumentStore, StoredDocument
from ..core.config import DEFAULT_DATABASE_ID, TargetIdentity, get_emulator_host
from ..core.errors import ConfigurationError, CredentialError, TransportError


class _EmulatorCredential(credentials.Base):
    """The emulator accepts unauthenticated requests"""

    def get_credential(self):
        return AnonymousCredentials()


def encode_sdk_value(value: Any, documents_root: str = "") -> Dict[str, Any]:
    """
    Encode a value returned by the SDK as a tagged wire value.

    Args:
        value: Field value from DocumentSnapshot.to_dict()
        documents_root: Prefix for reference values

    Returns:
        Single-key dict in the Firestore REST representation
    """
    if value is None:
        return {'nullValue': None}
    if isinstance(value, bool):
        return {'booleanValue': value}
    if isinstance(value, int):
        return {'integerValue': str(value)}
    if isinstance(value, float):
        return {'doubleValue': value}
    if isinstance(value, str):
        return {'stringValue': value}
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return {'timestampValue': value.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')}
    if isinstance(value, (list, tuple)):
        return {'arrayValue': {'values': [encode_sdk_value(item, documents_root) for item in value]}}
    if isinstance(value, dict):
        return {'mapValue': {'fields': {str(k): encode_sdk_value(v, documents_root) for k, v in value.items()}}}
    if isinstance(value, GeoPoint):
        return {'geoPointValue': {'latitude': value.latitude, 'longitude': value.longitude}}
    if isinstance(value, DocumentReference):
        return {'referenceValue': f"{documents_root}/{value.path}" if documents_root else value.path}
    if isinstance(value, bytes):
        return {'bytesValue': base64.b64encode(value).decode('ascii')}
    # Unknown SDK type: leave untagged so the decoder yields None
    return {}


class FirestoreAdminClient(DocumentStore):
    """Document store backed by the Firebase Admin SDK"""

    def __init__(self, target: TargetIdentity, config: Dict[str, Any] = None, db=None):
        self.target = target
        self.config = config or {}
        self.logger = logging.getLogger("schema_sampler.firestore_admin")
        self.db = db or self._connect()

    def _connect(self):
        """Initialize a Firebase app dedicated to this client and return its Firestore client"""
        emulator_host = get_emulator_host()
        if emulator_host:
            cred = _EmulatorCredential()
            self.logger.info(f"Using Firestore emulator at {emulator_host}")
        elif os.getenv('GOOGLE_APPLICATION_CREDENTIALS'):
            cred = credentials.ApplicationDefault()
        else:
            raise ConfigurationError(
                "GOOGLE_APPLICATION_CREDENTIALS environment variable not set "
                "(required for the admin backend unless FIRESTORE_EMULATOR_HOST is set)"
            )

        app_name = f"schema_sampler_{self.target.project_id}_{int(time.time() * 1000)}"
        try:
            app = firebase_admin.initialize_app(
                cred, options={'projectId': self.target.project_id}, name=app_name
            )
        except (ValueError, google_auth_exceptions.GoogleAuthError) as e:
            raise ConfigurationError(f"Firebase initialization failed: {e}") from e

        database_id = self.target.database_id
        try:
            if database_id and database_id != DEFAULT_DATABASE_ID:
                db = firestore.client(app=app, database_id=database_id)
            else:
                db = firestore.client(app=app)
        except google_auth_exceptions.GoogleAuthError as e:
            raise ConfigurationError(f"Firestore credentials could not be loaded: {e}") from e

        self.logger.info(f"Connected to Firestore (Project: {self.target.project_id}, Database: {database_id})")
        return db

    def _call(self, description: str, func):
        """Run an SDK call, mapping Google API errors onto the sampler's error types"""
        try:
            return func()
        except (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied) as e:
            raise CredentialError(f"{description} failed: {e}", status=getattr(e, 'code', None)) from e
        except google_auth_exceptions.GoogleAuthError as e:
            # Credentials are refreshed lazily on the first RPC
            raise CredentialError(f"{description} failed: {e}") from e
        except google_exceptions.GoogleAPIError as e:
            raise TransportError(f"{description} failed: {e}", status=getattr(e, 'code', None)) from e

    def list_subcollection_ids(self, parent_path: Optional[str] = None) -> List[str]:
        def fetch():
            if parent_path:
                collections = self.db.document(parent_path.strip('/')).collections()
            else:
                collections = self.db.collections()
            return [collection.id for collection in collections]

        return self._call(f"Listing collections under '{parent_path or '/'}'", fetch)

    def list_documents(self, collection_path: str, page_size: int) -> List[StoredDocument]:
        def fetch():
            query = self.db.collection(collection_path.strip('/')).limit(page_size)
            return list(query.stream())

        documents = []
        for snapshot in self._call(f"Listing documents of '{collection_path}'", fetch):
            data = snapshot.to_dict() or {}
            documents.append(StoredDocument(
                document_id=snapshot.id,
                fields={name: encode_sdk_value(value, self.target.documents_root) for name, value in data.items()}
            ))
        return documents
