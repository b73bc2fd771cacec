"""
Firestore REST Client

Read-only access to the Firestore v1 REST API with a caller-supplied bearer
token. Talks to a local emulator instead of the cloud endpoint when
FIRESTORE_EMULATOR_HOST is set.
"""

import logging
from typing import Dict, Any, List, Optional
from urllib.parse import quote

import requests

from .base_store import DocumentStore, StoredDocument
from ..core.config import TargetIdentity, get_emulator_host
from ..core.errors import ConfigurationError, CredentialError, TransportError

CLOUD_BASE_URL = "https://firestore.googleapis.com/v1"


class FirestoreRestClient(DocumentStore):
    """
    Document store backed by the Firestore REST API.

    Config options:
        request_timeout: Seconds before a request is abandoned (default: no timeout)
        collection_ids_page_size: Page size for listCollectionIds (default: 100)
        emulator_host: host:port of an emulator, overrides FIRESTORE_EMULATOR_HOST
    """

    def __init__(self, target: TargetIdentity, token: str, config: Dict[str, Any] = None,
                 session: Optional[requests.Session] = None):
        if not token:
            raise ConfigurationError("Missing token (pass --token or set FIRESTORE_API_TOKEN)")

        self.target = target
        self.config = config or {}
        self.logger = logging.getLogger("schema_sampler.firestore_rest")

        self.request_timeout = self.config.get('request_timeout')
        self.collection_ids_page_size = self.config.get('collection_ids_page_size', 100)

        emulator_host = self.config.get('emulator_host') or get_emulator_host()
        self.base_url = f"http://{emulator_host}/v1" if emulator_host else CLOUD_BASE_URL
        if emulator_host:
            self.logger.info(f"Using Firestore emulator at {emulator_host}")

        self.session = session or requests.Session()
        self.session.headers.update({'Authorization': f"Bearer {token}"})

    def _document_url(self, path: Optional[str]) -> str:
        url = f"{self.base_url}/{self.target.documents_root}"
        if path:
            url += "/" + quote(path.strip('/'), safe='/')
        return url

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """Send a request and return the decoded JSON body"""
        try:
            response = self.session.request(method, url, timeout=self.request_timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if not response.ok:
            message = f"HTTP {response.status_code} {response.reason} - {response.text}"
            if response.status_code in (401, 403):
                raise CredentialError(message, status=response.status_code, body=response.text)
            raise TransportError(message, status=response.status_code, body=response.text)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON from {url}: {e}", status=response.status_code, body=response.text
            ) from e

    def list_subcollection_ids(self, parent_path: Optional[str] = None) -> List[str]:
        url = f"{self._document_url(parent_path)}:listCollectionIds"
        collection_ids = []
        page_token = None

        while True:
            body = {'pageSize': self.collection_ids_page_size}
            if page_token:
                body['pageToken'] = page_token

            data = self._request('POST', url, json=body)
            collection_ids.extend(data.get('collectionIds') or [])

            page_token = data.get('nextPageToken')
            if not page_token:
                break

        self.logger.debug(f"Found {len(collection_ids)} collections under '{parent_path or '/'}'")
        return collection_ids

    def list_documents(self, collection_path: str, page_size: int) -> List[StoredDocument]:
        url = self._document_url(collection_path)
        data = self._request('GET', url, params={'pageSize': page_size})

        documents = []
        for raw_doc in (data.get('documents') or [])[:page_size]:
            name = raw_doc.get('name', '')
            documents.append(StoredDocument(
                document_id=name.rsplit('/', 1)[-1],
                fields=raw_doc.get('fields') or {}
            ))
        return documents
