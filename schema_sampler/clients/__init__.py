"""
Document store clients.

Both clients expose the same two read-only operations and return documents
whose fields are Firestore wire values, so either can feed the traversal engine.
"""

from .base_store import DocumentStore, StoredDocument
from .firestore_rest import FirestoreRestClient

__all__ = ["DocumentStore", "StoredDocument", "FirestoreRestClient"]
