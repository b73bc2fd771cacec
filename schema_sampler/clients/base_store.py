"""
Abstract document store interface consumed by the traversal engine.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class StoredDocument:
    """A fetched document: its id and its fields as tagged wire values"""
    document_id: str
    fields: Dict[str, Any] = field(default_factory=dict)


class DocumentStore(ABC):
    """
    Read-only access to a hierarchical document database.

    Implementations are blocking; the traversal engine runs them off the
    event loop one call at a time.
    """

    @abstractmethod
    def list_subcollection_ids(self, parent_path: Optional[str] = None) -> List[str]:
        """
        List the ids of the collections directly under a document.

        Args:
            parent_path: Document path such as ``orders/abc``; None lists
                the root-level collections

        Returns:
            Collection ids (single path segments)
        """
        pass

    @abstractmethod
    def list_documents(self, collection_path: str, page_size: int) -> List[StoredDocument]:
        """
        Fetch a single page of at most ``page_size`` documents.

        Args:
            collection_path: Full collection path such as ``orders/abc/items``
            page_size: Maximum number of documents to return

        Returns:
            Documents in the order the store returned them
        """
        pass
