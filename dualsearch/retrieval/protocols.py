"""
Retrieval Protocols and Interfaces

This module defines the collaborator interfaces the engine is written
against. Concrete adapters live in ``embedding_service`` and ``vector_store``;
tests substitute in-memory fakes.
"""

from typing import Any, Dict, Iterable, List, Optional, Protocol

from .errors import CreateOutcome
from .models import CollectionInfo, EmbeddedPoint, SearchResult, VectorSpace


class EmbeddingProvider(Protocol):
    """Turns text into a fixed-length vector for a named model"""
    def embed(self, model: str, text: str) -> List[float]:
        ...


class VectorStore(Protocol):
    """Named-vector database holding points keyed by id"""
    def collection_exists(self, collection_name: str) -> bool:
        ...

    def get_collection(self, collection_name: str) -> CollectionInfo:
        ...

    def create_collection(self, collection_name: str,
                          spaces: Iterable[VectorSpace]) -> CreateOutcome:
        ...

    def upsert(self, collection_name: str, points: List[EmbeddedPoint]) -> Any:
        ...

    def search(self, collection_name: str, space: str, vector: List[float],
               limit: int, query_filter: Optional[Dict[str, Any]] = None,
               with_payload: bool = True) -> List[SearchResult]:
        ...

    def delete_points(self, collection_name: str, ids: List[str]) -> None:
        ...

    def delete_by_payload(self, collection_name: str, key: str, value: Any) -> None:
        ...

    def delete_collection(self, collection_name: str) -> bool:
        ...


__all__ = ['EmbeddingProvider', 'VectorStore']
