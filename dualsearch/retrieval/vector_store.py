"""
Qdrant Vector Store Adapter

Translates the engine's store-neutral calls into ``qdrant-client`` requests
against a collection with two named vector spaces, and maps Qdrant's failure
modes onto the engine's error types: a missing collection becomes
``CollectionNotFound``, a duplicate create becomes
``CreateOutcome.ALREADY_EXISTS``, and everything else becomes ``StoreError``.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from qdrant_client import QdrantClient
from qdrant_client.http import models
from qdrant_client.http.exceptions import UnexpectedResponse

from .errors import CollectionNotFound, CreateOutcome, StoreError
from .models import CollectionInfo, EmbeddedPoint, SearchResult, VectorSpace
from ..utils.config_manager import ConfigManager

logger = logging.getLogger(__name__)

DISTANCES = {
    "cosine": models.Distance.COSINE,
    "dot": models.Distance.DOT,
    "euclid": models.Distance.EUCLID,
}

# Keyword indexes used by delete-by-path and the chunkType search filter
PAYLOAD_INDEX_FIELDS = ("path", "chunkType")


def _is_not_found(error: Exception) -> bool:
    if isinstance(error, UnexpectedResponse) and error.status_code == 404:
        return True
    return "not found" in str(error).lower()


def _is_already_exists(error: Exception) -> bool:
    if isinstance(error, UnexpectedResponse) and error.status_code == 409:
        return True
    return "already exists" in str(error).lower()


class QdrantVectorStore:
    """Vector store backed by a ``QdrantClient``"""

    def __init__(self, client: QdrantClient):
        self.client = client

    @classmethod
    def from_config(cls, config_manager: ConfigManager) -> "QdrantVectorStore":
        url = config_manager.get('QDRANT_URL')
        if not url:
            logger.warning("QDRANT_URL not set, using an in-process Qdrant instance")
            return cls(QdrantClient(location=":memory:"))

        client = QdrantClient(
            url=url,
            api_key=config_manager.get('QDRANT_API_KEY'),
            timeout=config_manager.get_int('QDRANT_TIMEOUT', 60),
            prefer_grpc=False,
        )
        logger.info(f"Qdrant client initialized for {url}")
        return cls(client)

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------
    def collection_exists(self, collection_name: str) -> bool:
        try:
            return self.client.collection_exists(collection_name)
        except Exception as e:
            raise StoreError(f"Could not check collection '{collection_name}': {e}",
                             stage="collection") from e

    def get_collection(self, collection_name: str) -> CollectionInfo:
        try:
            info = self.client.get_collection(collection_name)
        except Exception as e:
            if _is_not_found(e):
                raise CollectionNotFound(collection_name) from e
            raise StoreError(f"Could not fetch collection '{collection_name}': {e}",
                             stage="collection") from e
        return self._to_collection_info(collection_name, info)

    def create_collection(self, collection_name: str,
                          spaces: Iterable[VectorSpace]) -> CreateOutcome:
        vectors_config = {
            space.name: models.VectorParams(size=space.size, distance=DISTANCES[space.distance])
            for space in spaces
        }
        try:
            self.client.create_collection(
                collection_name=collection_name,
                vectors_config=vectors_config
            )
        except Exception as e:
            if _is_already_exists(e):
                logger.info(f"Collection '{collection_name}' already exists")
                return CreateOutcome.ALREADY_EXISTS
            raise StoreError(f"Could not create collection '{collection_name}': {e}",
                             stage="collection") from e

        logger.info(f"Created collection '{collection_name}' with spaces {sorted(vectors_config)}")
        self._create_payload_indexes(collection_name)
        return CreateOutcome.CREATED

    def _create_payload_indexes(self, collection_name: str):
        for field_name in PAYLOAD_INDEX_FIELDS:
            try:
                self.client.create_payload_index(
                    collection_name=collection_name,
                    field_name=field_name,
                    field_schema=models.PayloadSchemaType.KEYWORD
                )
            except Exception as e:
                # Collection is still usable, just without optimized filtering
                logger.warning(f"Failed to index '{field_name}' in '{collection_name}': {e}")

    def delete_collection(self, collection_name: str) -> bool:
        try:
            deleted = self.client.delete_collection(collection_name)
        except Exception as e:
            raise StoreError(f"Could not delete collection '{collection_name}': {e}",
                             stage="collection") from e
        logger.info(f"Deleted collection '{collection_name}': {deleted}")
        return bool(deleted)

    @staticmethod
    def _to_collection_info(collection_name: str, info: Any) -> CollectionInfo:
        vectors = info.config.params.vectors
        if isinstance(vectors, dict):
            spaces = {name: params.size for name, params in vectors.items()}
        else:
            spaces = {"": vectors.size}
        status = getattr(info.status, "value", info.status)
        return CollectionInfo(
            name=collection_name,
            spaces=spaces,
            points_count=info.points_count,
            status=str(status) if status is not None else None,
        )

    # ------------------------------------------------------------------
    # Points
    # ------------------------------------------------------------------
    def upsert(self, collection_name: str, points: List[EmbeddedPoint]) -> Any:
        structs = [
            models.PointStruct(id=point.id, vector=point.vector, payload=point.payload)
            for point in points
        ]
        try:
            return self.client.upsert(collection_name=collection_name, points=structs, wait=True)
        except Exception as e:
            raise StoreError(f"Upsert of {len(structs)} points into '{collection_name}' failed: {e}",
                             stage="write") from e

    def search(self, collection_name: str, space: str, vector: List[float],
               limit: int, query_filter: Optional[Dict[str, Any]] = None,
               with_payload: bool = True) -> List[SearchResult]:
        try:
            response = self.client.query_points(
                collection_name=collection_name,
                query=vector,
                using=space,
                query_filter=self._build_filter(query_filter),
                limit=limit,
                with_payload=with_payload,
                with_vectors=False
            )
        except Exception as e:
            if _is_not_found(e):
                raise CollectionNotFound(collection_name) from e
            raise StoreError(f"Search in space '{space}' of '{collection_name}' failed: {e}",
                             stage="search") from e

        return [
            SearchResult(id=str(point.id), payload=point.payload or {}, score=point.score)
            for point in response.points
        ]

    def delete_points(self, collection_name: str, ids: List[str]) -> None:
        if not ids:
            return
        self._delete(collection_name, models.PointIdsList(points=list(ids)),
                     f"{len(ids)} points")

    def delete_by_payload(self, collection_name: str, key: str, value: Any) -> None:
        selector = models.FilterSelector(filter=self._build_filter({key: value}))
        self._delete(collection_name, selector, f"points with {key}={value!r}")

    def _delete(self, collection_name: str, selector: Any, description: str):
        try:
            self.client.delete(collection_name=collection_name, points_selector=selector, wait=True)
        except Exception as e:
            raise StoreError(f"Deleting {description} from '{collection_name}' failed: {e}",
                             stage="write") from e
        logger.info(f"Deleted {description} from '{collection_name}'")

    @staticmethod
    def _build_filter(conditions: Optional[Dict[str, Any]]) -> Optional[models.Filter]:
        if not conditions:
            return None
        return models.Filter(
            must=[
                models.FieldCondition(key=key, match=models.MatchValue(value=value))
                for key, value in conditions.items()
            ]
        )


__all__ = ['QdrantVectorStore', 'DISTANCES', 'PAYLOAD_INDEX_FIELDS']
