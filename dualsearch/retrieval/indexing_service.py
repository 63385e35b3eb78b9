"""
Collection Indexing Service

Owns the write path into the vector database: keeping the two-space
collection schema in place, turning documents into embedded points and
removing them again.
"""

import logging
from typing import Any, Dict, List, Optional

from .chunking_service import FixedWindowChunker
from .embedding_service import DualEmbedder
from .errors import ConfigurationError, CreateOutcome
from .models import CODE_SPACE, NLP_SPACE, CollectionInfo, UpsertResult, VectorSpace
from .protocols import VectorStore
from ..utils.concurrency import map_concurrently
from ..utils.retry_utils import performance_timer

logger = logging.getLogger(__name__)


class CollectionIndexer:
    """Chunks, embeds and stores documents in one named collection"""

    DEFAULT_MAX_WORKERS = 8

    def __init__(self, store: VectorStore, chunker: FixedWindowChunker,
                 embedder: DualEmbedder, collection_name: str,
                 max_workers: int = DEFAULT_MAX_WORKERS):
        self.store = store
        self.chunker = chunker
        self.embedder = embedder
        self.collection_name = collection_name
        self.max_workers = max_workers

    @property
    def vector_spaces(self) -> List[VectorSpace]:
        return [
            VectorSpace(NLP_SPACE, self.embedder.dimensions[NLP_SPACE]),
            VectorSpace(CODE_SPACE, self.embedder.dimensions[CODE_SPACE]),
        ]

    def ensure_collection(self) -> CollectionInfo:
        """Fetch the collection, creating it first when it does not exist.

        A concurrent creator winning the race shows up as
        ``CreateOutcome.ALREADY_EXISTS`` and is not an error. An existing
        collection whose declared vector sizes differ from the configured
        ones raises ``ConfigurationError``.
        """
        if not self.store.collection_exists(self.collection_name):
            logger.info(f"Collection '{self.collection_name}' is absent, creating it")
            outcome = self.store.create_collection(self.collection_name, self.vector_spaces)
            if outcome is CreateOutcome.ALREADY_EXISTS:
                logger.info(f"Collection '{self.collection_name}' was created concurrently")

        info = self.store.get_collection(self.collection_name)
        self._check_schema(info)
        return info

    def _check_schema(self, info: CollectionInfo):
        for space in self.vector_spaces:
            declared = info.spaces.get(space.name)
            if declared != space.size:
                raise ConfigurationError(
                    f"Collection '{info.name}' declares {space.name}={declared}, "
                    f"embedding models produce {space.size}"
                )

    def get_collection(self) -> CollectionInfo:
        """Fetch the collection; raises ``CollectionNotFound`` when absent"""
        return self.store.get_collection(self.collection_name)

    def upsert(self, path: str, content: str,
               metadata: Optional[Dict[str, Any]] = None) -> UpsertResult:
        """Chunk, embed and write one document as a single batch"""
        chunks = self.chunker.chunk(path, content, metadata)
        if not chunks:
            logger.info(f"No content for '{path}', nothing to upsert")
            return UpsertResult(collection=self.collection_name, path=path, status="noop")

        self.ensure_collection()

        with performance_timer(f"Embedding {len(chunks)} chunks of '{path}'"):
            points = map_concurrently(self.embedder.embed, chunks, max_workers=self.max_workers)

        with performance_timer(f"Upserting {len(points)} points"):
            self.store.upsert(self.collection_name, points)

        logger.info(f"Upserted {len(points)} points for '{path}' into '{self.collection_name}'")
        return UpsertResult(
            collection=self.collection_name,
            path=path,
            ids=[point.id for point in points],
        )

    def delete(self, path: str) -> None:
        """Remove every chunk stored for ``path``"""
        self.store.delete_by_payload(self.collection_name, "path", path)

    def delete_points(self, ids: List[str]) -> None:
        """Remove an explicit set of point ids"""
        self.store.delete_points(self.collection_name, list(ids))

    def delete_collection(self) -> bool:
        return self.store.delete_collection(self.collection_name)


__all__ = ['CollectionIndexer']
