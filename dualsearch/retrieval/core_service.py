"""
Core Dual-Vector Service

This module wires the chunker, embedder, indexer and fusion search engine
around explicitly passed collaborators (embedding provider and vector store).
There is no process-wide client instance: callers build a service from a
config object, or hand in their own provider/store for tests.
"""

import logging
from typing import Any, Dict, List, Optional

from .chunking_service import FixedWindowChunker
from .embedding_service import DualEmbedder, build_provider
from .indexing_service import CollectionIndexer
from .models import CollectionInfo, SearchResult, UpsertResult
from .protocols import EmbeddingProvider, VectorStore
from .search_engines import FusionSearchEngine
from .vector_store import QdrantVectorStore
from ..utils.config_manager import ConfigManager

logger = logging.getLogger(__name__)


class DualVectorService:
    """Entry point for indexing documents and running fused searches"""

    def __init__(self, config: Any = None, provider: Optional[EmbeddingProvider] = None,
                 store: Optional[VectorStore] = None):
        self.config_manager = ConfigManager(config)
        self.provider = provider or build_provider(self.config_manager)
        self.store = store or QdrantVectorStore.from_config(self.config_manager)
        self.collection_name = self.config_manager.get('COLLECTION_NAME', 'code_chunks')

        self.chunker = FixedWindowChunker(
            self.config_manager.get_int('CHUNK_SIZE', FixedWindowChunker.DEFAULT_CHUNK_SIZE)
        )
        self.embedder = DualEmbedder.from_config(self.provider, self.config_manager)
        self.indexer = CollectionIndexer(
            store=self.store,
            chunker=self.chunker,
            embedder=self.embedder,
            collection_name=self.collection_name,
            max_workers=self.config_manager.get_int('EMBEDDING_MAX_WORKERS',
                                                    CollectionIndexer.DEFAULT_MAX_WORKERS),
        )
        self.search_engine = FusionSearchEngine.from_config(
            store=self.store,
            embedder=self.embedder,
            ensure_collection=self.indexer.ensure_collection,
            config_manager=self.config_manager,
        )
        logger.info(f"Dual-vector service ready for collection '{self.collection_name}'")

    def ensure_collection(self) -> CollectionInfo:
        return self.indexer.ensure_collection()

    def get_collection(self) -> CollectionInfo:
        return self.indexer.get_collection()

    def upsert(self, path: str, content: str,
               metadata: Optional[Dict[str, Any]] = None) -> UpsertResult:
        return self.indexer.upsert(path, content, metadata)

    def delete(self, path: str) -> None:
        self.indexer.delete(path)

    def delete_points(self, ids: List[str]) -> None:
        self.indexer.delete_points(ids)

    def delete_collection(self) -> bool:
        return self.indexer.delete_collection()

    def search(self, query: str, limit: Optional[int] = None,
               chunk_type: Optional[str] = None) -> List[SearchResult]:
        return self.search_engine.search(query, limit=limit, chunk_type=chunk_type)


__all__ = ['DualVectorService']
