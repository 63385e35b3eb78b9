"""
Dual-Vector Retrieval Components

Chunking, dual-space embedding, indexing and fusion search, each in its own
module.
"""

from .models import (
    Chunk,
    EmbeddedPoint,
    SearchResult,
    CollectionInfo,
    UpsertResult,
    VectorSpace,
    NLP_SPACE,
    CODE_SPACE,
)
from .errors import (
    DualSearchError,
    NotFound,
    CollectionNotFound,
    ProviderError,
    StoreError,
    ConfigurationError,
    CreateOutcome,
)
from .protocols import EmbeddingProvider, VectorStore
from .chunking_service import FixedWindowChunker
from .embedding_service import DualEmbedder, OpenAIEmbeddingProvider, SentenceTransformerProvider
from .indexing_service import CollectionIndexer
from .search_engines import FusionSearchEngine, fuse_results, rank_results, diversify_results
from .vector_store import QdrantVectorStore
from .core_service import DualVectorService

__all__ = [
    'Chunk',
    'EmbeddedPoint',
    'SearchResult',
    'CollectionInfo',
    'UpsertResult',
    'VectorSpace',
    'NLP_SPACE',
    'CODE_SPACE',
    'DualSearchError',
    'NotFound',
    'CollectionNotFound',
    'ProviderError',
    'StoreError',
    'ConfigurationError',
    'CreateOutcome',
    'EmbeddingProvider',
    'VectorStore',
    'FixedWindowChunker',
    'DualEmbedder',
    'OpenAIEmbeddingProvider',
    'SentenceTransformerProvider',
    'CollectionIndexer',
    'FusionSearchEngine',
    'fuse_results',
    'rank_results',
    'diversify_results',
    'QdrantVectorStore',
    'DualVectorService',
]
