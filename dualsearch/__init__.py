"""
dualsearch - hybrid code search over two named vector spaces
"""

from .retrieval import (
    DualVectorService,
    FixedWindowChunker,
    DualEmbedder,
    CollectionIndexer,
    FusionSearchEngine,
    QdrantVectorStore,
    SearchResult,
)

__version__ = "0.1.0"

__all__ = [
    'DualVectorService',
    'FixedWindowChunker',
    'DualEmbedder',
    'CollectionIndexer',
    'FusionSearchEngine',
    'QdrantVectorStore',
    'SearchResult',
]
