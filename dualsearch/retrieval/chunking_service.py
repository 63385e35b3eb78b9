"""
Fixed-Window Chunking Service

Splits document content into contiguous, non-overlapping character windows
and gives each window an identity derived from its path and offset, so
re-chunking the same document always reproduces the same id sequence.
"""

import logging
from typing import Any, Dict, List, Optional

from .errors import ConfigurationError
from .models import Chunk, compute_chunk_id, compute_content_hash

logger = logging.getLogger(__name__)


class FixedWindowChunker:
    """Deterministic fixed-size chunker"""

    DEFAULT_CHUNK_SIZE = 1000

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if not isinstance(chunk_size, int) or isinstance(chunk_size, bool) or chunk_size <= 0:
            raise ConfigurationError(f"Chunk size must be a positive integer, got {chunk_size!r}",
                                     stage="chunk")
        self.chunk_size = chunk_size

    def chunk(self, path: str, content: str,
              metadata: Optional[Dict[str, Any]] = None) -> List[Chunk]:
        """Split ``content`` into windows of ``chunk_size`` characters"""
        if not content:
            return []

        metadata = metadata or {}
        chunks = []
        for offset in range(0, len(content), self.chunk_size):
            end = min(offset + self.chunk_size, len(content))
            window = content[offset:end]
            chunks.append(Chunk(
                id=compute_chunk_id(path, offset),
                path=path,
                content=window,
                content_hash=compute_content_hash(window),
                loc=(offset, end),
                metadata=dict(metadata),
            ))

        logger.debug(f"Chunked '{path}' into {len(chunks)} windows of {self.chunk_size} chars")
        return chunks


__all__ = ['FixedWindowChunker']
