"""
Error Types for the Dual-Vector Retrieval Engine

Every failure carries the pipeline stage it came from (chunk, embed, write,
search or collection) so callers can tell which step of an operation broke.
"""

from enum import Enum
from typing import Optional


class DualSearchError(Exception):
    """Base class for all engine errors"""

    default_stage = "general"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage

    def __str__(self) -> str:
        return f"[{self.stage}] {self.message}"


class NotFound(DualSearchError):
    """A collection or point is absent"""

    default_stage = "collection"


class CollectionNotFound(NotFound):
    """The named collection does not exist in the vector database"""

    def __init__(self, collection_name: str):
        super().__init__(f"Collection '{collection_name}' not found")
        self.collection_name = collection_name


class ProviderError(DualSearchError):
    """The embedding provider call failed (auth, quota, network, bad input)"""

    default_stage = "embed"

    def __init__(self, message: str, model: Optional[str] = None, stage: Optional[str] = None):
        super().__init__(message, stage)
        self.model = model


class StoreError(DualSearchError):
    """The vector database call failed for a reason other than not-found"""

    default_stage = "write"


class ConfigurationError(DualSearchError):
    """Static configuration disagrees with what a collaborator reports"""

    default_stage = "collection"


class CreateOutcome(str, Enum):
    """Result of a collection creation attempt"""

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


__all__ = [
    'DualSearchError',
    'NotFound',
    'CollectionNotFound',
    'ProviderError',
    'StoreError',
    'ConfigurationError',
    'CreateOutcome',
]
