"""
Retrieval Data Models and Core Data Structures

This module contains the data classes shared by the chunker, the embedder,
the indexer and the fusion search engine.
"""

import hashlib
import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

NLP_SPACE = "nlp"
CODE_SPACE = "code"
VECTOR_SPACES = (NLP_SPACE, CODE_SPACE)

DEFAULT_GROUP = "root"


def compute_chunk_id(path: str, offset: int) -> str:
    """Deterministic point id for the window of ``path`` starting at ``offset``"""
    digest = hashlib.md5(f"{path}#chunk-{offset}".encode("utf-8")).hexdigest()
    # Qdrant only accepts unsigned ints or UUIDs as point ids
    return str(uuid.UUID(hex=digest))


def compute_content_hash(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Chunk:
    """A contiguous, fixed-size slice of one document"""
    id: str
    path: str
    content: str
    content_hash: str
    loc: Tuple[int, int]
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def offset(self) -> int:
        return self.loc[0]

    def to_payload(self, collection_name: str) -> Dict[str, Any]:
        """Denormalised copy of the chunk stored next to its vectors"""
        payload = {
            'id': self.id,
            'path': self.path,
            'content': self.content,
            'contentHash': self.content_hash,
            'loc': {'start': self.loc[0], 'end': self.loc[1]},
            'metadata': dict(self.metadata),
            'collection': collection_name,
        }
        chunk_type = self.metadata.get('chunkType')
        if chunk_type is not None:
            payload['chunkType'] = chunk_type
        return payload


@dataclass
class EmbeddedPoint:
    """A chunk plus its vectors in both named spaces"""
    id: str
    vector: Dict[str, List[float]]
    payload: Dict[str, Any]

    @property
    def nlp_vector(self) -> List[float]:
        return self.vector[NLP_SPACE]

    @property
    def code_vector(self) -> List[float]:
        return self.vector[CODE_SPACE]


@dataclass
class SearchResult:
    """Ranked hit, first space-local and later enriched by fusion"""
    id: str
    payload: Dict[str, Any]
    score: float
    search_type: Optional[str] = None
    nlp_score: float = 0.0
    code_score: float = 0.0
    combined_score: Optional[float] = None

    @property
    def found_in_both(self) -> bool:
        return self.nlp_score > 0 and self.code_score > 0

    @property
    def ranking_score(self) -> float:
        """combined_score when fusion assigned one, raw score otherwise"""
        if self.combined_score is not None:
            return self.combined_score
        return self.score

    @property
    def group(self) -> str:
        """Diversification key; non-string module values are serialised"""
        metadata = self.payload.get('metadata') or {}
        module = metadata.get('module')
        if not module:
            return DEFAULT_GROUP
        if isinstance(module, str):
            return module
        return json.dumps(module, sort_keys=True, default=str)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'id': self.id,
            'score': self.score,
            'payload': self.payload,
            'searchType': self.search_type,
            'nlpScore': self.nlp_score,
            'codeScore': self.code_score,
        }
        if self.combined_score is not None:
            result['combinedScore'] = self.combined_score
        return result


@dataclass
class VectorSpace:
    """Declared schema of one named vector space"""
    name: str
    size: int
    distance: str = "cosine"


@dataclass
class CollectionInfo:
    """Store-neutral view of a collection"""
    name: str
    spaces: Dict[str, int]
    points_count: Optional[int] = None
    status: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'spaces': dict(self.spaces),
            'pointsCount': self.points_count,
            'status': self.status,
        }


@dataclass
class UpsertResult:
    """Write acknowledgement returned by the indexer"""
    collection: str
    path: str
    ids: List[str] = field(default_factory=list)
    status: str = "completed"

    @property
    def points_upserted(self) -> int:
        return len(self.ids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'collection': self.collection,
            'path': self.path,
            'ids': list(self.ids),
            'pointsUpserted': self.points_upserted,
            'status': self.status,
        }


__all__ = [
    'NLP_SPACE',
    'CODE_SPACE',
    'VECTOR_SPACES',
    'DEFAULT_GROUP',
    'compute_chunk_id',
    'compute_content_hash',
    'Chunk',
    'EmbeddedPoint',
    'SearchResult',
    'VectorSpace',
    'CollectionInfo',
    'UpsertResult',
]
