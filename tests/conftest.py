"""
Shared fixtures and in-memory collaborators for the retrieval tests.
"""

import hashlib
import threading
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pytest

from dualsearch.retrieval import (
    CollectionIndexer,
    CollectionInfo,
    CollectionNotFound,
    CreateOutcome,
    DualEmbedder,
    FixedWindowChunker,
    FusionSearchEngine,
    SearchResult,
)
from dualsearch.retrieval.models import EmbeddedPoint, VectorSpace

TEST_DIMENSION = 8
TEST_COLLECTION = "test_chunks"


class FakeEmbeddingProvider:
    """Deterministic provider: the vector is a function of (model, text)"""

    def __init__(self, dimension: int = TEST_DIMENSION, fail_models: Iterable[str] = (),
                 fail_texts: Iterable[str] = ()):
        self.dimension = dimension
        self.fail_models = set(fail_models)
        self.fail_texts = set(fail_texts)
        self.calls: List[tuple] = []
        self._lock = threading.Lock()

    def embed(self, model: str, text: str) -> List[float]:
        with self._lock:
            self.calls.append((model, text))
        if model in self.fail_models or text in self.fail_texts:
            raise RuntimeError(f"quota exceeded for {model}")
        seed = int(hashlib.md5(f"{model}|{text}".encode("utf-8")).hexdigest()[:8], 16)
        rng = np.random.default_rng(seed)
        return (rng.random(self.dimension) + 0.01).tolist()


class FakeVectorStore:
    """In-memory named-vector store with optional scripted search results"""

    def __init__(self):
        self.collections: Dict[str, Dict[str, Any]] = {}
        self.scripted: Dict[str, List[SearchResult]] = {}
        self.search_calls: List[Dict[str, Any]] = []
        self.upsert_calls = 0
        self.create_calls = 0
        self._lock = threading.Lock()

    # Collections -------------------------------------------------------
    def collection_exists(self, collection_name: str) -> bool:
        return collection_name in self.collections

    def get_collection(self, collection_name: str) -> CollectionInfo:
        if collection_name not in self.collections:
            raise CollectionNotFound(collection_name)
        collection = self.collections[collection_name]
        return CollectionInfo(
            name=collection_name,
            spaces=dict(collection["spaces"]),
            points_count=len(collection["points"]),
            status="green",
        )

    def create_collection(self, collection_name: str,
                          spaces: Iterable[VectorSpace]) -> CreateOutcome:
        with self._lock:
            self.create_calls += 1
            if collection_name in self.collections:
                return CreateOutcome.ALREADY_EXISTS
            self.collections[collection_name] = {
                "spaces": {space.name: space.size for space in spaces},
                "points": {},
            }
            return CreateOutcome.CREATED

    def delete_collection(self, collection_name: str) -> bool:
        return self.collections.pop(collection_name, None) is not None

    # Points --------------------------------------------------------------
    def points(self, collection_name: str = TEST_COLLECTION) -> Dict[str, EmbeddedPoint]:
        return self.collections[collection_name]["points"]

    def upsert(self, collection_name: str, points: List[EmbeddedPoint]):
        with self._lock:
            self.upsert_calls += 1
            stored = self.collections[collection_name]["points"]
            for point in points:
                stored[point.id] = point
        return {"status": "completed"}

    def search(self, collection_name: str, space: str, vector: List[float],
               limit: int, query_filter: Optional[Dict[str, Any]] = None,
               with_payload: bool = True) -> List[SearchResult]:
        with self._lock:
            self.search_calls.append({
                "space": space, "limit": limit, "filter": query_filter,
                "with_payload": with_payload,
            })

        if space in self.scripted:
            candidates = [r for r in self.scripted[space] if self._matches(r.payload, query_filter)]
            return [SearchResult(id=r.id, payload=r.payload, score=r.score)
                    for r in candidates[:limit]]

        query = np.asarray(vector, dtype=float)
        hits = []
        for point in self.collections[collection_name]["points"].values():
            if not self._matches(point.payload, query_filter):
                continue
            stored = np.asarray(point.vector[space], dtype=float)
            score = float(stored @ query / (np.linalg.norm(stored) * np.linalg.norm(query)))
            hits.append(SearchResult(id=point.id, payload=point.payload, score=score))
        hits.sort(key=lambda r: r.score, reverse=True)
        return hits[:limit]

    @staticmethod
    def _matches(payload: Dict[str, Any], query_filter: Optional[Dict[str, Any]]) -> bool:
        if not query_filter:
            return True
        return all(payload.get(key) == value for key, value in query_filter.items())

    def delete_points(self, collection_name: str, ids: List[str]) -> None:
        stored = self.collections[collection_name]["points"]
        for point_id in ids:
            stored.pop(point_id, None)

    def delete_by_payload(self, collection_name: str, key: str, value: Any) -> None:
        stored = self.collections[collection_name]["points"]
        for point_id in [pid for pid, p in stored.items() if p.payload.get(key) == value]:
            del stored[point_id]


def make_result(point_id: str, score: float, module: Optional[str] = None,
                **payload: Any) -> SearchResult:
    metadata = {"module": module} if module is not None else {}
    return SearchResult(id=point_id, payload={"metadata": metadata, **payload}, score=score)


@pytest.fixture
def provider():
    return FakeEmbeddingProvider()


@pytest.fixture
def store():
    return FakeVectorStore()


@pytest.fixture
def chunker():
    return FixedWindowChunker(chunk_size=10)


@pytest.fixture
def embedder(provider):
    return DualEmbedder(
        provider=provider,
        collection_name=TEST_COLLECTION,
        nlp_model="nlp-model",
        code_model="code-model",
        nlp_dimension=TEST_DIMENSION,
        code_dimension=TEST_DIMENSION,
    )


@pytest.fixture
def indexer(store, chunker, embedder):
    return CollectionIndexer(store=store, chunker=chunker, embedder=embedder,
                             collection_name=TEST_COLLECTION, max_workers=4)


@pytest.fixture
def engine(store, embedder, indexer):
    return FusionSearchEngine(store=store, embedder=embedder, collection_name=TEST_COLLECTION,
                              ensure_collection=indexer.ensure_collection)


@pytest.fixture
def service_config():
    return {
        "COLLECTION_NAME": TEST_COLLECTION,
        "NLP_EMBEDDING_MODEL": "nlp-model",
        "CODE_EMBEDDING_MODEL": "code-model",
        "NLP_VECTOR_SIZE": TEST_DIMENSION,
        "CODE_VECTOR_SIZE": TEST_DIMENSION,
        "CHUNK_SIZE": 10,
        "EMBEDDING_MAX_WORKERS": 4,
    }
