"""
Fusion Search Engine

Hybrid retrieval over two named vector spaces. A query is embedded into the
semantic (``nlp``) and ``code`` spaces, both spaces are searched at the same
time, the two ranked lists are fused into one, and the final top-k is spread
across source modules with a round-robin pass.

Fusion rules:

* ``nlp`` hits seed the result map with ``nlp_score = score``,
  ``code_score = 0`` and ``search_type = "nlp"``.
* ``code`` hits already in the map get ``code_score`` and
  ``combined_score = nlp * NLP_WEIGHT + code * CODE_WEIGHT``; new ones get
  ``nlp_score = 0`` and ``combined_score = code * CODE_WEIGHT``.
* Hits found only in the ``nlp`` space never receive a ``combined_score``
  and are ranked by their raw score.

Ordering puts hits present in both spaces ahead of single-space hits, then
sorts by ``combined_score`` (raw ``score`` when it is missing), descending.
"""

import logging
import math
from collections import deque
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from .embedding_service import DualEmbedder
from .models import CODE_SPACE, NLP_SPACE, CollectionInfo, SearchResult
from .protocols import VectorStore
from ..utils.concurrency import run_concurrently
from ..utils.config_manager import ConfigManager
from ..utils.retry_utils import performance_timer

logger = logging.getLogger(__name__)


def fuse_results(nlp_results: List[SearchResult], code_results: List[SearchResult],
                 nlp_weight: float = 0.6, code_weight: float = 0.4) -> List[SearchResult]:
    """Merge the per-space hit lists into one list keyed by point id"""
    fused: Dict[str, SearchResult] = {}

    for result in nlp_results:
        fused[result.id] = replace(
            result,
            nlp_score=result.score,
            code_score=0.0,
            search_type=NLP_SPACE,
            combined_score=None,
        )

    for result in code_results:
        existing = fused.get(result.id)
        if existing is not None:
            existing.code_score = result.score
            existing.combined_score = existing.nlp_score * nlp_weight + existing.code_score * code_weight
        else:
            fused[result.id] = replace(
                result,
                nlp_score=0.0,
                code_score=result.score,
                combined_score=result.score * code_weight,
                search_type=CODE_SPACE,
            )

    return list(fused.values())


def rank_results(results: List[SearchResult]) -> List[SearchResult]:
    """Both-space hits first, then by combined (or raw) score, descending"""
    return sorted(results, key=lambda r: (0 if r.found_in_both else 1, -r.ranking_score))


def diversify_results(ranked: List[SearchResult], limit: int,
                      group_of: Callable[[SearchResult], str] = lambda r: r.group) -> List[SearchResult]:
    """Round-robin across groups in order of first appearance.

    Each group keeps its internal rank order; one item is taken from every
    non-exhausted group per round until ``limit`` items are collected.
    """
    groups: Dict[str, deque] = {}
    for result in ranked:
        groups.setdefault(group_of(result), deque()).append(result)

    queues = list(groups.values())
    selected: List[SearchResult] = []
    while len(selected) < limit and any(queues):
        for queue in queues:
            if len(selected) >= limit:
                break
            if queue:
                selected.append(queue.popleft())
    return selected


class FusionSearchEngine:
    """Dual-space search with weighted fusion and module diversification"""

    # Configuration constants
    DEFAULT_NLP_WEIGHT = 0.6
    DEFAULT_CODE_WEIGHT = 0.4
    DEFAULT_OVERFETCH_MULTIPLIER = 1.5
    DEFAULT_LIMIT = 5

    def __init__(self, store: VectorStore, embedder: DualEmbedder, collection_name: str,
                 ensure_collection: Callable[[], CollectionInfo],
                 nlp_weight: float = DEFAULT_NLP_WEIGHT,
                 code_weight: float = DEFAULT_CODE_WEIGHT,
                 overfetch_multiplier: float = DEFAULT_OVERFETCH_MULTIPLIER,
                 default_limit: int = DEFAULT_LIMIT):
        self.store = store
        self.embedder = embedder
        self.collection_name = collection_name
        self.ensure_collection = ensure_collection
        self.nlp_weight = nlp_weight
        self.code_weight = code_weight
        self.overfetch_multiplier = overfetch_multiplier
        self.default_limit = default_limit

    @classmethod
    def from_config(cls, store: VectorStore, embedder: DualEmbedder,
                    ensure_collection: Callable[[], CollectionInfo],
                    config_manager: ConfigManager) -> "FusionSearchEngine":
        return cls(
            store=store,
            embedder=embedder,
            collection_name=config_manager.get('COLLECTION_NAME', 'code_chunks'),
            ensure_collection=ensure_collection,
            nlp_weight=config_manager.get_float('NLP_WEIGHT', cls.DEFAULT_NLP_WEIGHT),
            code_weight=config_manager.get_float('CODE_WEIGHT', cls.DEFAULT_CODE_WEIGHT),
            overfetch_multiplier=config_manager.get_float('OVERFETCH_MULTIPLIER',
                                                          cls.DEFAULT_OVERFETCH_MULTIPLIER),
            default_limit=config_manager.get_int('DEFAULT_SEARCH_LIMIT', cls.DEFAULT_LIMIT),
        )

    def candidate_count(self, limit: int) -> int:
        """Per-space over-fetch, leaving room for overlap between the spaces"""
        return math.ceil(limit * self.overfetch_multiplier)

    def search(self, query: str, limit: Optional[int] = None,
               chunk_type: Optional[str] = None) -> List[SearchResult]:
        """Return at most ``limit`` fused, diversified results for ``query``"""
        if not query or not query.strip():
            raise ValueError("Query must be a non-empty string")
        limit = self.default_limit if limit is None else limit
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")

        self.ensure_collection()

        nlp_vector, code_vector = self.embedder.embed_query(query)

        query_filter = {"chunkType": chunk_type} if chunk_type is not None else None
        candidates = self.candidate_count(limit)

        with performance_timer(f"Dual-space search (limit={limit}, candidates={candidates})"):
            nlp_results, code_results = run_concurrently(
                lambda: self._search_space(NLP_SPACE, nlp_vector, candidates, query_filter),
                lambda: self._search_space(CODE_SPACE, code_vector, candidates, query_filter),
            )

        fused = fuse_results(nlp_results, code_results, self.nlp_weight, self.code_weight)
        ranked = rank_results(fused)
        diversified = diversify_results(ranked, limit)

        logger.info(f"Search returned {len(diversified)} results "
                    f"(nlp={len(nlp_results)}, code={len(code_results)}, fused={len(fused)})")
        return diversified[:limit]

    def _search_space(self, space: str, vector: List[float], limit: int,
                      query_filter: Optional[Dict[str, Any]]) -> List[SearchResult]:
        return self.store.search(
            self.collection_name,
            space,
            vector,
            limit,
            query_filter=query_filter,
            with_payload=True,
        )


__all__ = ['fuse_results', 'rank_results', 'diversify_results', 'FusionSearchEngine']
