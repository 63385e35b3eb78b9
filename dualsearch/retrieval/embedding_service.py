"""
Dual-Space Embedding Service

Embeds chunks and queries into the semantic (``nlp``) and ``code`` vector
spaces. Each text is sent to the embedding provider twice, once per space
model, with both requests in flight at the same time; the result is only
produced when both succeed.
"""

import logging
import os
import threading
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from openai import OpenAI

from .errors import ConfigurationError, DualSearchError, ProviderError
from .models import CODE_SPACE, NLP_SPACE, Chunk, EmbeddedPoint
from .protocols import EmbeddingProvider
from ..utils.concurrency import run_concurrently
from ..utils.config_manager import ConfigManager
from ..utils.retry_utils import RetryConfig, with_retry

logger = logging.getLogger(__name__)


class OpenAIEmbeddingProvider:
    """Embedding provider backed by OpenAI's embeddings endpoint"""

    def __init__(self, client: Optional[Any] = None, api_key: Optional[str] = None,
                 retry_config: Optional[RetryConfig] = None):
        self.client = client or OpenAI(api_key=api_key or os.getenv("OPENAI_API_KEY"))
        # Retries belong to the provider client, never to the engine
        self._create_embedding = with_retry(retry_config)(self._request_embedding)

    def _request_embedding(self, model: str, text: str) -> List[float]:
        response = self.client.embeddings.create(model=model, input=text)
        return list(response.data[0].embedding)

    def embed(self, model: str, text: str) -> List[float]:
        try:
            return self._create_embedding(model, text)
        except Exception as e:
            raise ProviderError(f"OpenAI embedding request for model '{model}' failed: {e}",
                                model=model) from e


class SentenceTransformerProvider:
    """Embedding provider running local sentence-transformers models.

    Models are loaded on first use and cached per model id. Requires the
    ``local`` extra.
    """

    def __init__(self, device: str = "cpu"):
        self.device = device
        self._models: Dict[str, Any] = {}
        self.model_lock = threading.Lock()

    def _get_model(self, model: str):
        with self.model_lock:
            if model not in self._models:
                from sentence_transformers import SentenceTransformer

                logger.info(f"Loading sentence-transformers model '{model}' on {self.device}")
                self._models[model] = SentenceTransformer(model, device=self.device)
            return self._models[model]

    def embed(self, model: str, text: str) -> List[float]:
        try:
            encoder = self._get_model(model)
            embedding = encoder.encode(text, normalize_embeddings=True, show_progress_bar=False)
            return np.asarray(embedding, dtype=np.float32).tolist()
        except Exception as e:
            raise ProviderError(f"Local embedding with model '{model}' failed: {e}",
                                model=model) from e


def build_provider(config_manager: ConfigManager) -> EmbeddingProvider:
    """Construct the embedding provider named by ``EMBEDDING_PROVIDER``"""
    name = str(config_manager.get('EMBEDDING_PROVIDER', 'openai')).lower()
    if name == 'openai':
        return OpenAIEmbeddingProvider(
            api_key=config_manager.get('OPENAI_API_KEY'),
            retry_config=config_manager.get_retry_config()
        )
    if name in ('sentence-transformers', 'sentence_transformers', 'local'):
        return SentenceTransformerProvider(device=config_manager.get('DEVICE', 'cpu'))
    raise ConfigurationError(f"Unknown embedding provider '{name}'", stage="embed")


class DualEmbedder:
    """Produces ``nlp`` and ``code`` vectors for chunks and query strings"""

    DEFAULT_NLP_MODEL = "text-embedding-3-small"
    DEFAULT_CODE_MODEL = "text-embedding-ada-002"
    DEFAULT_DIMENSION = 1536

    def __init__(self, provider: EmbeddingProvider, collection_name: str,
                 nlp_model: str = DEFAULT_NLP_MODEL, code_model: str = DEFAULT_CODE_MODEL,
                 nlp_dimension: int = DEFAULT_DIMENSION, code_dimension: int = DEFAULT_DIMENSION):
        self.provider = provider
        self.collection_name = collection_name
        self.models = {NLP_SPACE: nlp_model, CODE_SPACE: code_model}
        self.dimensions = {NLP_SPACE: nlp_dimension, CODE_SPACE: code_dimension}

    @classmethod
    def from_config(cls, provider: EmbeddingProvider, config_manager: ConfigManager) -> "DualEmbedder":
        return cls(
            provider=provider,
            collection_name=config_manager.get('COLLECTION_NAME', 'code_chunks'),
            nlp_model=config_manager.get('NLP_EMBEDDING_MODEL', cls.DEFAULT_NLP_MODEL),
            code_model=config_manager.get('CODE_EMBEDDING_MODEL', cls.DEFAULT_CODE_MODEL),
            nlp_dimension=config_manager.get_int('NLP_VECTOR_SIZE', cls.DEFAULT_DIMENSION),
            code_dimension=config_manager.get_int('CODE_VECTOR_SIZE', cls.DEFAULT_DIMENSION),
        )

    def embed(self, chunk: Chunk) -> EmbeddedPoint:
        """Embed one chunk into both spaces"""
        nlp_vector, code_vector = self._embed_both(chunk.content)
        return EmbeddedPoint(
            id=chunk.id,
            vector={NLP_SPACE: nlp_vector, CODE_SPACE: code_vector},
            payload=chunk.to_payload(self.collection_name),
        )

    def embed_query(self, text: str) -> Tuple[List[float], List[float]]:
        """Embed a raw query string into both spaces"""
        return self._embed_both(text)

    def _embed_both(self, text: str) -> Tuple[List[float], List[float]]:
        nlp_vector, code_vector = run_concurrently(
            lambda: self._embed_in_space(NLP_SPACE, text),
            lambda: self._embed_in_space(CODE_SPACE, text),
        )
        return nlp_vector, code_vector

    def _embed_in_space(self, space: str, text: str) -> List[float]:
        model = self.models[space]
        try:
            vector = self.provider.embed(model, text)
        except DualSearchError:
            raise
        except Exception as e:
            raise ProviderError(f"Embedding provider failed for {space} model '{model}': {e}",
                                model=model) from e
        return self._validate_vector(space, vector)

    def _validate_vector(self, space: str, vector: Any) -> List[float]:
        array = np.asarray(vector, dtype=float)
        expected = self.dimensions[space]
        if array.ndim != 1 or array.shape[0] != expected:
            raise ConfigurationError(
                f"{space} model '{self.models[space]}' returned a vector of shape {array.shape}, "
                f"collection schema declares {expected}",
                stage="embed"
            )
        return array.tolist()


__all__ = [
    'OpenAIEmbeddingProvider',
    'SentenceTransformerProvider',
    'build_provider',
    'DualEmbedder',
]
