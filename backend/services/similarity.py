"""
Text Similarity Providers
=========================
Backends for the semantic match dimension, all behind one small interface:

    await provider.similarity(text_a, text_b) -> float in [0, 1]

Tiers:
1. EmbeddingSimilarity - sentence-transformers cosine similarity (model based)
2. TfidfSimilarity - TF-IDF + cosine similarity (statistical)
3. TokenOverlapSimilarity - deterministic term coverage (default, used in tests)
"""

import asyncio
import hashlib
import logging
import re
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional, Set

import numpy as np
from cachetools import LRUCache
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS, TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from core.config import get_settings
from services.skill_normalizer import normalize

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[a-z0-9][a-z0-9+#./-]*")


def content_tokens(text: str) -> Set[str]:
    """Lowercased, skill-normalized content words of a text, stop words removed"""
    tokens = set()
    for raw in _TOKEN_RE.findall((text or "").lower()):
        raw = raw.rstrip('./-')
        if len(raw) < 2 or raw in ENGLISH_STOP_WORDS:
            continue
        token = normalize(raw)
        if token and token not in ENGLISH_STOP_WORDS:
            tokens.add(token)
    return tokens


# Shared worker pool for CPU-bound lookups. Lookups abandoned by a timeout keep
# their worker until they finish, so the pool is capped at ranking_concurrency.
_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def get_similarity_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=get_settings().ranking_concurrency,
                thread_name_prefix="similarity_worker"
            )
    return _executor


def shutdown_similarity_executor() -> None:
    global _executor
    with _executor_lock:
        if _executor is not None:
            _executor.shutdown(wait=False, cancel_futures=True)
            _executor = None


class SimilarityProvider(ABC):
    """Interface every similarity backend implements"""

    name = "base"

    @abstractmethod
    async def similarity(self, text_a: str, text_b: str) -> float:
        """Similarity of text_b to text_a in [0, 1]"""

    async def warmup(self) -> None:
        """Load models ahead of the first request. No-op by default."""


class TokenOverlapSimilarity(SimilarityProvider):
    """
    Share of text_a's content terms that also appear in text_b.
    Asymmetric on purpose: text_a is the job, text_b the resume, and a long
    resume should not be penalized for covering more than the job asks.
    """

    name = "token"

    async def similarity(self, text_a: str, text_b: str) -> float:
        return self.score(text_a, text_b)

    @staticmethod
    def score(text_a: str, text_b: str) -> float:
        tokens_a = content_tokens(text_a)
        tokens_b = content_tokens(text_b)
        if not tokens_a or not tokens_b:
            return 0.0
        return len(tokens_a & tokens_b) / len(tokens_a)


class TfidfSimilarity(SimilarityProvider):
    """TF-IDF cosine similarity, computed off the event loop"""

    name = "tfidf"

    def __init__(self, max_features: int = 1000):
        self.max_features = max_features

    async def similarity(self, text_a: str, text_b: str) -> float:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(get_similarity_executor(), self.score, text_a, text_b)

    def score(self, text_a: str, text_b: str) -> float:
        if not text_a.strip() or not text_b.strip():
            return 0.0
        # A fresh vectorizer per call; fit_transform mutates it
        vectorizer = TfidfVectorizer(
            max_features=self.max_features,
            stop_words='english',
            ngram_range=(1, 2)
        )
        try:
            vectors = vectorizer.fit_transform([text_a, text_b])
        except ValueError:
            # Empty vocabulary: both texts are stop words only
            return 0.0
        similarity = cosine_similarity(vectors[0:1], vectors[1:2])[0][0]
        return float(max(0.0, min(1.0, similarity)))


class EmbeddingSimilarity(SimilarityProvider):
    """
    Sentence-transformers cosine similarity.
    The model loads lazily on first use; encodings run in the shared similarity executor
    and are cached by text hash, since one job text is compared against every
    applicant.
    """

    name = "embedding"

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", cache_size: int = 512):
        self.model_name = model_name
        self._model = None
        self._model_lock = threading.Lock()
        self._cache: LRUCache = LRUCache(maxsize=cache_size)
        self._cache_lock = threading.Lock()

    def _load_model(self):
        with self._model_lock:
            if self._model is None:
                from sentence_transformers import SentenceTransformer
                logger.info(f"Loading embedding model {self.model_name}...")
                self._model = SentenceTransformer(self.model_name)
                logger.info("✅ Embedding model loaded")
        return self._model

    def _encode(self, text: str) -> np.ndarray:
        key = hashlib.md5(text.encode()).hexdigest()
        with self._cache_lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        embedding = np.asarray(
            self._load_model().encode(text, show_progress_bar=False),
            dtype=np.float32
        )
        with self._cache_lock:
            self._cache[key] = embedding
        return embedding

    def score(self, text_a: str, text_b: str) -> float:
        if not text_a.strip() or not text_b.strip():
            return 0.0
        emb_a = self._encode(text_a)
        emb_b = self._encode(text_b)
        denom = float(np.linalg.norm(emb_a) * np.linalg.norm(emb_b))
        if denom == 0.0:
            return 0.0
        similarity = float(np.dot(emb_a, emb_b) / denom)
        return max(0.0, min(1.0, similarity))

    async def similarity(self, text_a: str, text_b: str) -> float:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(get_similarity_executor(), self.score, text_a, text_b)

    async def warmup(self) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(get_similarity_executor(), self._load_model)


# Singletons per backend
_providers: Dict[str, SimilarityProvider] = {}


def get_similarity_provider(backend: Optional[str] = None) -> SimilarityProvider:
    """Get the shared provider for a backend (defaults to settings.semantic_backend)"""
    settings = get_settings()
    backend = (backend or settings.semantic_backend).lower()

    if backend not in _providers:
        if backend == "token":
            _providers[backend] = TokenOverlapSimilarity()
        elif backend == "tfidf":
            _providers[backend] = TfidfSimilarity()
        elif backend == "embedding":
            _providers[backend] = EmbeddingSimilarity(model_name=settings.embedding_model)
        else:
            raise ValueError(f"Unknown semantic backend: {backend}")
        logger.info(f"Semantic similarity backend: {backend}")

    return _providers[backend]
