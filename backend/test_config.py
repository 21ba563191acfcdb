"""Configuration and similarity backend tests"""
import asyncio
import threading

import pytest
from pydantic import ValidationError as PydanticValidationError

from core.config import DEFAULT_SCORING_CONFIG, Settings, ScoringWeights, TierThresholds, get_settings
from services.similarity import (
    TfidfSimilarity,
    TokenOverlapSimilarity,
    content_tokens,
    get_similarity_executor,
    get_similarity_provider,
    shutdown_similarity_executor,
)


class TestScoringConfig:
    def test_default_weights_sum_to_one(self):
        w = DEFAULT_SCORING_CONFIG.weights
        assert (w.semantic, w.skill, w.experience, w.education) == (0.35, 0.30, 0.20, 0.15)

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValueError):
            ScoringWeights(semantic=0.5, skill=0.5, experience=0.5, education=0.5)

    def test_weights_must_be_non_negative(self):
        with pytest.raises(ValueError):
            ScoringWeights(semantic=1.2, skill=-0.2, experience=0.0, education=0.0)

    def test_thresholds_must_be_ordered(self):
        with pytest.raises(ValueError):
            TierThresholds(excellent=50, good=70, fair=10)

    def test_to_dict(self):
        data = DEFAULT_SCORING_CONFIG.to_dict()
        assert data["tiers"] == {"excellent": 85, "good": 70, "fair": 50}
        assert data["experience_penalty_per_level"] == 30
        assert data["max_insights"] == 5


class TestSettings:
    def test_backend_is_normalized(self):
        assert Settings(semantic_backend=" TFIDF ").semantic_backend == "tfidf"

    def test_unknown_backend_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(semantic_backend="bogus")

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


class TestSimilarityProviders:
    def test_provider_singleton(self):
        assert get_similarity_provider("token") is get_similarity_provider("token")

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            get_similarity_provider("nope")

    def test_content_tokens_normalized(self):
        assert content_tokens("Experience with the JS and k8s stack.") == {"experience", "javascript", "kubernetes", "stack"}

    def test_token_overlap_is_coverage_of_first_text(self):
        provider = TokenOverlapSimilarity()
        score = asyncio.run(provider.similarity("python django", "python flask docker"))
        assert score == pytest.approx(0.5)

    def test_tfidf_identical_texts(self):
        provider = TfidfSimilarity()
        text = "python developer building data pipelines"
        assert asyncio.run(provider.similarity(text, text)) == pytest.approx(1.0)

    def test_tfidf_unrelated_texts(self):
        assert TfidfSimilarity().score("apple banana", "engine gearbox") == 0.0

    def test_tfidf_stop_words_only(self):
        assert TfidfSimilarity().score("the and of", "of the") == 0.0


class TestSimilarityExecutor:
    def test_bounded_by_ranking_concurrency(self):
        executor = get_similarity_executor()
        assert executor is get_similarity_executor()
        assert executor._max_workers == get_settings().ranking_concurrency

    def test_tfidf_runs_on_similarity_workers(self):
        class ThreadName(TfidfSimilarity):
            def score(self, text_a, text_b):
                return threading.current_thread().name

        name = asyncio.run(ThreadName().similarity("python", "python"))
        assert name.startswith("similarity_worker")

    def test_shutdown_resets_pool(self):
        executor = get_similarity_executor()
        shutdown_similarity_executor()
        assert get_similarity_executor() is not executor
