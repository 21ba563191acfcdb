"""
Pytest configuration and shared fixtures for the scoring services.
"""
import asyncio

import pytest

from models.schemas import CandidateProfile, JobRequirement
from services.candidate_ranker import CandidateRanker
from services.dimension_scorers import SemanticScorer
from services.similarity import SimilarityProvider, TokenOverlapSimilarity


class SlowSimilarity(SimilarityProvider):
    """Never answers within any reasonable timeout"""

    name = "slow"

    async def similarity(self, text_a, text_b):
        await asyncio.sleep(10)
        return 1.0


class FailingSimilarity(SimilarityProvider):
    name = "failing"

    async def similarity(self, text_a, text_b):
        raise RuntimeError("model backend unavailable")


class ConstantSimilarity(SimilarityProvider):
    """Answers every lookup with the same raw value, valid or not"""

    name = "constant"

    def __init__(self, value):
        self.value = value

    async def similarity(self, text_a, text_b):
        return self.value


class ConcurrencyTracker(SimilarityProvider):
    """Records the peak number of lookups in flight"""

    name = "tracker"

    def __init__(self):
        self.active = 0
        self.peak = 0

    async def similarity(self, text_a, text_b):
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return 0.5


@pytest.fixture
def job_data():
    return {
        "jobId": "job-1",
        "title": "Full Stack Developer",
        "skills": ["React", "Node.js", "SQL"],
        "experienceLevel": "mid",
        "category": "software",
        "description": "Build web applications with React and Node.js backed by SQL databases.",
    }


@pytest.fixture
def job(job_data):
    return JobRequirement.model_validate(job_data)


@pytest.fixture
def make_candidate():
    def _make(candidate_id="c1", **fields):
        return CandidateProfile.model_validate({"candidateId": candidate_id, **fields})
    return _make


@pytest.fixture
def token_scorer():
    return SemanticScorer(provider=TokenOverlapSimilarity(), timeout_seconds=1.0)


@pytest.fixture
def ranker(token_scorer):
    return CandidateRanker(semantic_scorer=token_scorer, concurrency=4)


@pytest.fixture
def slow_scorer():
    return SemanticScorer(provider=SlowSimilarity(), timeout_seconds=0.05)


@pytest.fixture
def failing_scorer():
    return SemanticScorer(provider=FailingSimilarity(), timeout_seconds=1.0)
