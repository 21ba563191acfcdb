"""Dimension scorer tests"""
import asyncio

import pytest

from conftest import ConstantSimilarity
from models.schemas import EducationLevel, ExperienceLevel, JobRequirement
from services.dimension_scorers import (
    SemanticScorer,
    build_job_text,
    candidate_experience_level,
    education_match,
    experience_match,
    highest_education_level,
    ordinal_gap_score,
    parse_education_level,
    skill_match,
    skill_overlap,
)
from services.skill_normalizer import normalize_skills


def _job(job_data, **overrides):
    return JobRequirement.model_validate({**job_data, **overrides})


class TestSkillMatch:
    def test_partial_overlap(self, job, make_candidate):
        candidate = make_candidate(skills=["react", "node"])
        matched, missing = skill_overlap(job, candidate)
        assert matched == {"react", "node.js"}
        assert missing == {"sql"}
        assert skill_match(job, candidate) == 67

    def test_full_overlap(self, job, make_candidate):
        candidate = make_candidate(skills=["ReactJS", "nodejs", "sql", "Docker"])
        assert skill_match(job, candidate) == 100

    def test_no_overlap(self, job, make_candidate):
        assert skill_match(job, make_candidate(skills=["cobol"])) == 0

    def test_job_without_required_skills(self, job_data, make_candidate):
        job = _job(job_data, skills=[])
        assert skill_match(job, make_candidate(skills=[])) == 100

    @pytest.mark.parametrize("required, have, matched, missing", [
        (["JS", "javascript", "React"], ["js"], {"javascript"}, {"react"}),
        (["Node", "nodejs", "Postgres", "postgresql"], ["node.js", "k8s"], {"node.js"}, {"postgresql"}),
        (["Python (advanced)", "python", "Docker"], ["Docker", "PYTHON"], {"python", "docker"}, set()),
        (["Go", "golang", "Rust"], [], set(), {"go", "rust"}),
    ])
    def test_matched_and_missing_partition_required(self, job_data, make_candidate, required, have, matched, missing):
        job = _job(job_data, skills=required)
        got_matched, got_missing = skill_overlap(job, make_candidate(skills=have))

        assert got_matched == matched
        assert got_missing == missing
        assert got_matched | got_missing == normalize_skills(required)
        assert not got_matched & got_missing

    def test_synonym_duplicates_count_once(self, job_data, make_candidate):
        job = _job(job_data, skills=["JS", "javascript", "React"])
        assert skill_match(job, make_candidate(skills=["js"])) == 50

    def test_rounds_half_up(self, job_data, make_candidate):
        # 1 of 8 = 12.5%
        job = _job(job_data, skills=["a", "b", "c", "d", "e", "f", "g", "h"])
        assert skill_match(job, make_candidate(skills=["a"])) == 13


class TestExperienceMatch:
    def test_senior_job_entry_candidate(self, job_data, make_candidate):
        job = _job(job_data, experienceLevel="senior")
        assert experience_match(job, make_candidate(experienceLevel="entry")) == 40

    def test_meets_requirement(self, job, make_candidate):
        assert experience_match(job, make_candidate(experienceLevel="senior")) == 100

    def test_executive_job_entry_candidate(self, job_data, make_candidate):
        job = _job(job_data, experienceLevel="Executive")
        assert experience_match(job, make_candidate(skills=["x"])) == 10

    @pytest.mark.parametrize("years, level", [
        (0, ExperienceLevel.ENTRY),
        (2.5, ExperienceLevel.ENTRY),
        (3, ExperienceLevel.MID),
        (7, ExperienceLevel.SENIOR),
        (12, ExperienceLevel.EXECUTIVE),
    ])
    def test_years_bucketed(self, make_candidate, years, level):
        assert candidate_experience_level(make_candidate(experienceYears=years)) == level

    def test_explicit_level_wins_over_years(self, make_candidate):
        candidate = make_candidate(experienceYears=12, experienceLevel="mid")
        assert candidate_experience_level(candidate) == ExperienceLevel.MID

    def test_gap_score_never_negative(self):
        assert ordinal_gap_score(5, 0, 30) == 0


class TestEducationMatch:
    @pytest.mark.parametrize("text, level", [
        ("PhD in Physics", EducationLevel.DOCTORATE),
        ("MBA", EducationLevel.MASTER),
        ("Master of Science", EducationLevel.MASTER),
        ("Bachelor of Science in Computer Science", EducationLevel.BACHELOR),
        ("B.Sc. Mathematics", EducationLevel.BACHELOR),
        ("Associate's degree in IT", EducationLevel.ASSOCIATE),
        ("High School Diploma", EducationLevel.DIPLOMA),
        ("Certified Scrum Master", EducationLevel.NONE),
        ("bachelor", EducationLevel.BACHELOR),
        ("", EducationLevel.NONE),
    ])
    def test_parse_level(self, text, level):
        assert parse_education_level(text) == level

    def test_highest_level_wins(self):
        assert highest_education_level(["High School Diploma", "MSc Data Science"]) == EducationLevel.MASTER

    def test_no_minimum_is_full_score(self, job, make_candidate):
        assert education_match(job, make_candidate(skills=["x"])) == 100

    def test_one_level_below(self, job_data, make_candidate):
        job = _job(job_data, minEducation="master")
        candidate = make_candidate(education=["Bachelor of Science in Computer Science"])
        assert education_match(job, candidate) == 70

    def test_missing_education_with_minimum(self, job_data, make_candidate):
        job = _job(job_data, minEducation="Bachelor's degree")
        assert education_match(job, make_candidate(skills=["x"])) == 10

    def test_meets_minimum(self, job_data, make_candidate):
        job = _job(job_data, minEducation="bachelor")
        assert education_match(job, make_candidate(education="PhD")) == 100


class TestSemanticScorer:
    def test_identical_text_scores_full(self, job, make_candidate, token_scorer):
        candidate = make_candidate(resumeText=build_job_text(job))
        score, degraded = asyncio.run(token_scorer.score_with_status(job, candidate))
        assert score == 100
        assert degraded is False

    def test_missing_resume_text_is_zero_not_degraded(self, job, make_candidate, token_scorer):
        score, degraded = asyncio.run(token_scorer.score_with_status(job, make_candidate(skills=["react"])))
        assert (score, degraded) == (0, False)

    def test_timeout_degrades_to_zero(self, job, make_candidate, slow_scorer):
        candidate = make_candidate(resumeText="React developer")
        score, degraded = asyncio.run(slow_scorer.score_with_status(job, candidate))
        assert (score, degraded) == (0, True)

    def test_provider_failure_degrades_to_zero(self, job, make_candidate, failing_scorer):
        candidate = make_candidate(resumeText="React developer")
        assert asyncio.run(failing_scorer.score(job, candidate)) == 0

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), None, "high"])
    def test_unusable_provider_value_degrades(self, job, make_candidate, value):
        scorer = SemanticScorer(provider=ConstantSimilarity(value), timeout_seconds=1.0)
        candidate = make_candidate(resumeText="React developer")
        assert asyncio.run(scorer.score_with_status(job, candidate)) == (0, True)

    def test_out_of_range_value_is_clamped(self, job, make_candidate):
        scorer = SemanticScorer(provider=ConstantSimilarity(1.7), timeout_seconds=1.0)
        candidate = make_candidate(resumeText="React developer")
        assert asyncio.run(scorer.score_with_status(job, candidate)) == (100, False)

    def test_partial_overlap_in_range(self, job, make_candidate, token_scorer):
        candidate = make_candidate(resumeText="Frontend work in React and some SQL reporting")
        score = asyncio.run(token_scorer.score(job, candidate))
        assert 0 < score < 100
