"""
Resume Profile Analyzer
Recovers structured profile fields (skills, years of experience, degrees,
certifications) from resume text with pattern matching.

Used to fill applications that arrive with raw resume text but no parsed
profile. Reading PDF/DOCX files is not done here.
"""
import logging
import re
from typing import List, Optional

from models.schemas import CandidateProfile, ResumeAnalysis
from services.dimension_scorers import EDUCATION_PATTERNS
from services.skill_normalizer import SKILL_SYNONYMS, normalize

logger = logging.getLogger(__name__)


# Skill vocabulary searched for in resume text, beyond SKILL_SYNONYMS
TECHNICAL_SKILLS = [
    # Programming languages
    'java', 'ruby', 'php', 'swift', 'kotlin', 'rust', 'scala', 'matlab', 'perl', 'bash',
    # Web
    'flask', 'fastapi', 'laravel', 'rails', 'gatsby', 'svelte', 'jquery', 'bootstrap', 'sass',
    # Databases
    'redis', 'cassandra', 'oracle', 'sqlite', 'firebase', 'mariadb', 'neo4j',
    # Cloud & DevOps
    'docker', 'jenkins', 'gitlab', 'github', 'ansible', 'chef', 'puppet', 'circleci',
    'travis ci', 'nginx', 'linux', 'unix', 'devops', 'microservices',
    # Data science
    'keras', 'pandas', 'numpy', 'data science', 'computer vision', 'neural networks', 'spark', 'hadoop',
    # Mobile
    'ios', 'android', 'flutter', 'xamarin', 'ionic',
    # Testing
    'jest', 'mocha', 'selenium', 'cypress', 'junit', 'pytest', 'unit testing',
    'integration testing', 'test automation',
    # Tools & methodologies
    'git', 'scrum', 'kanban', 'jira', 'confluence', 'json', 'xml', 'oauth', 'jwt',
    'websocket', 'grpc',
    # Design
    'figma', 'sketch', 'adobe xd', 'photoshop', 'illustrator', 'wireframing', 'prototyping',
]

SOFT_SKILLS = [
    'leadership', 'communication', 'teamwork', 'critical thinking', 'time management',
    'adaptability', 'creativity', 'collaboration', 'attention to detail', 'negotiation',
    'conflict resolution', 'decision making', 'mentoring', 'project management',
    'strategic planning',
]

# Variants too ambiguous to search for in free text ("go to market", "ts")
AMBIGUOUS_TERMS = {'go', 'py', 'ts', 'tf', 'dl', 'ml', 'ai', 'rest', 'node', 'elastic',
                   'dynamo', 'kube', 'torch', 'scikit', 'mongo', 'hcl', 'drf', 'spring'}

EXPERIENCE_PATTERNS = [
    re.compile(r'(\d{1,2})\+?\s*years?\s+(?:of\s+)?(?:professional\s+|industry\s+|work\s+)?experience', re.IGNORECASE),
    re.compile(r'experience\s*:?\s*(\d{1,2})\+?\s*years?', re.IGNORECASE),
    re.compile(r'(\d{1,2})\+?\s*yrs?\.?\s+(?:of\s+)?experience', re.IGNORECASE),
]

CERTIFICATION_PATTERNS = [
    re.compile(r'\b(?:aws|microsoft|google|oracle|cisco)\s+certified(?:\s+[a-z][\w-]*){0,4}', re.IGNORECASE),
    re.compile(r'\bcertified\s+[a-z][\w-]*(?:\s+[a-z][\w-]*){0,3}', re.IGNORECASE),
    re.compile(r'\b(?:pmp|cissp|cka|ckad|csm|psm|scrum master)\b', re.IGNORECASE),
]

MAX_EXPERIENCE_YEARS = 50


def _term_pattern(term: str) -> re.Pattern:
    # Word boundaries that respect symbols inside skills (c++, node.js, .net)
    return re.compile(r'(?<![\w+#.])' + re.escape(term) + r'(?![\w+#])', re.IGNORECASE)


def _build_vocabulary() -> List[str]:
    terms = set(TECHNICAL_SKILLS) | set(SOFT_SKILLS)
    for canonical, variants in SKILL_SYNONYMS.items():
        terms.add(canonical)
        terms.update(variants)
    terms -= AMBIGUOUS_TERMS
    # Longest first so "react native" is found before "react"
    return sorted(terms, key=lambda t: (-len(t), t))


_VOCABULARY = [(term, _term_pattern(term)) for term in _build_vocabulary()]


def extract_skills(text: str) -> List[str]:
    """Normalized skills mentioned in text, sorted"""
    found = set()
    for term, pattern in _VOCABULARY:
        if pattern.search(text):
            token = normalize(term)
            if token:
                found.add(token)
    return sorted(found)


def extract_experience_years(text: str) -> Optional[int]:
    """Largest 'N years of experience' claim, or None"""
    years = []
    for pattern in EXPERIENCE_PATTERNS:
        for match in pattern.finditer(text):
            value = int(match.group(1))
            if value <= MAX_EXPERIENCE_YEARS:
                years.append(value)
    return max(years) if years else None


def extract_education(text: str) -> List[str]:
    """Degree mentions in order of appearance, deduplicated"""
    mentions = []
    for _, pattern in EDUCATION_PATTERNS:
        for match in pattern.finditer(text):
            mentions.append((match.start(), match.group(0).strip()))
    seen = set()
    degrees = []
    for _, mention in sorted(mentions):
        key = mention.lower()
        if key not in seen:
            seen.add(key)
            degrees.append(mention)
    return degrees


def extract_certifications(text: str) -> List[str]:
    certifications = []
    for pattern in CERTIFICATION_PATTERNS:
        for match in pattern.finditer(text):
            cert = ' '.join(match.group(0).split())
            # "Certified Solutions Architect" inside "AWS Certified Solutions Architect"
            if not any(cert.lower() in found.lower() for found in certifications):
                certifications.append(cert)
    return certifications


def analyze_resume(text: str) -> ResumeAnalysis:
    """Comprehensive resume analysis"""
    text = text or ""
    return ResumeAnalysis(
        skills=extract_skills(text),
        experience_years=extract_experience_years(text),
        education=extract_education(text),
        certifications=extract_certifications(text),
    )


def fill_profile(candidate: CandidateProfile) -> CandidateProfile:
    """
    Copy of the profile with skills, experience and education recovered from
    its resume text. Fields the profile already has are kept.
    """
    if not candidate.resume_text.strip():
        return candidate

    analysis = analyze_resume(candidate.resume_text)
    update = {}
    if not candidate.skills and analysis.skills:
        update['skills'] = analysis.skills
    if not candidate.has_experience_signal and analysis.experience_years is not None:
        update['experience_years'] = float(analysis.experience_years)
    if not candidate.education and analysis.education:
        update['education'] = analysis.education

    if update:
        logger.debug(
            f"Filled profile {candidate.candidate_id} from resume text: {', '.join(sorted(update))}",
            extra={"candidate_id": candidate.candidate_id}
        )
    return candidate.model_copy(update=update)
