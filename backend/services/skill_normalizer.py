"""
Skill Normalization
Canonicalizes free-text skill tokens so that "JS", "javascript" and
"JavaScript (advanced)" all compare equal.

normalize() is pure, deterministic and idempotent:
    normalize(normalize(s)) == normalize(s)
Unknown tokens pass through lowercased and trimmed.
"""
import re
import unicodedata
from typing import Dict, Iterable, List, Set

# Canonical token -> surface variants seen in job posts and resumes
SKILL_SYNONYMS: Dict[str, List[str]] = {
    # Languages
    'javascript': ['js', 'java script', 'ecmascript', 'es6', 'vanilla js'],
    'typescript': ['ts'],
    'python': ['python3', 'python 3', 'py'],
    'go': ['golang'],
    'c++': ['cpp', 'cplusplus', 'c plus plus'],
    'c#': ['csharp', 'c sharp'],
    'ruby': ['ruby lang'],
    'shell': ['shell scripting', 'bash scripting'],

    # Web
    'node.js': ['node', 'nodejs', 'node js'],
    'react': ['reactjs', 'react.js', 'react js'],
    'react native': ['react-native', 'reactnative'],
    'vue': ['vuejs', 'vue.js', 'vue js'],
    'angular': ['angularjs', 'angular.js', 'angular js'],
    'next.js': ['nextjs', 'next js'],
    'nuxt.js': ['nuxtjs', 'nuxt', 'nuxt js'],
    'express': ['expressjs', 'express.js', 'express js'],
    'django': ['django rest framework', 'drf'],
    'spring': ['spring boot', 'springboot', 'spring framework'],
    '.net': ['dotnet', 'dot net', '.net core', 'asp.net', 'asp.net core'],
    'html': ['html5'],
    'css': ['css3'],
    'tailwind': ['tailwindcss', 'tailwind css'],
    'rest api': ['rest', 'restful', 'restful api', 'restful apis', 'rest apis'],
    'graphql': ['graph ql'],

    # Data stores
    'postgresql': ['postgres', 'psql', 'postgre sql', 'postgre'],
    'mongodb': ['mongo', 'mongo db'],
    'mysql': ['my sql'],
    'sql': ['structured query language'],
    'elasticsearch': ['elastic search', 'elastic'],
    'dynamodb': ['dynamo db', 'dynamo'],

    # Cloud & DevOps
    'aws': ['amazon web services'],
    'gcp': ['google cloud', 'google cloud platform'],
    'azure': ['microsoft azure'],
    'kubernetes': ['k8s', 'kube'],
    'ci/cd': ['cicd', 'ci cd', 'ci-cd', 'continuous integration'],
    'terraform': ['hcl'],

    # Data & AI
    'machine learning': ['ml'],
    'deep learning': ['dl'],
    'artificial intelligence': ['ai'],
    'nlp': ['natural language processing'],
    'scikit-learn': ['sklearn', 'scikit learn', 'scikit'],
    'tensorflow': ['tf', 'tensor flow'],
    'pytorch': ['torch', 'py torch'],
    'data analysis': ['data analytics'],

    # Design & process
    'ui/ux': ['ux/ui', 'ui ux', 'ux ui', 'ui-ux'],
    'problem solving': ['problem-solving'],
    'agile': ['agile methodology', 'agile methodologies'],
}

# Leading qualifiers that say how well, not what
_QUALIFIER_PREFIX = re.compile(
    r'^(?:proficient (?:in|with)|proficiency (?:in|with)|experience (?:in|with)|experienced (?:in|with)|'
    r'knowledge of|working knowledge of|familiar(?:ity)? with|expert (?:in|with)|expertise in|'
    r'advanced|intermediate|beginner|basic|strong|solid|hands-on)\s+'
)
# Trailing parenthetical qualifiers: "python (advanced)", "sql (5 years)"
_PARENTHETICAL = re.compile(r'(?<=[^\s(\[])\s*[(\[][^)\]]*[)\]]\s*$')
# Trailing category words, stripped only when the rest is a known skill
_QUALIFIER_SUFFIX = re.compile(r'\s+(?:programming|development|language|framework|skills?)$')
_WHITESPACE = re.compile(r'\s+')

_LEADING_PUNCT = ' \t\n\r,;:!?"\'`*-_/|\\~()[]{}'
_TRAILING_PUNCT = ' \t\n\r,;:!?"\'`*-_/|\\~()[]{}.'

_CANONICAL: Dict[str, str] = {}
for _canonical, _variants in SKILL_SYNONYMS.items():
    _CANONICAL[_canonical] = _canonical
    for _variant in _variants:
        _CANONICAL[_variant] = _canonical

KNOWN_SKILLS: Set[str] = set(SKILL_SYNONYMS)


def _lookup(token: str) -> str:
    """Map a token to its canonical form, trying common spelling variants"""
    for variant in (token, token.replace('-', ' '), token.replace(' ', ''), token.replace('-', '')):
        canonical = _CANONICAL.get(variant)
        if canonical:
            return canonical
    return token


def _step(token: str) -> str:
    token = _WHITESPACE.sub(' ', token).strip()
    token = _PARENTHETICAL.sub('', token)
    token = token.lstrip(_LEADING_PUNCT).rstrip(_TRAILING_PUNCT)

    while True:
        stripped = _QUALIFIER_PREFIX.sub('', token)
        if stripped == token:
            break
        token = stripped

    suffixless = _QUALIFIER_SUFFIX.sub('', token)
    if suffixless != token and _lookup(suffixless) in KNOWN_SKILLS:
        token = suffixless

    return _lookup(token)


def normalize(skill: str) -> str:
    """
    Canonical comparison token for a skill string.

    >>> normalize("  Node ")
    'node.js'
    >>> normalize("Proficient in JS")
    'javascript'
    """
    if not isinstance(skill, str):
        return ''
    token = unicodedata.normalize('NFKC', skill).lower()

    # Iterate to a fixed point so the result is always idempotent
    for _ in range(5):
        nxt = _step(token)
        if nxt == token:
            break
        token = nxt
    return token


def normalize_skills(skills: Iterable[str]) -> Set[str]:
    """Normalize a collection of skills, dropping tokens that end up empty"""
    result = set()
    for skill in skills or []:
        token = normalize(skill)
        if token:
            result.add(token)
    return result
