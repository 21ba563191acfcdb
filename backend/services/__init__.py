"""
Initialize services package

Available services:
- CandidateRanker: ranks every applicant of a job
- SemanticScorer + skill/experience/education scorers: the four match dimensions
- Similarity providers: token overlap (default), TF-IDF, sentence-transformers
- Resume analyzer: fills unparsed profiles from raw resume text
"""
