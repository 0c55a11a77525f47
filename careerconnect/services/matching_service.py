"""
Job Matching Service

PURPOSE:
Score how well a candidate fits a job with a simple weighted sum, then
return the best matches from a job catalog.

HOW IT WORKS (each criterion is worth 20 points, total capped at 100):
1. Skills     - +20 for every candidate skill the job lists (case-insensitive)
2. Experience - +20 if the candidate's years value appears in the job's range text
3. Location   - +20 for a case-insensitive exact location match
4. Industry   - +20 for a case-insensitive exact industry match

This is a keyword heuristic over a small in-memory catalog, not a search
or ranking engine.
"""

from typing import Any, Dict, List, Optional, Sequence, Union

POINTS_PER_MATCH = 20
MAX_SCORE = 100

# Built-in catalog used when no job list is supplied
JOB_CATALOG: List[Dict[str, Any]] = [
    {
        "title": "Frontend Developer",
        "skills": ["React", "HTML", "CSS", "JavaScript"],
        "experience": "1-3 years",
        "location": "Remote",
        "industry": "Software Development",
        "apply_link": "https://example.com/frontend",
    },
    {
        "title": "Data Analyst",
        "skills": ["Python", "SQL", "Tableau"],
        "experience": "2-5 years",
        "location": "On-site",
        "industry": "Finance",
        "apply_link": "https://example.com/data-analyst",
    },
]


def _normalize_skills(skills: Union[str, Sequence[str], None]) -> List[str]:
    """Accept "React, CSS" or ["React", "CSS"]; return lowercase, non-empty entries."""
    if not skills:
        return []
    if isinstance(skills, str):
        skills = skills.split(",")
    return [s.strip().lower() for s in skills if s and s.strip()]


def _same_text(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a) and bool(b) and a.strip().lower() == b.strip().lower()


def calculate_match_score(candidate: Dict[str, Any], job: Dict[str, Any]) -> int:
    """
    Score one candidate against one job.

    candidate keys: skills, years, location, industry (all optional)
    job keys: skills, experience, location, industry
    """
    score = 0

    # Skills
    candidate_skills = _normalize_skills(candidate.get("skills"))
    job_skills = set(_normalize_skills(job.get("skills")))
    score += sum(POINTS_PER_MATCH for skill in candidate_skills if skill in job_skills)

    # Experience
    years = candidate.get("years")
    if years and str(years) in job.get("experience", ""):
        score += POINTS_PER_MATCH

    # Location
    if _same_text(candidate.get("location"), job.get("location")):
        score += POINTS_PER_MATCH

    # Industry
    if _same_text(candidate.get("industry"), job.get("industry")):
        score += POINTS_PER_MATCH

    return min(score, MAX_SCORE)


def get_top_matches(
    candidate: Dict[str, Any],
    top_n: int = 3,
    jobs: Optional[List[Dict[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """Score every job in the catalog and return the top_n, best first."""
    catalog = JOB_CATALOG if jobs is None else jobs
    scored = [{**job, "score": calculate_match_score(candidate, job)} for job in catalog]
    # Equal scores keep catalog order
    return sorted(scored, key=lambda job: job["score"], reverse=True)[:top_n]
