"""
Match Routes

POST /matches - Score the job catalog against a candidate's skills,
                experience, location and industry
"""

from typing import List

from fastapi import APIRouter

from careerconnect.schemas.schemas import MatchRequest, MatchResult
from careerconnect.services.matching_service import get_top_matches

router = APIRouter(prefix="/matches", tags=["Matches"])


@router.post("", response_model=List[MatchResult])
def match_jobs(request: MatchRequest):
    """
    Get the best-fitting catalog jobs.

    Each matching skill, the experience range, the location and the
    industry are worth 20 points each; scores are capped at 100.
    """
    candidate = request.model_dump(exclude={"top_n"})
    return [MatchResult.model_validate(job) for job in get_top_matches(candidate, top_n=request.top_n)]
