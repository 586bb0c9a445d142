from __future__ import annotations
import logging
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..db import get_db
from ..gemini_client import GeminiClient, get_gemini_client
from ..models import QuizResult, StudentProfile
from ..prompts import LLMOutputError, RecommendedTopicsInput, recommended_topics_prompt
from .auth import get_current_profile, consume_ai_request
from .quiz import percentage, recent_results
from .subjects import prompt_profile

router = APIRouter(prefix="/recommendations", tags=["recommendations"])

logger = logging.getLogger(__name__)

OFFLINE_TOPICS = ["Algebra", "Physics", "Biology"]
OFFLINE_REASONING = "Based on your learning profile, these topics would help strengthen your foundation. (Offline mode)"


class RecommendationsOut(BaseModel):
	recommended_topics: List[str]
	reasoning: str
	generated: bool


def learning_data_for(results: List[QuizResult]) -> str:
	if not results:
		return "No quizzes taken yet."
	lines = [f"{r.topic}: {r.score}/{r.total} ({percentage(r.score, r.total)}%)" for r in results]
	return "Recent quiz results: " + "; ".join(lines)


@router.get("", response_model=RecommendationsOut)
async def get_recommendations(
	profile: StudentProfile = Depends(get_current_profile),
	db: Session = Depends(get_db),
	client: GeminiClient = Depends(get_gemini_client),
):
	data = RecommendedTopicsInput(
		student_profile=prompt_profile(profile),
		learning_data=learning_data_for(recent_results(db, profile.email)),
	)
	consume_ai_request(db, profile.email)
	try:
		out = await recommended_topics_prompt.run(client, data)
	except (LLMOutputError, RuntimeError):
		logger.exception("recommendations failed for %s", profile.email)
		return RecommendationsOut(recommended_topics=OFFLINE_TOPICS, reasoning=OFFLINE_REASONING, generated=False)
	topics = [t.strip() for t in out.recommended_topics if t and t.strip()]
	if not topics:
		return RecommendationsOut(recommended_topics=OFFLINE_TOPICS, reasoning=OFFLINE_REASONING, generated=False)
	return RecommendationsOut(recommended_topics=topics, reasoning=out.reasoning, generated=True)
