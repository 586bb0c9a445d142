from __future__ import annotations
import json
import logging
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db
from ..gemini_client import GeminiClient, get_gemini_client
from ..models import QuizResult, StudentProfile
from ..prompts import LLMOutputError, QuizInput, QuizQuestion, quiz_prompt
from ..settings import settings
from .auth import User, get_current_user, get_current_profile, consume_ai_request
from .subjects import prompt_profile

router = APIRouter(prefix="/quiz", tags=["quiz"])

logger = logging.getLogger(__name__)


class GenerateRequest(BaseModel):
	topic: str = Field(min_length=1, max_length=256)
	number_of_questions: Optional[int] = None


class QuestionOut(BaseModel):
	number: int
	question: str
	options: List[str]


class GeneratedQuizOut(BaseModel):
	quiz_id: str
	topic: str
	questions: List[QuestionOut]


class SubmitRequest(BaseModel):
	answers: List[str]
	time_spent_seconds: int = Field(default=0, ge=0)


class AnswerRecord(BaseModel):
	question: str
	user_answer: str
	correct_answer: str
	is_correct: bool


class SubmitResult(BaseModel):
	quiz_id: str
	topic: str
	score: int
	total: int
	percentage: int
	results: List[AnswerRecord]


class HistoryItem(BaseModel):
	id: int
	topic: str
	score: int
	total: int
	percentage: int
	time_spent_seconds: int
	created_at: datetime


class _GeneratedQuiz:
	def __init__(self, quiz_id: str, email: str, topic: str, questions: List[QuizQuestion]) -> None:
		self.quiz_id = quiz_id
		self.email = email
		self.topic = topic
		self.questions = questions
		self.created_at = datetime.utcnow()


# Generated quizzes awaiting submission; answers stay server-side
_quizzes: Dict[str, _GeneratedQuiz] = {}


def evict_stale_quizzes(max_age: timedelta, now: Optional[datetime] = None) -> int:
	cutoff = (now or datetime.utcnow()) - max_age
	stale = [k for k, q in _quizzes.items() if q.created_at < cutoff]
	for k in stale:
		_quizzes.pop(k, None)
	return len(stale)


def percentage(score: int, total: int) -> int:
	if total <= 0:
		return 0
	return round(score * 100 / total)


def score_answers(questions: List[QuizQuestion], answers: List[str]) -> List[AnswerRecord]:
	records: List[AnswerRecord] = []
	for q, given in zip(questions, answers):
		given = (given or "").strip()
		records.append(AnswerRecord(
			question=q.question,
			user_answer=given,
			correct_answer=q.correct_answer,
			is_correct=given == q.correct_answer,
		))
	return records


def _clamp_count(requested: Optional[int]) -> int:
	count = requested or settings.quiz_default_questions
	return max(1, min(count, settings.quiz_max_questions))


@router.post("/generate", response_model=GeneratedQuizOut)
async def generate_quiz(
	req: GenerateRequest,
	profile: StudentProfile = Depends(get_current_profile),
	db: Session = Depends(get_db),
	client: GeminiClient = Depends(get_gemini_client),
):
	topic = req.topic.strip()
	data = QuizInput(student_profile=prompt_profile(profile), topic=topic, number_of_questions=_clamp_count(req.number_of_questions))
	consume_ai_request(db, profile.email)
	try:
		out = await quiz_prompt.run(client, data)
	except LLMOutputError as e:
		logger.warning("quiz for %r rejected: %s", topic, e)
		raise HTTPException(status_code=502, detail="We couldn't generate a quiz for this topic right now.")
	except RuntimeError as e:
		logger.exception("quiz generation failed for %r", topic)
		raise HTTPException(status_code=502, detail=str(e))
	questions = out.questions[: data.number_of_questions]
	if not questions:
		raise HTTPException(status_code=502, detail="We couldn't generate a quiz for this topic right now.")
	quiz = _GeneratedQuiz(uuid.uuid4().hex, profile.email, topic, questions)
	_quizzes[quiz.quiz_id] = quiz
	return GeneratedQuizOut(
		quiz_id=quiz.quiz_id,
		topic=topic,
		questions=[QuestionOut(number=i + 1, question=q.question, options=q.options) for i, q in enumerate(questions)],
	)


@router.post("/{quiz_id}/submit", response_model=SubmitResult)
async def submit_quiz(quiz_id: str, req: SubmitRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	quiz = _quizzes.get(quiz_id)
	if quiz is None or quiz.email != user.email:
		raise HTTPException(status_code=404, detail="quiz not found")
	if len(req.answers) != len(quiz.questions):
		raise HTTPException(status_code=400, detail=f"expected {len(quiz.questions)} answers, got {len(req.answers)}")
	records = score_answers(quiz.questions, req.answers)
	score = sum(1 for r in records if r.is_correct)
	total = len(records)
	db.add(QuizResult(
		email=user.email,
		topic=quiz.topic,
		score=score,
		total=total,
		time_spent_seconds=req.time_spent_seconds,
		answers_json=json.dumps([r.model_dump() for r in records]),
	))
	db.commit()
	_quizzes.pop(quiz_id, None)
	return SubmitResult(quiz_id=quiz_id, topic=quiz.topic, score=score, total=total, percentage=percentage(score, total), results=records)


def recent_results(db: Session, email: str, limit: int = 10) -> List[QuizResult]:
	return (
		db.query(QuizResult)
		.filter(QuizResult.email == email)
		.order_by(QuizResult.created_at.desc(), QuizResult.id.desc())
		.limit(limit)
		.all()
	)


def history_item(r: QuizResult) -> HistoryItem:
	return HistoryItem(
		id=r.id,
		topic=r.topic,
		score=r.score,
		total=r.total,
		percentage=percentage(r.score, r.total),
		time_spent_seconds=r.time_spent_seconds,
		created_at=r.created_at,
	)


@router.get("/history", response_model=List[HistoryItem])
async def history(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	return [history_item(r) for r in recent_results(db, user.email, limit=50)]
