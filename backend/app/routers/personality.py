from __future__ import annotations
import logging
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import StudentProfile
from .. import personality
from ..personality import QUESTION_BANK, QuizState, InvalidIndexError, IncompleteAnswersError, UnknownTypeCodeError
from .auth import User, get_current_user, get_current_profile
from .profile import TypeProfileOut, type_profile_out

router = APIRouter(prefix="/personality", tags=["personality"])

logger = logging.getLogger(__name__)


class QuestionOut(BaseModel):
	index: int
	dimension: str
	prompt: str
	option_a: str
	option_b: str


class AnswerRequest(BaseModel):
	choice: str
	# Defaults to the attempt's current question
	index: Optional[int] = None


class AttemptOut(BaseModel):
	attempt_id: str
	cursor: int
	total: int
	answered: int
	complete: bool
	answers: Dict[int, str]
	question: QuestionOut


class ResultOut(BaseModel):
	mbti_type: str
	personality: TypeProfileOut
	learning_style: str


class _Attempt:
	def __init__(self, attempt_id: str, email: str) -> None:
		self.attempt_id = attempt_id
		self.email = email
		self.state = QuizState.start(QUESTION_BANK)
		self.created_at = datetime.utcnow()


# One entry per in-progress attempt; never shared between users
_attempts: Dict[str, _Attempt] = {}


def evict_stale_attempts(max_age: timedelta, now: Optional[datetime] = None) -> int:
	"""Drop attempts started more than max_age ago; returns how many were dropped."""
	cutoff = (now or datetime.utcnow()) - max_age
	stale = [k for k, a in _attempts.items() if a.created_at < cutoff]
	for k in stale:
		_attempts.pop(k, None)
	return len(stale)


def _question_out(index: int) -> QuestionOut:
	q = QUESTION_BANK[index]
	return QuestionOut(index=index, dimension=q.dimension.value, prompt=q.prompt, option_a=q.option_a, option_b=q.option_b)


def _attempt_out(attempt: _Attempt) -> AttemptOut:
	state = attempt.state
	return AttemptOut(
		attempt_id=attempt.attempt_id,
		cursor=state.cursor,
		total=state.answers.size,
		answered=len(state.answers),
		complete=state.is_complete,
		answers=state.answers.as_dict(),
		question=_question_out(state.cursor),
	)


def _get_attempt(attempt_id: str, user: User) -> _Attempt:
	attempt = _attempts.get(attempt_id)
	if attempt is None or attempt.email != user.email:
		raise HTTPException(status_code=404, detail="attempt not found")
	return attempt


@router.get("/questions", response_model=List[QuestionOut])
async def list_questions():
	return [_question_out(i) for i in range(len(QUESTION_BANK))]


@router.get("/types", response_model=List[TypeProfileOut])
async def list_types():
	return [type_profile_out(code) for code in personality.all_type_codes()]


@router.get("/types/{code}", response_model=TypeProfileOut)
async def get_type(code: str):
	try:
		return type_profile_out(code.upper())
	except UnknownTypeCodeError as e:
		raise HTTPException(status_code=404, detail=str(e))


@router.post("/attempts", response_model=AttemptOut, status_code=201)
async def start_attempt(user: User = Depends(get_current_user)):
	# Starting over replaces any attempt the user left open
	for k in [k for k, a in _attempts.items() if a.email == user.email]:
		_attempts.pop(k, None)
	attempt = _Attempt(uuid.uuid4().hex, user.email)
	_attempts[attempt.attempt_id] = attempt
	return _attempt_out(attempt)


@router.get("/attempts/{attempt_id}", response_model=AttemptOut)
async def get_attempt(attempt_id: str, user: User = Depends(get_current_user)):
	return _attempt_out(_get_attempt(attempt_id, user))


@router.post("/attempts/{attempt_id}/answer", response_model=AttemptOut)
async def answer_question(attempt_id: str, req: AnswerRequest, user: User = Depends(get_current_user)):
	attempt = _get_attempt(attempt_id, user)
	try:
		attempt.state = personality.answer(attempt.state, req.choice, req.index)
	except (InvalidIndexError, ValueError) as e:
		raise HTTPException(status_code=400, detail=str(e))
	return _attempt_out(attempt)


@router.post("/attempts/{attempt_id}/finish", response_model=ResultOut)
async def finish_attempt(
	attempt_id: str,
	user: User = Depends(get_current_user),
	profile: StudentProfile = Depends(get_current_profile),
	db: Session = Depends(get_db),
):
	attempt = _get_attempt(attempt_id, user)
	try:
		code = personality.classify(QUESTION_BANK, attempt.state.answers)
	except IncompleteAnswersError as e:
		raise HTTPException(status_code=409, detail=str(e))
	result = ResultOut(mbti_type=code, personality=type_profile_out(code), learning_style=personality.learning_style_for(code))
	profile.mbti_type = code
	db.add(profile)
	db.commit()
	_attempts.pop(attempt_id, None)
	logger.info("personality attempt %s finished for %s: %s", attempt_id, user.email, code)
	return result
