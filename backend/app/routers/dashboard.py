from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import catalog
from ..db import get_db
from ..models import StudentProfile
from .auth import get_current_profile
from .quiz import HistoryItem, history_item, recent_results
from .subjects import SubjectOut

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class DashboardOut(BaseModel):
	first_name: str
	onboarded: bool
	# Where the client should send the student next, if anywhere
	next_step: Optional[str] = None
	subjects: List[SubjectOut]
	recent_results: List[HistoryItem]
	average_percentage: Optional[int] = None


@router.get("", response_model=DashboardOut)
async def get_dashboard(profile: StudentProfile = Depends(get_current_profile), db: Session = Depends(get_db)):
	results = recent_results(db, profile.email, limit=5)
	items = [history_item(r) for r in results]
	average = round(sum(i.percentage for i in items) / len(items)) if items else None
	subjects = [
		SubjectOut(name=s.name, slug=s.slug, description=s.description)
		for s in catalog.subjects_for_student(profile.school_board, profile.grade)
	]
	onboarded = bool(profile.mbti_type)
	return DashboardOut(
		first_name=(profile.name.split() or [profile.name])[0],
		onboarded=onboarded,
		next_step=None if onboarded else "/personality/attempts",
		subjects=subjects,
		recent_results=items,
		average_percentage=average,
	)
