from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import catalog
from ..db import get_db
from ..models import StudentProfile
from ..personality import lookup, learning_style_for, UnknownTypeCodeError
from .auth import get_current_profile, MIN_AGE, MAX_AGE

router = APIRouter(prefix="/profile", tags=["profile"])


class TypeProfileOut(BaseModel):
	code: str
	name: str
	description: str


class ProfileOut(BaseModel):
	email: str
	name: str
	age: int
	school_name: str
	school_board: str
	grade: str
	mbti_type: Optional[str] = None
	personality: Optional[TypeProfileOut] = None
	learning_style: str
	onboarded: bool


class ProfileUpdate(BaseModel):
	name: Optional[str] = None
	age: Optional[int] = None
	school_name: Optional[str] = None
	school_board: Optional[str] = None
	grade: Optional[str] = None


def type_profile_out(code: str) -> TypeProfileOut:
	info = lookup(code)
	return TypeProfileOut(code=code, name=info.name, description=info.description)


def profile_out(profile: StudentProfile) -> ProfileOut:
	personality = None
	if profile.mbti_type:
		try:
			personality = type_profile_out(profile.mbti_type)
		except UnknownTypeCodeError:
			# Stored code predates the current table; surface it as a server fault
			raise HTTPException(status_code=500, detail=f"stored personality type {profile.mbti_type!r} is unknown")
	return ProfileOut(
		email=profile.email,
		name=profile.name,
		age=profile.age,
		school_name=profile.school_name,
		school_board=profile.school_board,
		grade=profile.grade,
		mbti_type=profile.mbti_type,
		personality=personality,
		learning_style=learning_style_for(profile.mbti_type),
		onboarded=bool(profile.mbti_type),
	)


@router.get("", response_model=ProfileOut)
async def get_profile(profile: StudentProfile = Depends(get_current_profile)):
	return profile_out(profile)


@router.patch("", response_model=ProfileOut)
async def update_profile(req: ProfileUpdate, profile: StudentProfile = Depends(get_current_profile), db: Session = Depends(get_db)):
	if req.name is not None:
		if len(req.name.strip()) < 2:
			raise HTTPException(status_code=400, detail="name must be at least 2 characters")
		profile.name = req.name.strip()
	if req.age is not None:
		if not MIN_AGE <= req.age <= MAX_AGE:
			raise HTTPException(status_code=400, detail=f"age must be between {MIN_AGE} and {MAX_AGE}")
		profile.age = req.age
	if req.school_name is not None:
		if len(req.school_name.strip()) < 3:
			raise HTTPException(status_code=400, detail="school_name must be at least 3 characters")
		profile.school_name = req.school_name.strip()
	if req.school_board is not None:
		if not catalog.is_valid_board(req.school_board):
			raise HTTPException(status_code=400, detail=f"school_board must be one of {list(catalog.SCHOOL_BOARDS)}")
		profile.school_board = req.school_board
	if req.grade is not None:
		if not catalog.is_valid_grade(req.grade):
			raise HTTPException(status_code=400, detail=f"grade must be one of {list(catalog.GRADES)}")
		profile.grade = str(int(req.grade))
	db.add(profile)
	db.commit()
	db.refresh(profile)
	return profile_out(profile)
