from __future__ import annotations
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import catalog
from ..db import get_db
from ..gemini_client import GeminiClient, get_gemini_client
from ..models import StudentProfile
from ..personality import learning_style_for
from ..prompts import LLMOutputError, PromptStudentProfile, TopicSummaryInput, topic_summary_prompt
from .auth import get_current_profile, consume_ai_request

router = APIRouter(prefix="/subjects", tags=["subjects"])

logger = logging.getLogger(__name__)

SUMMARY_UNAVAILABLE = "Could not generate summary for this topic."


class SubjectOut(BaseModel):
	name: str
	slug: str
	description: str


class TopicOut(BaseModel):
	title: str
	description: str


class SubjectDetail(SubjectOut):
	topics: List[TopicOut]


class TopicSummaryOut(BaseModel):
	subject: str
	topic: str
	learning_style: str
	summary: str
	generated: bool


def prompt_profile(profile: StudentProfile) -> PromptStudentProfile:
	subjects = catalog.subjects_for_student(profile.school_board, profile.grade)
	return PromptStudentProfile(
		name=profile.name,
		age=profile.age,
		school_name=profile.school_name,
		school_board=profile.school_board,
		grade_class=profile.grade,
		mbti_type=profile.mbti_type,
		subjects=[s.name for s in subjects],
	)


def _subject_out(subject: catalog.Subject) -> SubjectOut:
	return SubjectOut(name=subject.name, slug=subject.slug, description=subject.description)


@router.get("", response_model=List[SubjectOut])
async def list_subjects(profile: StudentProfile = Depends(get_current_profile)):
	return [_subject_out(s) for s in catalog.subjects_for_student(profile.school_board, profile.grade)]


@router.get("/{slug}", response_model=SubjectDetail)
async def get_subject(slug: str, profile: StudentProfile = Depends(get_current_profile)):
	subject = catalog.subject_by_slug(slug)
	if subject is None:
		raise HTTPException(status_code=404, detail="subject not found")
	topics = [TopicOut(title=t.title, description=t.description) for t in catalog.syllabus_for_subject(slug)]
	return SubjectDetail(name=subject.name, slug=subject.slug, description=subject.description, topics=topics)


@router.get("/{slug}/topics/{title}/summary", response_model=TopicSummaryOut)
async def get_topic_summary(
	slug: str,
	title: str,
	profile: StudentProfile = Depends(get_current_profile),
	db: Session = Depends(get_db),
	client: GeminiClient = Depends(get_gemini_client),
):
	subject = catalog.subject_by_slug(slug)
	if subject is None:
		raise HTTPException(status_code=404, detail="subject not found")
	topic = catalog.topic_by_title(slug, title)
	if topic is None:
		raise HTTPException(status_code=404, detail="topic not found")
	learning_style = learning_style_for(profile.mbti_type)
	data = TopicSummaryInput(
		student_profile=prompt_profile(profile),
		topic=topic.title,
		syllabus=topic.description,
		learning_style=learning_style,
	)
	consume_ai_request(db, profile.email)
	try:
		out = await topic_summary_prompt.run(client, data)
		summary, generated = out.summary, True
	except (LLMOutputError, RuntimeError):
		logger.exception("summary generation failed for %s/%s", slug, topic.title)
		summary, generated = SUMMARY_UNAVAILABLE, False
	return TopicSummaryOut(subject=subject.name, topic=topic.title, learning_style=learning_style, summary=summary, generated=generated)
