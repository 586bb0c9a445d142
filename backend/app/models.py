from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey
from .db import Base


class AuthUser(Base):
	__tablename__ = "auth_users"
	# Email doubles as the login name
	email = Column(String(256), primary_key=True, index=True)
	password_hash = Column(String(256), nullable=False)
	requests_used = Column(Integer, default=0, nullable=False)
	requests_limit = Column(Integer, default=1000, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class AuthSession(Base):
	__tablename__ = "auth_sessions"
	# JWT "jti"
	session_id = Column(String(64), primary_key=True)
	email = Column(String(256), ForeignKey("auth_users.email"), nullable=False, index=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	last_activity_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class StudentProfile(Base):
	__tablename__ = "student_profiles"
	email = Column(String(256), ForeignKey("auth_users.email"), primary_key=True)
	name = Column(String(128), nullable=False)
	age = Column(Integer, nullable=False)
	school_name = Column(String(256), nullable=False)
	school_board = Column(String(32), nullable=False)
	grade = Column(String(8), nullable=False)
	# Set once the personality quiz is finished
	mbti_type = Column(String(4), nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class QuizResult(Base):
	__tablename__ = "quiz_results"
	id = Column(Integer, primary_key=True, autoincrement=True)
	email = Column(String(256), ForeignKey("auth_users.email"), nullable=False, index=True)
	topic = Column(String(256), nullable=False)
	score = Column(Integer, nullable=False)
	total = Column(Integer, nullable=False)
	time_spent_seconds = Column(Integer, default=0, nullable=False)
	answers_json = Column(Text, nullable=True)  # JSON list of per-question records
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
