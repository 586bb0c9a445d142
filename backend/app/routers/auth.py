from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import uuid

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm, OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, Field

from ..settings import settings
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import AuthUser, AuthSession, StudentProfile
from .. import catalog

router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)
logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")

MIN_PASSWORD_LENGTH = 6
MIN_AGE, MAX_AGE = 10, 20


class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"


class User(BaseModel):
	email: str
	session_id: Optional[str] = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(plain_password, hashed_password)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
	user_row = db.get(AuthUser, email.strip().lower())
	if user_row and verify_password(password, user_row.password_hash):
		return User(email=user_row.email)
	return None


def _resolve_expiry(expires_delta: Optional[timedelta]) -> datetime:
	delta = expires_delta
	if delta is None:
		minutes = settings.access_token_expire_minutes
		delta = timedelta(minutes=minutes) if minutes > 0 else timedelta(days=30)
	return datetime.now(timezone.utc) + delta


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
	to_encode = data.copy()
	to_encode.update({"exp": _resolve_expiry(expires_delta)})
	return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@router.post("/token", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
	user = authenticate_user(db, form_data.username, form_data.password)
	if not user:
		raise HTTPException(status_code=401, detail="Incorrect email or password")
	session_id = uuid.uuid4().hex
	access_token = create_access_token({"sub": user.email, "jti": session_id})
	db.add(AuthSession(session_id=session_id, email=user.email))
	db.commit()
	logger.info("session %s opened for %s", session_id, user.email)
	return Token(access_token=access_token)


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
	credentials_exception = HTTPException(status_code=401, detail="Could not validate credentials")
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
		email: str | None = payload.get("sub")
		jti: str | None = payload.get("jti")
		if email is None or jti is None:
			raise credentials_exception
	except JWTError:
		raise credentials_exception
	# Revoked sessions (logout, cleanup) no longer authenticate
	row = db.get(AuthSession, jti)
	if not row or row.email != email:
		raise credentials_exception
	row.last_activity_at = datetime.utcnow()
	db.add(row)
	db.commit()
	return User(email=email, session_id=jti)


def get_current_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> StudentProfile:
	profile = db.get(StudentProfile, user.email)
	if profile is None:
		raise HTTPException(status_code=404, detail="student profile not found")
	return profile


def consume_ai_request(db: Session, email: str) -> None:
	"""Count one AI call against the user's budget; 429 once it is spent.

	Call it only once the request is known to reach the model.
	"""
	row = db.get(AuthUser, email)
	if row is not None:
		if row.requests_used >= row.requests_limit:
			raise HTTPException(status_code=429, detail="request limit reached")
		row.requests_used += 1
		db.add(row)
		db.commit()


@router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_user)):
	return user


@router.post("/logout", status_code=204)
async def logout(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = db.get(AuthSession, user.session_id)
	if row is not None:
		db.delete(row)
		db.commit()


class RegisterRequest(BaseModel):
	email: str
	password: str
	name: str = Field(min_length=2)
	age: int
	school_name: str = Field(min_length=3)
	school_board: str
	grade: str


@router.post("/register", status_code=201)
async def register(req: RegisterRequest, db: Session = Depends(get_db)):
	email = (req.email or "").strip().lower()
	if "@" not in email or len(email) > 256:
		raise HTTPException(status_code=400, detail="a valid email is required")
	if len(req.password or "") < MIN_PASSWORD_LENGTH:
		raise HTTPException(status_code=400, detail=f"password must be at least {MIN_PASSWORD_LENGTH} characters")
	if not MIN_AGE <= req.age <= MAX_AGE:
		raise HTTPException(status_code=400, detail=f"age must be between {MIN_AGE} and {MAX_AGE}")
	if not catalog.is_valid_board(req.school_board):
		raise HTTPException(status_code=400, detail=f"school_board must be one of {list(catalog.SCHOOL_BOARDS)}")
	if not catalog.is_valid_grade(req.grade):
		raise HTTPException(status_code=400, detail=f"grade must be one of {list(catalog.GRADES)}")
	if db.get(AuthUser, email) is not None:
		raise HTTPException(status_code=409, detail="email already registered")
	db.add(AuthUser(
		email=email,
		password_hash=pwd_context.hash(req.password),
		requests_limit=settings.default_requests_limit,
	))
	db.flush()
	db.add(StudentProfile(
		email=email,
		name=req.name.strip(),
		age=req.age,
		school_name=req.school_name.strip(),
		school_board=req.school_board,
		grade=str(int(req.grade)),
	))
	db.commit()
	logger.info("registered %s", email)
	return {"ok": True}
