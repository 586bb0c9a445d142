import asyncio
import logging
from datetime import timedelta

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from .db import Base, engine, SessionLocal, ensure_schema
from .cleanup import purge_stale_sessions
from .settings import settings
from .routers import health
from .routers import auth
from .routers import profile
from .routers import personality
from .routers import subjects
from .routers import recommendations
from .routers import quiz
from .routers import dashboard

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(personality.router)
app.include_router(subjects.router)
app.include_router(recommendations.router)
app.include_router(quiz.router)
app.include_router(dashboard.router)


@app.get("/info")
def root():
	return {"status": "ok", "name": settings.app_name, "gemini_configured": bool(settings.gemini_api_key)}


def _run_cleanup() -> None:
	max_age = timedelta(hours=settings.pending_ttl_hours)
	dropped = personality.evict_stale_attempts(max_age) + quiz.evict_stale_quizzes(max_age)
	if dropped:
		logger.info("dropped %d stale attempts and quizzes", dropped)
	db = SessionLocal()
	try:
		purge_stale_sessions(db)
	except SQLAlchemyError:
		logger.exception("session cleanup failed")
		db.rollback()
	finally:
		db.close()


async def _cleanup_watcher():
	while True:
		await asyncio.sleep(60 * 60)
		_run_cleanup()


@app.on_event("startup")
async def startup_event():
	Base.metadata.create_all(bind=engine)
	ensure_schema()
	_run_cleanup()
	asyncio.create_task(_cleanup_watcher())
