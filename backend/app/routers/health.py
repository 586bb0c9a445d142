from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..db import get_db
from ..settings import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
	db.execute(text("SELECT 1"))
	return {"status": "ok", "ai_configured": bool(settings.gemini_api_key)}
