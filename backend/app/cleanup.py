from __future__ import annotations
import logging
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import AuthSession
from .settings import settings

logger = logging.getLogger(__name__)


def purge_stale_sessions(db: Session, days: Optional[int] = None, *, now: Optional[datetime] = None) -> int:
	"""Delete login sessions idle for longer than ``days``; returns how many went."""
	retention = settings.session_retention_days if days is None else days
	threshold = (now or datetime.utcnow()) - timedelta(days=retention)
	res = db.execute(delete(AuthSession).where(AuthSession.last_activity_at < threshold))
	db.commit()
	removed = res.rowcount or 0
	if removed:
		logger.info("purged %d sessions idle since before %s", removed, threshold.isoformat())
	return removed
