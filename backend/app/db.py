from __future__ import annotations
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, declarative_base
from .settings import settings


DATABASE_URL = settings.database_url or "sqlite:///./app.db"

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args, future=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()


# Columns added after the first release; (table, column, DDL type)
_LATE_COLUMNS = (
	("auth_users", "requests_used", "INTEGER DEFAULT 0 NOT NULL"),
	("auth_users", "requests_limit", "INTEGER DEFAULT 1000 NOT NULL"),
	("student_profiles", "mbti_type", "VARCHAR(4)"),
	("quiz_results", "time_spent_seconds", "INTEGER DEFAULT 0 NOT NULL"),
)


# Best-effort lightweight migrations for development (SQLite-friendly)
def ensure_schema(bind=None) -> None:
	bind = bind or engine
	inspector = inspect(bind)
	tables = set(inspector.get_table_names())
	existing = {t: {c["name"] for c in inspector.get_columns(t)} for t in {t for t, _, _ in _LATE_COLUMNS} & tables}
	missing = [(t, c, ddl) for t, c, ddl in _LATE_COLUMNS if t in existing and c not in existing[t]]
	if not missing:
		return
	with bind.begin() as conn:
		for table, column, ddl in missing:
			conn.exec_driver_sql(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}")
