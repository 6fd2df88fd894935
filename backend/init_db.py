"""Initialize the database schema and seed the configured super admin."""

from pathlib import Path

from loguru import logger
from sqlalchemy.engine import make_url

from models.config import settings
from repositories import db_models  # noqa: F401 - registers the tables
from repositories.database import Base, SessionLocal, engine
from services.admin_service import AdminService


def ensure_data_dir() -> None:
    """Create the directory holding a file-based SQLite database."""
    url = make_url(settings.DATABASE_URL)
    if url.drivername.startswith("sqlite") and url.database not in (None, "", ":memory:"):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def init_db() -> None:
    """Create tables and make sure the super admin row exists."""
    ensure_data_dir()
    Base.metadata.create_all(bind=engine)
    logger.info("[OK] Database tables created")

    db = SessionLocal()
    try:
        user = AdminService.sync_super_admin(db)
        logger.info(f"[OK] Super admin ready: {user.email}")
        logger.info("[OK] Database initialization complete!")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
