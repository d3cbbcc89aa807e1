import logging

from sqlalchemy import inspect

from hobbi.core.config import settings
from hobbi.db.base import Base
from hobbi.db.session import SessionLocal, engine
from hobbi.modules.hobby_tags.services.hobby_tag import seed_hobby_tags

logger = logging.getLogger(__name__)


def create_all_tables(bind=None) -> None:
    bind = bind or engine
    existing_tables = inspect(bind).get_table_names()

    Base.metadata.create_all(bind=bind)

    new_tables = set(inspect(bind).get_table_names()) - set(existing_tables)
    if new_tables:
        logger.info(f"Created new tables: {new_tables}")


def init_db() -> None:
    """Create missing tables and seed the default hobby tags"""
    create_all_tables()
    db = SessionLocal()
    try:
        seed_hobby_tags(db, settings.DEFAULT_HOBBY_TAGS)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    logger.info("Creating database tables")
    init_db()
    logger.info("Database tables created")
