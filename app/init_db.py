from typing import Optional
from app.config import settings
from app.database import Database
from app.utils.logger import get_logger


logger = get_logger(__name__)

def init_db(database_url: Optional[str] = None) -> Database:
    """Create any missing tables. Schema changes on an existing database go through Alembic."""
    url = database_url or settings.DATABASE_URL
    database = Database(url)
    try:
        database.create_all()
        logger.info("Database initialization check complete")
        print("Database initialization check complete")
    except Exception as e:
        logger.error(f"Error during database initialization: {e}")
        print(f"Error during database initialization: {e}")
        database.dispose()
        raise
    return database

if __name__ == "__main__":
    init_db().dispose()
