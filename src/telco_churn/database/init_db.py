
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from telco_churn.utils.config import settings
from telco_churn.database.models import metadata, telco_churn
from telco_churn.analysis.features import ChurnConfig
from telco_churn.utils.logger import setup_logger

logger = setup_logger("DB_Init")

def get_engine(url: Optional[str] = None) -> Engine:
    """Creates an engine for the configured database (or an explicit URL)."""
    return create_engine(url or settings.DATABASE_URL)

def init_db(engine: Optional[Engine] = None, reset: bool = False) -> Engine:
    """
    Creates the telco_churn table if it is missing.
    With reset=True the dashboard view and the table are dropped first.
    """
    engine = engine or get_engine()
    logger.info(f"Initializing database at: {engine.url.render_as_string(hide_password=True)}")

    try:
        with engine.begin() as conn:
            if reset:
                logger.info("Dropping existing view and table...")
                conn.execute(text(f"DROP VIEW IF EXISTS {ChurnConfig.VIEW_NAME}"))
                telco_churn.drop(conn, checkfirst=True)

            logger.info("Creating tables...")
            metadata.create_all(conn)
        logger.info("Tables created successfully.")
        return engine
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

if __name__ == "__main__":
    init_db()
