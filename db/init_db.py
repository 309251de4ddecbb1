"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import ConnectionPool
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Subscriptions: one row per paid service a user is subscribed to.
-- start_date / end_date always hold the first day of a month.
CREATE TABLE IF NOT EXISTS subscriptions (
    id              SERIAL PRIMARY KEY,
    service_name    TEXT NOT NULL CHECK (service_name <> ''),
    price           INTEGER NOT NULL CHECK (price > 0),
    user_id         UUID NOT NULL,
    start_date      DATE NOT NULL,
    end_date        DATE
);

-- Indexes for the total filters
CREATE INDEX IF NOT EXISTS idx_subscriptions_user ON subscriptions(user_id);
CREATE INDEX IF NOT EXISTS idx_subscriptions_service ON subscriptions(service_name);
"""


def create_tables(db: ConnectionPool) -> None:
    """
    Execute the schema SQL.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    with db.connection() as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
            conn.commit()
            logger.info("Database schema initialized successfully.")
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to initialize schema: {e}")
            raise


if __name__ == "__main__":
    from config import DATABASE_URL

    pool = ConnectionPool(DATABASE_URL)
    pool.open()
    try:
        create_tables(pool)
    finally:
        pool.close()
    print("Database schema created successfully.")
