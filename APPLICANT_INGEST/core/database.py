import logging
import time
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, declarative_base
from core.config import DATABASE_URL, DB_TIMEOUT_SECONDS, DB_CONNECT_MAX_RETRIES

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        # busy timeout bounds how long a writer waits on a locked database
        return {"check_same_thread": False, "timeout": DB_TIMEOUT_SECONDS}
    if url.startswith("postgresql"):
        return {
            "connect_timeout": DB_TIMEOUT_SECONDS,
            "options": f"-c statement_timeout={DB_TIMEOUT_SECONDS * 1000}",
        }
    return {}


def build_engine(url: str = DATABASE_URL, **kwargs):
    if not url.startswith("sqlite"):
        kwargs.setdefault("pool_timeout", DB_TIMEOUT_SECONDS)
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, connect_args=_connect_args(url), **kwargs)


engine = build_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def wait_for_database(bind=engine, max_retries: int = DB_CONNECT_MAX_RETRIES, sleep=time.sleep) -> None:
    retries = 0
    while True:
        try:
            with bind.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Connected to database")
            return
        except OperationalError as e:
            retries += 1
            logger.error(f"Database connection attempt {retries} failed: {e}")
            if retries >= max_retries:
                raise RuntimeError(f"Could not connect to database after {retries} attempts") from e
            sleep(min(2 ** retries, 10))
