# survey_api/db/session.py
import logging
import re

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from survey_api.core.config import settings

logger = logging.getLogger(__name__)


def _mask(u: str) -> str:
    """Enmascara la contraseña en la URL para logs seguros"""
    return re.sub(r"://([^:]+):([^@]+)@", r"://\1:***@", u)


def make_engine(db_url: str) -> Engine:
    # SQLite (tests / desarrollo local): una sola conexión compartida
    if db_url.startswith("sqlite"):
        return create_engine(
            db_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        db_url,
        pool_size=5,              # 5 conexiones concurrentes
        max_overflow=10,          # Hasta 15 total en picos
        pool_timeout=30,          # 30s para obtener conexión
        pool_recycle=1800,        # Recicla cada 30 min
        pool_pre_ping=True,       # Verifica que la conexión esté viva
        echo=False,
    )


db_url = settings.db_url
logger.info("[DB] Using: %s", _mask(db_url))

engine = make_engine(db_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency para FastAPI"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> bool:
    """Verifica que la conexión funcione"""
    try:
        with engine.connect() as conn:
            row = conn.execute(text("SELECT 1")).fetchone()
            return bool(row and row[0] == 1)
    except Exception:
        logger.exception("[DB] Connection failed")
        return False
