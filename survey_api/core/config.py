# survey_api/core/config.py
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# .env en la raíz del repo (junto a pyproject.toml)
ENV_FILE = Path(__file__).resolve().parents[2] / ".env"

SUPABASE_HOSTS = ("supabase.co", "supabase.com")


def with_supabase_ssl(url: str) -> str:
    """Supabase exige SSL; se agrega sslmode=require si la URL no lo trae."""
    if any(host in url for host in SUPABASE_HOSTS) and "sslmode=" not in url:
        url += ("&" if "?" in url else "?") + "sslmode=require"
    return url


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILE, env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Employee Survey API"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # Tokens de sesión
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Orígenes separados por coma; vacío permite cualquiera
    CORS_ORIGINS: str = ""

    # Cualquiera de las dos; DATABASE_URL tiene prioridad
    DATABASE_URL: Optional[str] = None
    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    # Rechazar envíos que omiten preguntas obligatorias
    ENFORCE_REQUIRED_QUESTIONS: bool = False

    # Horas mínimas entre dos recargas del mismo envío
    REFILL_COOLDOWN_HOURS: int = 24

    @property
    def cors_list(self) -> list[str]:
        origins = [o.strip() for o in self.CORS_ORIGINS.split(",")]
        return [o for o in origins if o] or ["*"]

    @property
    def db_url(self) -> str:
        url = (self.DATABASE_URL or self.SQLALCHEMY_DATABASE_URI or "").strip()
        if not url:
            raise ValueError("Falta DATABASE_URL (o SQLALCHEMY_DATABASE_URI) en el entorno")
        return with_supabase_ssl(url)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
