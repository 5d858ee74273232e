from typing import Dict, Generator, List, Literal, Optional, Union
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from pydantic_settings import BaseSettings


# =====================================================================
# SETTINGS
# =====================================================================


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Wellbeing Reports API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./wellbeing.db"

    # JWT (tokens are issued by the auth service, verified here)
    SECRET_KEY: str = "Supersecretkey"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    # Generative narrative backend
    GENERATIVE_BACKEND_URL: Optional[str] = None
    GENERATIVE_BACKEND_API_KEY: Optional[str] = None
    GENERATIVE_BACKEND_MODEL: str = "gemini-2.0-flash"
    GENERATIVE_BACKEND_TIMEOUT: float = 10.0  # seconds
    GENERATIVE_NARRATIVE_PLANS: List[str] = ["starter", "pro", "premium", "team"]

    # Report generation limits per billing period
    PLAN_REPORT_LIMITS: Dict[str, Union[int, Literal["unlimited"]]] = {
        "free": 1,
        "starter": 3,
        "pro": "unlimited",
        "premium": "unlimited",
        "team": "unlimited",
    }

    # Report windows
    DEFAULT_REPORT_WINDOW_DAYS: int = 7
    MAX_REPORT_LOOKBACK_DAYS: int = 90

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()


# =====================================================================
# DATABASE
# =====================================================================

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=(
        {"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {}
    ),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
