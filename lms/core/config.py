"""
Configuration management using Pydantic settings.
"""
from typing import List, Union
import os
from pydantic import validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    # API Configuration
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Learning Management Backend"
    ENV: str = os.getenv("ENV", "development")
    DEBUG: bool = True
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./lms.db")

    # JWT Configuration
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Learning rules
    LESSON_COMPLETION_THRESHOLD: int = int(os.getenv("LESSON_COMPLETION_THRESHOLD", 90))
    QUIZ_PASS_COINS_REWARD: int = int(os.getenv("QUIZ_PASS_COINS_REWARD", 50))
    DASHBOARD_RECENT_TRANSACTIONS: int = 5
    # short_answer / fill_blank questions are only graded when this is on
    ENABLE_TEXT_ANSWER_GRADING: bool = os.getenv("ENABLE_TEXT_ANSWER_GRADING", "false").lower() == "true"

    # Seed admin
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin123")

    # CORS Configuration
    BACKEND_CORS_ORIGINS: Union[List[str], str] = "*"

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v):
        if v == "*" or v == ["*"]:
            return "*"
        if isinstance(v, str):
            return [i.strip() for i in v.split(",")]
        return v

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
