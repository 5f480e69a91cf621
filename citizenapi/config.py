from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from urllib.parse import quote_plus


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file="citizenapi/.env",
        env_file_encoding="utf-8",
        extra="allow",
    )
    # Application
    APP_NAME: str = "Citizen Supervision API"
    PROJECT_NAME: str = "Citizen Supervision API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DATABASE: str = "citizen"
    POSTGRES_SCHEMA: str = "public"

    # 설정되어 있으면 POSTGRES_* 보다 우선 (테스트/로컬 sqlite 등)
    DATABASE_URL: Optional[str] = None
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    @property
    def database_url(self) -> str:
        """Construct database URL from individual components"""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        # URL encode the password to handle special characters
        encoded_password = quote_plus(self.POSTGRES_PASSWORD)
        return f"postgresql+psycopg2://{self.POSTGRES_USERNAME}:{encoded_password}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DATABASE}"

    # Identity provider (hosted) - 토큰 검증만 수행
    JWT_SECRET_KEY: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = None
    JWT_ISSUER: Optional[str] = None

    # Point Management
    WELCOME_BONUS_POINTS: int = 100  # 최초 접근 시 지급 포인트
    WELCOME_BONUS_REASON: str = "welcome bonus"
    TRANSACTIONS_DEFAULT_LIMIT: int = 20
    TRANSACTIONS_MAX_LIMIT: int = 100

    # Notifications
    NOTIFICATIONS_UNREAD_LIMIT: int = 50


settings = Settings()
