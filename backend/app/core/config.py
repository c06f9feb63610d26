from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "haulbook"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    APP_DATABASE_DSN: str = "sqlite:////tmp/haulbook.db"
    LOG_LEVEL: str = "INFO"

    # Tokens are issued by the external auth service; we only verify them.
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_HOURS: int = 24

    # Booking code generation retries before the timestamp fallback
    BOOKING_CODE_MAX_ATTEMPTS: int = 10

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @property
    def version(self) -> str:
        return self.APP_VERSION


settings = Settings()
