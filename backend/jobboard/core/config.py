from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    DATABASE_URL: str = "sqlite:///./jobboard.db"

    # JWT Authentication
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Verification / reset tokens
    RESET_TOKEN_EXPIRE_MINUTES: int = 60

    # Application
    APP_NAME: str = "JobBoard"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    PORT: int = 3001
    PUBLIC_BASE_URL: str = "http://localhost:3001"
    UPLOAD_DIR: str = "uploads"
    # Client page that collects the new password and POSTs it to /api/auth/reset-password/<token>
    PASSWORD_RESET_URL: str = "http://localhost:3000/reset-password"
    BACKEND_CORS_ORIGINS: str = (
        "http://localhost:3000,"
        "http://127.0.0.1:3000"
    )

    # Mail (SMTP)
    MAIL_ENABLED: bool = False
    MAIL_SERVER: str = "smtp.gmail.com"
    MAIL_PORT: int = 587
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: str = "no-reply@jobboard.local"
    MAIL_USE_TLS: bool = True
    SEND_PASSWORD_RESET_EMAIL: bool = False


settings = Settings()
