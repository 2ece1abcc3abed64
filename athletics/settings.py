from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Security
    ATHLETICS_SECRET_KEY: str = "dev-secret-change-me"
    ATHLETICS_SESSION_COOKIE: str = "athletics_session"
    ATHLETICS_SESSION_MAX_AGE: int = 60 * 60 * 12
    ATHLETICS_HTTPS_ONLY: bool = False

    # Database
    ATHLETICS_DB_URL: str = "sqlite:///./athletics.db"

    # Proof uploads
    ATHLETICS_UPLOAD_DIR: str = "./uploads"
    ATHLETICS_UPLOAD_URL_PREFIX: str = "/uploads"

    # Logging
    ATHLETICS_LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
