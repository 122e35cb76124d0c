from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "BlogCore"
    DATABASE_URL: str = "sqlite:///./blog.db"
    SQL_ECHO: bool = False
    LOG_LEVEL: str = "INFO"

    # Used by create_session when the caller gives no explicit lifetime
    SESSION_LIFETIME_MINUTES: int = 60 * 24 * 7

    DEFAULT_PAGE_SIZE: int = 5

    # 0 means an unbounded outbox
    OUTBOX_MAX_SIZE: int = 1000

    class Config:
        env_file = ".env"  # Load environment variables from the .env file


settings = Settings()
