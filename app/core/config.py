from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # JWT
    JWT_SECRET_KEY: str = "findone-dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 12

    # email (demo mode when credentials are missing)
    MAIL_FROM: Optional[str] = None
    MAIL_PASSWORD: Optional[str] = None
    MAIL_HOSTNAME: str = "smtp.gmail.com"
    MAIL_PORT: int = 587
    VERIFICATION_CODE_TTL_MINUTES: int = 10

    # Banco de dados
    DATABASE_URL: str = "sqlite:///./findone.db"
    SQL_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
