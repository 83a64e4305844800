"""
Configuration de l'application / Application configuration.
Utilise pydantic-settings pour charger depuis .env ou variables d'environnement.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "VGP Inspect"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # Database - SQLite par défaut pour le développement
    # Database - SQLite by default for development
    DATABASE_URL: str = "sqlite+aiosqlite:///./vgp_inspect.db"

    # CORS - origines autorisées / allowed origins
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Sessions (jeton porteur signe) / Sessions (signed bearer token)
    SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    SESSION_EXPIRE_DAYS: int = 30

    # Rate Limiting
    RATE_LIMIT_SAVE: str = "30/minute"
    RATE_LIMIT_DEFAULT: str = "60/minute"

    # Photos
    PHOTO_MAX_DIMENSION: int = 1200
    PHOTO_JPEG_QUALITY: int = 70
    MAX_PHOTOS_PER_INSPECTION: int = 40
    MAX_PHOTO_SIZE: int = 10 * 1024 * 1024  # 10 MB avant compression

    # Stockage client / Client-side storage
    REMOTE_API_URL: str = "http://localhost:8000"
    REMOTE_TIMEOUT_SECONDS: float = 10.0
    LOCAL_STORE_PATH: str = "data/inspections.json"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
