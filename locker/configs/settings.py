from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    APP_NAME: str = "Document Locker"
    APP_ENV: Literal["dev", "prod"] = "dev"
    APP_DEBUG: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_prefix="APP_")


class CORSSettings(BaseSettings):
    CORS_ORIGINS: list[str] = ["http://127.0.0.1:5173", "http://localhost:5173"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: list[str] = ["*"]
    CORS_HEADERS: list[str] = ["*"]
    CORS_EXPOSE_HEADERS: list[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CORS_")


class MongoSettings(BaseSettings):
    MONGO_HOST: str = ""
    MONGO_PORT: int = 27017
    MONGO_DB: str = "locker"
    MONGO_USER: str = ""
    MONGO_PWD: str = ""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="MONGO_")

    @property
    def MONGO_URL(self) -> str:
        host = self.MONGO_HOST or "localhost"
        port = self.MONGO_PORT or 27017
        if self.MONGO_USER and self.MONGO_PWD:
            return f"mongodb://{self.MONGO_USER}:{self.MONGO_PWD}@{host}:{port}"
        return f"mongodb://{host}:{port}"


class SentrySettings(BaseSettings):
    SENTRY_DSN: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2
    SENTRY_PROFILES_SAMPLE_RATE: float = 0.0
    SENTRY_SEND_DEFAULT_PII: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SENTRY_")


class AuthSettings(BaseSettings):
    AUTH_JWT_SECRET: str = ""
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_ISSUER: str | None = None
    AUTH_JWT_AUDIENCE: str | None = "authenticated"
    # Assurance level the auth platform grants after a biometric step-up
    AUTH_PRIVATE_AAL: str = "aal2"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="AUTH_")


class MinioSettings(BaseSettings):
    MINIO_URL: str = "http://localhost:9000"
    MINIO_ACCESS_KEY: str = ""
    MINIO_SECRET_KEY: str = ""
    # Elevated credential, used only for permanent removal
    MINIO_ADMIN_ACCESS_KEY: str = ""
    MINIO_ADMIN_SECRET_KEY: str = ""
    MINIO_BUCKET: str = "documents"
    MINIO_SIGNED_URL_MINUTES: int = 60

    @property
    def MINIO_SSL(self) -> bool:
        return self.MINIO_URL.startswith("https://")

    model_config = SettingsConfigDict(env_file=".env", env_prefix="MINIO_")


class ShareSettings(BaseSettings):
    SHARE_BASE_URL: str = "http://localhost:5173"
    SHARE_TOKEN_BYTES: int = 32
    SHARE_PASSWORD_ITERATIONS: int = 390000
    SHARE_DEFAULT_EXPIRES_HOURS: int = 24

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SHARE_")


class TrashSettings(BaseSettings):
    TRASH_RETENTION_DAYS: int = 30

    model_config = SettingsConfigDict(env_file=".env", env_prefix="TRASH_")


class AISettings(BaseSettings):
    AI_API_KEY: str = ""
    AI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    AI_MODEL: str = "gemini-2.0-flash"
    AI_TIMEOUT_SECONDS: float = 20.0
    AI_BULK_DELAY_SECONDS: float = 0.1
    AI_AUTO_APPLY_THRESHOLD: float = 0.7

    model_config = SettingsConfigDict(env_file=".env", env_prefix="AI_")


class Settings(AppSettings, CORSSettings, MongoSettings, SentrySettings, AuthSettings, MinioSettings, ShareSettings, TrashSettings, AISettings):
    RELEASE: str | None = None
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    model_config = SettingsConfigDict(env_file=".env", env_prefix="")


settings = Settings()
