"""Configuration management using pydantic-settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database settings
    db_server: str
    db_name: str
    db_user: str
    db_password: str
    db_port: int = 5432
    db_pool_size: int = 20
    db_max_overflow: int = 40
    sql_echo: bool = False
    # Full SQLAlchemy async URL, takes precedence over the db_* parts
    database_url_override: Optional[str] = None

    # MinIO settings
    minio_endpoint: str
    minio_access_key: str
    minio_secret_key: str
    minio_secure: bool = False
    minio_chat_bucket: str = "chat-images"

    # JWT settings
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expiration_minutes: int = 1440

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # WebSocket settings
    ws_max_message_size: int = 65536  # 64KB

    # Chat settings
    chat_history_limit: int = 50
    image_expiry_hours: int = 3
    max_image_bytes: int = 5 * 1024 * 1024

    # Document sharing
    max_document_bytes: int = 10 * 1024 * 1024

    # Organization bootstrap
    departments: list[str] = [
        "Computer Science",
        "Mathematics",
        "Physics",
        "Chemistry",
        "Biology",
    ]
    general_room_name: str = "General"
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None

    # AI relay
    ai_api_endpoint: Optional[str] = None
    ai_request_timeout: float = 30.0
    ai_marker: str = "@ai"
    ai_sender_name: str = "AI Assistant"

    # Web Push (VAPID)
    vapid_public_key: Optional[str] = None
    vapid_private_key: Optional[str] = None
    vapid_contact: str = "mailto:admin@faculty.local"

    # Redis settings (ARQ job queue)
    redis_url: str = "redis://localhost:6379/0"

    # ARQ Worker settings
    # Image sweep: runs at these minutes of every hour (comma-separated, 0-59)
    arq_image_sweep_minutes: str = "0"

    @property
    def database_url(self) -> str:
        """Build PostgreSQL async connection string."""
        if self.database_url_override:
            return self.database_url_override
        from urllib.parse import quote_plus
        return (
            f"postgresql+asyncpg://{self.db_user}:{quote_plus(self.db_password)}"
            f"@{self.db_server}:{self.db_port}/{self.db_name}"
        )

    @property
    def sync_database_url(self) -> str:
        """Build PostgreSQL sync connection string for Alembic."""
        from urllib.parse import quote_plus
        return (
            f"postgresql+psycopg2://{self.db_user}:{quote_plus(self.db_password)}"
            f"@{self.db_server}:{self.db_port}/{self.db_name}"
        )

    @property
    def push_enabled(self) -> bool:
        """Web Push is only attempted when both VAPID keys are configured."""
        return bool(self.vapid_public_key and self.vapid_private_key)


# Global settings instance
settings = Settings()
