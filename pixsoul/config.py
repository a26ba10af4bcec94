from typing import List, Optional

from pydantic import field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .secrets_manager import SecretsManager

class Settings(BaseSettings):
    aws_region: str = "us-east-1"
    environment: str = "development"

    # Database
    database_url: Optional[str] = None
    host: str = "localhost"
    db_username: str = "pixsoul"
    db_password: SecretStr = SecretStr("")
    database: str = "pixsoul"
    port: int = 5432
    db_pool_size: int = 10
    db_max_overflow: int = 0
    auto_create_tables: bool = False

    # Sessions and password reset
    session_cookie_name: str = "pixsoul_session"
    session_ttl_seconds: int = 60 * 60
    session_max_entries: int = 100_000
    otp_ttl_seconds: int = 5 * 60

    # Uploads
    upload_dir: str = "public/uploads"
    max_upload_bytes: int = 10 * 1024 * 1024

    # Mail transport
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: SecretStr = SecretStr("")
    smtp_use_ssl: bool = False
    smtp_use_tls: bool = True
    mail_from: str = "no-reply@pixsoul.app"

    cors_origins: List[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("db_username", "db_password", "smtp_password", mode="before")
    @classmethod
    def load_secrets(cls, v, info):
        if info.data.get("environment") == "production":
            try:
                secrets = SecretsManager(region_name=info.data.get("aws_region"))
                if info.field_name == "db_username":
                    v = secrets.get_db_credentials()["username"]
                elif info.field_name == "db_password":
                    v = secrets.get_db_credentials()["password"]
                elif info.field_name == "smtp_password":
                    v = secrets.get_smtp_password()
                return v
            except Exception:
                # If there's an error getting secrets, fall back to the env value
                return v
        return v

    @property
    def sqlalchemy_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg://{self.db_username}:{self.db_password.get_secret_value()}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


settings = Settings()
