from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    app_env: str = Field("dev", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    database_url_override: Optional[str] = Field(None, alias="DATABASE_URL")
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_name: str = Field("gudang", alias="DB_NAME")
    db_user: str = Field("gudang", alias="DB_USER")
    db_password: str = Field("gudangpass", alias="DB_PASSWORD")
    jwt_secret: str = Field("devsecret", alias="JWT_SECRET")
    jwt_access_expire_min: int = Field(15, alias="JWT_ACCESS_EXPIRE_MIN")
    jwt_refresh_expire_days: int = Field(7, alias="JWT_REFRESH_EXPIRE_DAYS")
    rate_limit_login_per_min: int = Field(8, alias="RATE_LIMIT_LOGIN_PER_MIN")
    openai_api_key: str = Field("", alias="OPENAI_API_KEY")
    openai_model: str = Field("gpt-4o", alias="OPENAI_MODEL")
    openai_timeout_sec: float = Field(30.0, alias="OPENAI_TIMEOUT_SEC")
    default_stock_alert_threshold: int = Field(10, alias="STOCK_ALERT_THRESHOLD")

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]
