import json
from typing import List, Union

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Stockledger API"
    env: str = "dev"
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)

    # DATABASE
    database_url: str = "sqlite:///./data.db"
    db_path: str | None = None
    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=20, ge=0, le=200)
    db_pool_timeout_seconds: int = Field(default=30, ge=1, le=300)
    db_pool_recycle_seconds: int = Field(default=1800, ge=30, le=86_400)
    sqlite_busy_timeout_ms: int = Field(default=30_000, ge=0)
    auto_create_schema: bool = True

    # INVENTORY
    apply_count: bool = False
    movements_list_limit: int = Field(default=100, ge=1, le=1000)

    api_timeout_hint_ms: int = Field(default=300000, ge=1000, le=1_800_000)

    # CORS
    allowed_origins: List[str] = Field(default_factory=list)

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def assemble_allowed_origins(cls, v: Union[str, List[str], None]) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            if not v.strip():
                return []
            if v.startswith("["):
                parsed = json.loads(v)
                if not isinstance(parsed, list):
                    raise ValueError("ALLOWED_ORIGINS JSON value must be a list")
                return [str(i).strip() for i in parsed if str(i).strip()]
            return [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, list):
            return [str(i).strip() for i in v if str(i).strip()]
        raise ValueError(v)

    @field_validator("db_path", mode="before")
    @classmethod
    def normalize_db_path(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None

    @model_validator(mode="after")
    def validate_production_safety(self) -> "Settings":
        env_value = self.env.lower().strip()
        if env_value not in {"prod", "production"}:
            return self

        if "*" in self.allowed_origins:
            raise ValueError("ALLOWED_ORIGINS cannot contain '*' in production")

        return self

    @property
    def resolved_database_url(self) -> str:
        if self.db_path:
            return f"sqlite:///{self.db_path}"
        return self.database_url

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        enable_decoding=False,
    )


settings = Settings()
