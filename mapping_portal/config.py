from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = Field("Client Mapping Portal API")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001)
    dbt_project_path: Path = Field(
        default=Path("config-driven-dbt"),
        description="Root of the dbt project whose configuration files the portal edits.",
    )
    client_mappings_dir: str = Field(
        default="models/staging/client_mappings",
        description="Directory (relative to the dbt project) holding one YAML file per client mapping.",
    )
    client_seeds_dir: str = Field(
        default="seeds/raw_clients",
        description="Directory (relative to the dbt project) whose seed files describe raw client sources.",
    )
    platform_seeds_dir: str = Field(
        default="seeds/platform_demo",
        description="Directory (relative to the dbt project) whose seed files back platform entities.",
    )
    platform_models_dir: str = Field(
        default="models/platform_demo",
        description="Directory (relative to the dbt project) receiving generated platform entity models.",
    )
    platform_schema_file: str = Field(
        default="platform_demo.yml",
        description="Schema document inside the platform models directory listing every platform entity.",
    )
    platform_source_name: str = Field(
        default="platform_demo",
        description="dbt source name referenced by generated platform entity models.",
    )
    created_by_tag: str = Field(
        default="client-mapping-portal",
        description="Value stamped into the created_by key of every client mapping file.",
    )
    git_enabled: bool = Field(
        True,
        description="When false the portal writes files but never runs git add/commit/push.",
    )
    git_remote: str = Field(default="origin")
    git_branch: str = Field(default="main")
    log_level: str = Field(
        default="INFO",
        description="Python logging verbosity for application modules (e.g. INFO, DEBUG).",
    )
    frontend_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="Comma-separated list of allowed CORS origins for the wizard UI.",
    )

    @field_validator("frontend_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache()
def get_settings() -> Settings:
    return Settings()
