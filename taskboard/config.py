from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
  model_config = SettingsConfigDict(env_file=".env", extra="ignore")

  database_url: str = "postgresql+asyncpg://taskboard:taskboard@db:5432/taskboard"
  sql_echo: bool = False
  create_tables_on_start: bool = False

  app_version: str = "v2026-10-17"
  build_sha: str = "dev"
  api_docs_enabled: bool = True

  log_level: str = "INFO"

  cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

  default_page_size: int = 10
  max_page_size: int = 100

  def cors_origin_list(self) -> list[str]:
    return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
