from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App settings
    PROJECT_NAME: str = "BudgetOracle"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # Presentation
    LANGUAGE: Literal["en", "tr"] = "en"
    CURRENCY: Literal["TRY", "USD", "EUR"] = "TRY"

    # Insight memory
    MEMORY_KEY: str = "budgeify-oracle-memory"
    MAX_INSIGHTS: int = 50
    MAX_CONVERSATIONS: int = 20
    DEDUP_WINDOW_HOURS: int = 24

    # Storage backend: memory | file | dynamo
    STORAGE_BACKEND: Literal["memory", "file", "dynamo"] = "memory"
    STORAGE_DIR: str = Field(default=".oracle")

    # DynamoDB
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_MEMORY_TABLE: str = Field(default="budget-oracle-memory")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


settings = Settings()
