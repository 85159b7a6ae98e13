from enum import StrEnum

from pydantic import Field
from pydantic_settings import BaseSettings


class LLMProvider(StrEnum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class Settings(BaseSettings):
    model_config = {"env_prefix": "SG_", "env_file": ".env", "env_file_encoding": "utf-8"}

    db_path: str = Field(default="subguard.db")
    seed_demo_data: bool = Field(default=True)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    cors_origins: str = Field(default="http://localhost:3000")
    currency_symbol: str = Field(default="₹")

    # Optional text generation for alert explanations
    llm_provider: LLMProvider = Field(default=LLMProvider.OPENAI)
    llm_model: str = Field(default="gpt-4o-mini")
    llm_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    llm_timeout_seconds: float = Field(default=15.0, gt=0)
    openai_api_key: str = Field(default="")
    anthropic_api_key: str = Field(default="")


settings = Settings()
