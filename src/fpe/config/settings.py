"""Configuration management using Pydantic Settings."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables and .env file.

    Only operational knobs live here.  Medical constants (valid ranges,
    factor tables, the probability floor and ceiling) are fixed in the
    modules that use them and cannot be overridden from the environment.
    """

    model_config = SettingsConfigDict(
        env_prefix="FPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field("INFO")
    log_format: str = Field("json", pattern="^(json|text)$")

    # Batch analysis
    batch_max_workers: int = Field(4, ge=1, le=64, description="Worker threads for batch analysis")

    # Result enrichment
    include_benchmarks: bool = Field(
        True,
        description="Attach subgroup benchmark data to each result",
    )
    benchmark_tolerance: float = Field(
        1.5,
        gt=1.0,
        description="Ratio over the age-band spontaneous rate that triggers a plausibility warning",
    )
    max_recommendations: Optional[int] = Field(
        None,
        ge=1,
        description="Truncate the ranked recommendation list to this many entries",
    )


# Instantiate global settings
settings = Settings()
