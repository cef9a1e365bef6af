"""
Evaluation Module Configuration.

Manages environment variables specific to the Evaluation module.
Uses prefix EVAL_ to avoid conflicts with other modules.
"""

from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EvaluationSettings(BaseSettings):
    """
    Evaluation module settings loaded from environment variables.

    All variables use the EVAL_ prefix for module isolation.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Persistence
    database_url: Annotated[
        str,
        Field(
            default="sqlite:///./evalmax.db",
            description="SQLAlchemy URL for the record and approval store",
            validation_alias="EVAL_DATABASE_URL",
        ),
    ] = "sqlite:///./evalmax.db"

    # Business calendar
    standard_daily_hours: Annotated[
        float,
        Field(
            default=8,
            gt=0,
            description="Standard working hours of one business day",
            validation_alias="EVAL_STANDARD_DAILY_HOURS",
        ),
    ] = 8

    # Grading rules
    ungradeable_work_rate: Annotated[
        float,
        Field(
            default=0.25,
            ge=0,
            le=1,
            description="Work rate below which an employee cannot be graded (25% 미만 미평가)",
            validation_alias="EVAL_UNGRADEABLE_WORK_RATE",
        ),
    ] = 0.25

    regular_band_work_rate: Annotated[
        float,
        Field(
            default=0.7,
            ge=0,
            le=1,
            description="Work rate from which an employee is in the regular evaluation band",
            validation_alias="EVAL_REGULAR_BAND_WORK_RATE",
        ),
    ] = 0.7

    group_score_per_member: Annotated[
        int,
        Field(
            default=100,
            gt=0,
            description="Score budget per evaluation group member",
            validation_alias="EVAL_GROUP_SCORE_PER_MEMBER",
        ),
    ] = 100

    # Payout
    payout_rounding_unit: Annotated[
        int,
        Field(
            default=1,
            gt=0,
            description="Final amounts are rounded half-up to a multiple of this many won",
            validation_alias="EVAL_PAYOUT_ROUNDING_UNIT",
        ),
    ] = 1

    # Shortened work
    apply_break_deduction: Annotated[
        bool,
        Field(
            default=False,
            description="Subtract statutory break time (1h for >=6h, 0.5h for >=4h) from shortened days",
            validation_alias="EVAL_APPLY_BREAK_DEDUCTION",
        ),
    ] = False

    log_level: Annotated[
        str,
        Field(
            default="INFO",
            description="Root logging level",
            validation_alias="EVAL_LOG_LEVEL",
        ),
    ] = "INFO"


@lru_cache
def get_evaluation_settings() -> EvaluationSettings:
    """
    Get cached evaluation module settings.

    Uses LRU cache to ensure settings are loaded only once.

    Returns:
        EvaluationSettings: Evaluation settings instance.
    """
    return EvaluationSettings()
