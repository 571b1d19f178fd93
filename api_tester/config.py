"""
Configuration settings for the API Pointer Tester
"""
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "API Pointer Tester"
    LOG_LEVEL: str = "INFO"

    # Paths
    BASE_DIR: Path = Path(__file__).parent.parent
    REPORTS_DIR: Path = BASE_DIR / "reports"

    # Test generation: "mock" uses the synthetic generator, "ollama" a local model
    LLM_PROVIDER: str = "mock"
    OLLAMA_HOST: str = "http://localhost:11434"
    OLLAMA_TEXT_MODEL: str = "llama3.2"
    LLM_TEMPERATURE: float = 0.7
    DEFAULT_TEST_COUNT: int = 12

    # Execution
    TARGET_BASE_URL: str = ""  # empty -> simulated API
    MOCK_DELAY_MIN_MS: int = 300
    MOCK_DELAY_MAX_MS: int = 700
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    class Config:
        env_file = ".env"
        extra = "allow"


settings = Settings()


# Evaluation thresholds. Passed into every evaluator call so that
# separate runs can use separate thresholds.

class StructureConfig(BaseModel):
    """Schema rules for a generated test."""

    required_fields: List[str] = Field(
        default_factory=lambda: ["id", "name", "request", "tags", "priority", "run_mode"]
    )
    valid_methods: List[str] = Field(
        default_factory=lambda: ["GET", "POST", "PUT", "PATCH", "DELETE"]
    )
    valid_priorities: List[str] = Field(default_factory=lambda: ["high", "medium", "low"])
    valid_run_modes: List[str] = Field(default_factory=lambda: ["auto", "manual"])


class QualityConfig(BaseModel):
    """Diversity and naming thresholds."""

    min_test_name_length: int = Field(default=10, ge=1)
    min_tag_diversity: int = Field(default=3, ge=0)
    min_unique_scenarios: float = Field(default=0.8, ge=0.0, le=1.0)


class CoverageConfig(BaseModel):
    """Minimum number of tests per edge-case category."""

    min_empty_value_tests: int = Field(default=2, ge=0)
    min_boundary_tests: int = Field(default=2, ge=0)
    min_type_variation_tests: int = Field(default=2, ge=0)
    min_injection_tests: int = Field(default=2, ge=0)
    min_missing_field_tests: int = Field(default=1, ge=0)
    min_extra_field_tests: int = Field(default=1, ge=0)


class IntentConfig(BaseModel):
    """Intent alignment thresholds."""

    user_requested_count: int = Field(default=3, ge=1)
    min_keyword_match_score: float = Field(default=0.5, ge=0.0, le=1.0)


class EvalConfig(BaseModel):
    """All evaluation thresholds in one value."""

    structure: StructureConfig = Field(default_factory=StructureConfig)
    quality: QualityConfig = Field(default_factory=QualityConfig)
    coverage: CoverageConfig = Field(default_factory=CoverageConfig)
    intent: IntentConfig = Field(default_factory=IntentConfig)

    class Config:
        frozen = True
