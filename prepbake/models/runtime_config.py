"""Runtime configuration model for pipeline definitions."""

from typing import List

from pydantic import BaseModel, Field, field_validator

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RuntimeConfig(BaseModel):
    """Configuration for runtime behavior."""

    log_level: str = Field(default="INFO", description="Log level for the prepbake logger")
    json_logs: bool = Field(default=False, description="Emit logs as JSON")
    custom_steps: List[str] = Field(
        default_factory=list,
        description="Modules or .py files to import for custom step registrations",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log_level is a known level name."""
        if v.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_LOG_LEVELS}")
        return v.upper()
