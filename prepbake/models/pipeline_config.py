"""Pipeline definition models."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from prepbake.models.runtime_config import RuntimeConfig


class StepConfig(BaseModel):
    """
    A single step in the pipeline.

    Allows step-specific fields beyond 'type'.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(description="Step type (e.g., 'mutate', 'ns', 'impute_median')")


class PipelineConfig(BaseModel):
    """Complete pipeline definition."""

    name: str = Field(description="Pipeline name (required)")
    outcomes: List[str] = Field(
        default_factory=list, description="Columns that get the outcome role"
    )
    roles: Dict[str, Optional[str]] = Field(
        default_factory=dict, description="Explicit column roles"
    )
    steps: List[StepConfig] = Field(
        default_factory=list, description="List of steps to apply"
    )
    runtime: RuntimeConfig = Field(
        default_factory=RuntimeConfig, description="Runtime configuration"
    )

    @classmethod
    def from_dict(cls, data: dict) -> "PipelineConfig":
        """Create PipelineConfig from dictionary."""
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: str) -> "PipelineConfig":
        """Load and validate a pipeline definition from a YAML file."""
        from prepbake.models.loader import load_pipeline_config

        return load_pipeline_config(path)
