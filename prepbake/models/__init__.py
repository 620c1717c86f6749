"""Models module for pipeline definitions."""

from prepbake.models.loader import load_pipeline_config
from prepbake.models.pipeline_config import PipelineConfig, StepConfig
from prepbake.models.runtime_config import RuntimeConfig

__all__ = [
    "PipelineConfig",
    "StepConfig",
    "RuntimeConfig",
    "load_pipeline_config",
]
