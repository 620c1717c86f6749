"""Pipeline definition loader with YAML parsing and validation."""

import os
from pathlib import Path

import yaml

from prepbake.core.exceptions import RecipeError
from prepbake.models.pipeline_config import PipelineConfig
from prepbake.steps.loader import load_custom_steps
from prepbake.steps.registry import list_step_types


def load_pipeline_config(path: str) -> PipelineConfig:
    """
    Load a pipeline definition from a YAML file.

    Custom step modules listed under ``runtime.custom_steps`` are imported
    (relative paths resolve against the file's directory) before the
    definition is validated.

    Args:
        path: Path to pipeline YAML file

    Returns:
        Validated PipelineConfig instance

    Raises:
        RecipeError: If file not found, invalid YAML or validation fails
    """
    config_path = Path(path)
    if not config_path.exists():
        raise RecipeError(f"Pipeline file not found: {path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RecipeError(
            f"Invalid YAML in pipeline file: {e}", context={"path": str(path)}
        ) from e

    if not isinstance(config_dict, dict):
        raise RecipeError(
            "Pipeline file must contain a YAML dictionary",
            context={"path": str(path)},
        )

    runtime_cfg = config_dict.get("runtime", {}) or {}
    custom_modules = runtime_cfg.get("custom_steps", [])
    if custom_modules:
        base_dir = config_path.parent
        resolved = [
            str((base_dir / p).resolve())
            if p.endswith(".py") and not os.path.isabs(p)
            else p
            for p in custom_modules
        ]
        load_custom_steps(resolved)
        config_dict = {**config_dict, "runtime": {**runtime_cfg, "custom_steps": resolved}}

    try:
        config = PipelineConfig.from_dict(config_dict)
    except Exception as e:
        raise RecipeError(
            f"Pipeline validation failed: {e}", context={"path": str(path)}
        ) from e

    unknown = [step.type for step in config.steps if step.type not in list_step_types()]
    if unknown:
        raise RecipeError(
            f"Unknown step types: {unknown}",
            context={"path": str(path), "available_types": ", ".join(list_step_types())},
        )
    return config
