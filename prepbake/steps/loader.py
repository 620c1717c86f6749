"""Utilities to load custom step modules."""

from __future__ import annotations

import importlib
import importlib.util
import inspect
from pathlib import Path
from types import ModuleType

from prepbake.core.exceptions import StepError
from prepbake.steps.base import Step
from prepbake.steps.registry import list_step_types, register_step


def load_custom_steps_from_module(module_path: str) -> None:
    """Import a module so its @register_step declarations run.

    Additionally, Step subclasses defined in the module that are not
    registered yet are registered under their ``step_type`` when they
    declare one, or else under their snake_case class name.
    """
    module = _import_module(module_path)

    for name, obj in inspect.getmembers(module, inspect.isclass):
        if not issubclass(obj, Step) or obj is Step:
            continue
        if obj.__module__ != module.__name__:
            continue
        step_type = obj.__dict__.get("step_type") or _camel_to_snake(name)
        if step_type not in list_step_types():
            register_step(step_type, lambda cfg, cls=obj: cls.model_validate(cfg))


def load_custom_steps(paths: list[str]) -> None:
    """Load all custom step modules from the provided paths."""
    for path in paths:
        load_custom_steps_from_module(path)


def _camel_to_snake(name: str) -> str:
    out = ""
    for i, ch in enumerate(name):
        if ch.isupper() and i > 0:
            out += "_"
        out += ch.lower()
    return out


def _import_module(module_path: str) -> ModuleType:
    """Import by module path or file path."""
    path_obj = Path(module_path)
    if path_obj.suffix == ".py" or path_obj.exists():
        spec = importlib.util.spec_from_file_location(path_obj.stem, path_obj)
        if spec is None or spec.loader is None:
            raise StepError(f"Cannot load module from path: {module_path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    try:
        return importlib.import_module(module_path)
    except ImportError as exc:
        raise StepError(
            f"Failed to import custom step module '{module_path}': {exc}"
        ) from exc
