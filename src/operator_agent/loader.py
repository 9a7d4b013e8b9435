"""Import controllers named in the agent configuration."""

from __future__ import annotations

import importlib

from operator_framework import ResourceController


def load_controller(path: str) -> ResourceController:
    """Instantiate the controller class referenced as ``module:Class``."""

    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"controller '{path}' must use the 'module:Class' form")

    module = importlib.import_module(module_name)
    try:
        factory = getattr(module, attr)
    except AttributeError:
        raise ValueError(f"module '{module_name}' has no attribute '{attr}'") from None

    controller = factory()
    if not isinstance(controller, ResourceController):
        raise TypeError(
            f"{path} produced {type(controller).__name__}, "
            "expected a ResourceController"
        )
    return controller
