"""YAML configuration loader for the operator agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import yaml


@dataclass
class ControllerConfig:
    kind: str
    group: str
    version: str
    plural: str
    controller: str
    namespace: Optional[str] = None
    finalizer: Optional[str] = None
    watch_timeout: int = 300
    retry_interval: float = 5.0


@dataclass
class AgentConfig:
    controllers: Sequence[ControllerConfig] = field(default_factory=list)
    default_finalizer: Optional[str] = None
    kubeconfig: Optional[Path] = None


def _parse_controller(entry: dict) -> ControllerConfig:
    if not isinstance(entry, dict):
        raise ValueError("controller entries must be mappings")
    missing = [
        key for key in ("kind", "group", "version", "plural", "controller")
        if key not in entry
    ]
    if missing:
        raise ValueError(
            f"controller entry missing required keys: {', '.join(missing)}"
        )
    controller = str(entry["controller"])
    if ":" not in controller:
        raise ValueError(
            f"controller '{controller}' must use the 'module:Class' form"
        )

    namespace = entry.get("namespace")
    finalizer = entry.get("finalizer")
    return ControllerConfig(
        kind=str(entry["kind"]),
        group=str(entry["group"]),
        version=str(entry["version"]),
        plural=str(entry["plural"]),
        controller=controller,
        namespace=str(namespace) if namespace else None,
        finalizer=str(finalizer) if finalizer else None,
        watch_timeout=int(entry.get("watch_timeout", 300)),
        retry_interval=float(entry.get("retry_interval", 5.0)),
    )


def _parse_controllers(entries: Iterable[dict]) -> List[ControllerConfig]:
    controllers: List[ControllerConfig] = []
    seen = set()
    for entry in entries:
        parsed = _parse_controller(entry)
        if parsed.kind in seen:
            raise ValueError(f"kind '{parsed.kind}' configured more than once")
        seen.add(parsed.kind)
        controllers.append(parsed)
    return controllers


def load_config(path: Path) -> AgentConfig:
    data = yaml.safe_load(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError("Agent configuration must be a mapping")

    controllers_section = data.get("controllers", [])
    if not isinstance(controllers_section, list):
        raise ValueError("'controllers' section must be a list")
    controllers = _parse_controllers(controllers_section)

    kubeconfig = data.get("kubeconfig")
    default_finalizer = data.get("default_finalizer")
    return AgentConfig(
        controllers=controllers,
        default_finalizer=str(default_finalizer) if default_finalizer else None,
        kubeconfig=Path(kubeconfig) if kubeconfig else None,
    )
