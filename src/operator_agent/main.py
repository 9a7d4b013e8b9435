"""Entry point for the standalone operator agent."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from threading import Event
from typing import Optional

from kubernetes import client as k8s_client
from kubernetes import config as kube_config

from operator_framework import KubernetesResourceClient, OperatorRegistry
from operator_framework import config as framework_config

from .config import AgentConfig, load_config
from .loader import load_controller
from .watchers import ResourceWatcher

LOG = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def _load_kube_config(kubeconfig: Optional[Path]) -> None:
    if kubeconfig is not None:
        kube_config.load_kube_config(config_file=str(kubeconfig))
        return
    try:
        kube_config.load_incluster_config()
    except kube_config.ConfigException:
        kube_config.load_kube_config()


def _apply_framework_options(config: AgentConfig) -> None:
    framework_config.register_opts()
    if config.default_finalizer:
        framework_config.CONF.set_override(
            'default_finalizer', config.default_finalizer, group='operator'
        )


def build_watchers(
    config: AgentConfig,
    registry: OperatorRegistry,
    api: k8s_client.CustomObjectsApi,
    stop_event: Event,
) -> list[ResourceWatcher]:
    watchers = []
    for entry in config.controllers:
        controller = load_controller(entry.controller)
        client = KubernetesResourceClient(
            entry.group, entry.version, entry.plural, api=api
        )
        dispatcher = registry.register(
            entry.kind,
            controller,
            client,
            finalizer=entry.finalizer,
            api_client=api.api_client,
        )
        watchers.append(
            ResourceWatcher(
                dispatcher,
                api,
                group=entry.group,
                version=entry.version,
                plural=entry.plural,
                namespace=entry.namespace,
                stop_event=stop_event,
                timeout=entry.watch_timeout,
                retry_interval=entry.retry_interval,
            )
        )
    return watchers


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the operator agent")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("/etc/operator-agent/agent.yaml"),
        help="Path to the agent configuration file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    config = load_config(args.config)
    _apply_framework_options(config)
    _load_kube_config(config.kubeconfig)

    stop_event = Event()
    registry = OperatorRegistry()
    watchers = build_watchers(
        config, registry, k8s_client.CustomObjectsApi(), stop_event
    )

    if not watchers:
        LOG.warning("no controllers configured; agent will idle")

    for watcher in watchers:
        watcher.start()

    def _shutdown(signum, frame):  # pragma: no cover - signal handler
        LOG.info("received signal %s, shutting down", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    try:
        while not stop_event.is_set():
            stop_event.wait(1.0)
    except KeyboardInterrupt:  # pragma: no cover - fallback if signal not set
        stop_event.set()

    for watcher in watchers:
        watcher.join(timeout=5.0)

    LOG.info("operator agent stopped")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
