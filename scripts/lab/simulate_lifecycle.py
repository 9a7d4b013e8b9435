#!/usr/bin/env python3
"""Walk resources through create and delete against the in-memory store."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

REPO_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from operator_agent.loader import load_controller  # noqa: E402
from operator_framework import (  # noqa: E402
    EventDispatcher,
    InMemoryResourceClient,
    Resource,
)


LOG = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--resources",
        type=Path,
        required=True,
        help="JSON file holding a list of resource objects",
    )
    parser.add_argument(
        "--controller",
        default="operator_agent.controllers:LoggingController",
        help="Controller to exercise, as module:Class",
    )
    parser.add_argument(
        "--finalizer",
        default=None,
        help="Finalizer token (defaults to the controller's or the configured one)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args()


def load_resources(path: Path) -> List[Dict[str, Any]]:
    with path.open() as fh:
        data = json.load(fh)
    if not isinstance(data, list):
        raise ValueError("resources file must contain a JSON list")
    return data


def drain(store: InMemoryResourceClient, dispatcher: EventDispatcher) -> int:
    handled = 0
    while True:
        events = store.pop_events()
        if not events:
            return handled
        for event in events:
            dispatcher.handle(event)
            handled += 1


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    store = InMemoryResourceClient()
    dispatcher = EventDispatcher(
        load_controller(args.controller), store, finalizer=args.finalizer
    )

    keys = []
    for raw in load_resources(args.resources):
        keys.append(store.create(Resource.from_dict(raw)).key)
    LOG.info("Created %d resources, %d events handled", len(keys), drain(store, dispatcher))

    for key in keys:
        stored = store.get(key)
        if dispatcher.finalizer not in stored.finalizers:
            LOG.error("%s is missing finalizer %s", key, dispatcher.finalizer)
            return 1
        store.mark_for_deletion(key)
    LOG.info("Deleted %d resources, %d events handled", len(keys), drain(store, dispatcher))

    leftovers = store.list()
    for resource in leftovers:
        LOG.error("%s still present with finalizers %s", resource.key, resource.finalizers)
    return 1 if leftovers else 0


if __name__ == "__main__":
    sys.exit(main())
