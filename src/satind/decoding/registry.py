"""Registry helpers: canonical event key → EventSpec.

This module exposes:
- `make_registry(specs)` → EventRegistry prefilled with the given specs
- `add_event_spec(registry, spec)` → insert one spec (rejects key collisions)
- `add_many(registry, specs)` → insert multiple
- `EventRegistryProvider` → static provider used by the ingestion use case
"""

from __future__ import annotations

from collections.abc import Iterable

from satind.core.interfaces import IEventRegistryProvider
from satind.decoding.specs import EventRegistry, EventSpec


def make_registry(specs: Iterable[EventSpec] = ()) -> EventRegistry:
    """Build a registry from specs."""
    reg: EventRegistry = {}
    add_many(reg, specs)
    return reg


def add_event_spec(registry: EventRegistry, spec: EventSpec) -> None:
    """Insert one spec keyed by its canonical key."""
    existing = registry.get(spec.key)
    if existing is not None and existing is not spec:
        raise ValueError(f"event key {spec.key} already registered for {existing.name}")
    registry[spec.key] = spec


def add_many(registry: EventRegistry, specs: Iterable[EventSpec]) -> None:
    """Insert many specs into the registry."""
    for s in specs:
        add_event_spec(registry, s)


class EventRegistryProvider(IEventRegistryProvider):
    """
    Simple registry provider that always returns the same EventRegistry.

    Bridges the declarative event specs and the ingestion use case, which only
    depends on the interface.
    """

    def __init__(self, registry: EventRegistry) -> None:
        self._registry = registry

    def get_registry(self) -> EventRegistry:
        return self._registry
