from unittest.mock import AsyncMock

import pytest

from payloads import ListSink
from satind.decoding.registries import make_protocol_registry
from satind.decoding.specs import EventRegistry


@pytest.fixture
def registry() -> EventRegistry:
    return make_protocol_registry()


@pytest.fixture
def list_sink() -> ListSink:
    return ListSink()


@pytest.fixture
def mock_provider():
    provider = AsyncMock()
    provider.get_events = AsyncMock(return_value=[])
    provider.latest_block = AsyncMock(return_value=100)
    return provider


@pytest.fixture
def mock_manifest():
    manifest = AsyncMock()
    manifest.append = AsyncMock()
    return manifest
