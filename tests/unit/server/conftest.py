"""Fixtures for server tests."""

import pytest

from vtrim.config.models import StorageConfig, VTrimConfig
from vtrim.introspector.stub import StubProbe
from vtrim.server.app import create_app


@pytest.fixture
def config(store) -> VTrimConfig:
    return VTrimConfig(storage=StorageConfig(root=store.root))


@pytest.fixture
def probe() -> StubProbe:
    return StubProbe(default=10.0)


@pytest.fixture
def app(config, store, probe, fake_engine):
    return create_app(config, store=store, probe=probe, engine=fake_engine)
