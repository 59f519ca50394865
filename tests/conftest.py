"""Shared test fixtures for explorer-module tests.

Fixtures wire an ExplorerModule to the fakes in tests/helpers.py so that
no docker, git or network access is needed.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from explorer_module.lifecycle import (
    ComposeClient,
    ComposeStack,
    ExplorerModule,
    GitClient,
    ModuleConfigStore,
    NetworkDescriptor,
    NetworkResolver,
    ReadinessMonitor,
    VersionResolver,
)
from tests.helpers import (
    PROJECT_NAME,
    SEEDED_VERSION,
    FakeCommandRunner,
    MutableNodeInfoProvider,
)


@pytest.fixture
def fake_runner() -> FakeCommandRunner:
    """Fixture providing a FakeCommandRunner."""
    return FakeCommandRunner()


@pytest.fixture
def local_network() -> NetworkDescriptor:
    """Default in-memory node network."""
    return NetworkDescriptor(chain_id=260, rpc_url="http://127.0.0.1:8011", name="In-memory node")


@pytest.fixture
def node_info(local_network: NetworkDescriptor) -> MutableNodeInfoProvider:
    """Fixture providing a switchable network provider."""
    return MutableNodeInfoProvider(local_network)


@pytest.fixture
def stack(tmp_path: Path) -> ComposeStack:
    """Compose stack rooted in a temporary data directory."""
    return ComposeStack(tmp_path, PROJECT_NAME)


@pytest.fixture
def explorer_module(
    tmp_path: Path,
    stack: ComposeStack,
    fake_runner: FakeCommandRunner,
    node_info: MutableNodeInfoProvider,
) -> ExplorerModule:
    """ExplorerModule with a pre-seeded version cache and fake docker/git."""
    git = GitClient(fake_runner)
    return ExplorerModule(
        stack=stack,
        network_resolver=NetworkResolver(node_info),
        version_resolver=VersionResolver(tmp_path / "block-explorer", git, cached=SEEDED_VERSION),
        config_store=ModuleConfigStore(tmp_path),
        compose=ComposeClient(fake_runner),
        git=git,
        monitor=ReadinessMonitor(interval_seconds=0),
    )
