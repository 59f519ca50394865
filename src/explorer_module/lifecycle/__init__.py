"""Lifecycle package for the Block Explorer module.

This package provides the pieces the lifecycle controller composes:
1. Resolves the target network and release version
2. Writes .env and docker-compose.yaml into the module data directory
3. Creates, starts, stops and removes the compose stack
4. Injects the front-end runtime config into the app container
5. Waits for the explorer to index up to the network's head
"""

from .compose import (
    ComposeClient,
    ComposeStack,
    ServiceStatus,
    StackConfig,
    StackProvisioner,
    StackState,
    StackStatus,
)
from .controller import ExplorerModule
from .git import GitClient
from .network import (
    NetworkDescriptor,
    NetworkResolver,
    NodeInfoProvider,
    RpcNodeInfoProvider,
    SettingsNodeInfoProvider,
)
from .process import CommandResult, CommandRunner
from .readiness import ReadinessMonitor, SyncResult
from .runtime_config import RuntimeConfigInjector, RuntimeConfigPayload
from .state import ModuleConfig, ModuleConfigStore
from .version import VersionResolver, compare_versions

__all__ = [
    # Controller
    "ExplorerModule",
    # Network
    "NetworkDescriptor",
    "NetworkResolver",
    "NodeInfoProvider",
    "RpcNodeInfoProvider",
    "SettingsNodeInfoProvider",
    # Version
    "GitClient",
    "VersionResolver",
    "compare_versions",
    # Compose
    "CommandResult",
    "CommandRunner",
    "ComposeClient",
    "ComposeStack",
    "ServiceStatus",
    "StackConfig",
    "StackProvisioner",
    "StackState",
    "StackStatus",
    # Runtime config
    "RuntimeConfigInjector",
    "RuntimeConfigPayload",
    # Readiness
    "ReadinessMonitor",
    "SyncResult",
    # State
    "ModuleConfig",
    "ModuleConfigStore",
]
