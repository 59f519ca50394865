"""Lifecycle controller for the Block Explorer module.

ExplorerModule composes the version, network, compose, runtime config and
readiness components into the operations a host calls:
install, is_installed, start, wait_for_sync, stop, clean, update,
is_running, get_logs and get_startup_info.

start() does not wait for the explorer to catch up with the chain; hosts
that want to block call wait_for_sync() afterwards.
"""

from __future__ import annotations

from pathlib import Path

from ..config import ModuleSettings
from ..errors import ProvisioningPermissionError, is_permission_error
from ..shared.logging import get_logger
from .compose import ComposeClient, ComposeStack, StackConfig, StackProvisioner, StackState
from .git import GitClient
from .network import (
    NetworkDescriptor,
    NetworkResolver,
    NodeInfoProvider,
    RpcNodeInfoProvider,
    SettingsNodeInfoProvider,
)
from .process import CommandRunner
from .readiness import ProgressCallback, ReadinessMonitor, SyncResult
from .runtime_config import RuntimeConfigInjector
from .state import ModuleConfig, ModuleConfigStore
from .version import REPO_URL, VersionResolver

logger = get_logger(__name__)

MODULE_NAME = "Block Explorer"
MODULE_DESCRIPTION = "zkSync block explorer UI and API"
REPO_FOLDER = "block-explorer"


class ExplorerModule:
    """Install, run and tear down the block explorer stack."""

    name = MODULE_NAME
    description = MODULE_DESCRIPTION

    def __init__(
        self,
        stack: ComposeStack,
        network_resolver: NetworkResolver,
        version_resolver: VersionResolver,
        config_store: ModuleConfigStore,
        compose: ComposeClient | None = None,
        git: GitClient | None = None,
        provisioner: StackProvisioner | None = None,
        injector: RuntimeConfigInjector | None = None,
        monitor: ReadinessMonitor | None = None,
        reset_state_on_start: bool = True,
        app_url: str = "http://localhost:3010",
    ):
        """Initialize the lifecycle controller.

        Args:
            stack: Location and naming of the compose stack.
            network_resolver: Source of the active target network.
            version_resolver: Source (and cache) of the release to deploy.
            config_store: Persisted module config.
            compose: Orchestrator client.
            git: Version-control client for the optional source clone.
            provisioner: Writer for .env and manifest files.
            injector: Front-end runtime config injector.
            monitor: Readiness poller used by wait_for_sync().
            reset_state_on_start: Remove indexed state before every start.
            app_url: Host URL of the explorer front-end.
        """
        self.stack = stack
        self.network_resolver = network_resolver
        self.version_resolver = version_resolver
        self.config_store = config_store
        self.compose = compose or ComposeClient()
        self.git = git or version_resolver.git
        self.provisioner = provisioner or StackProvisioner(stack)
        self.monitor = monitor or ReadinessMonitor()
        self.injector = injector or RuntimeConfigInjector(self.compose, self.monitor.api_url)
        self.reset_state_on_start = reset_state_on_start
        self.app_url = app_url

    @classmethod
    def from_settings(cls, settings: ModuleSettings) -> ExplorerModule:
        """Build a controller wired to docker, git and HTTP from settings."""
        runner = CommandRunner()
        compose = ComposeClient(runner)
        git = GitClient(runner)
        stack = ComposeStack(settings.data_dir, settings.project_name)
        monitor = ReadinessMonitor(settings.api_url, interval_seconds=settings.poll_interval)
        provider: NodeInfoProvider
        if settings.network_source == "rpc":
            provider = RpcNodeInfoProvider(settings.rpc_url, settings.network_name)
        else:
            provider = SettingsNodeInfoProvider(
                settings.rpc_url, settings.chain_id, settings.network_name
            )
        return cls(
            stack=stack,
            network_resolver=NetworkResolver(provider),
            version_resolver=VersionResolver(settings.data_dir / REPO_FOLDER, git),
            config_store=ModuleConfigStore(settings.data_dir),
            compose=compose,
            git=git,
            provisioner=StackProvisioner(
                stack,
                StackConfig(settings.registry, settings.app_port, settings.api_port),
            ),
            injector=RuntimeConfigInjector(compose, settings.api_url),
            monitor=monitor,
            reset_state_on_start=settings.reset_state_on_start,
            app_url=f"http://localhost:{settings.app_port}",
        )

    @property
    def repo_dir(self) -> Path:
        return self.version_resolver.repo_dir

    @property
    def version(self) -> str | None:
        """Version recorded by the last successful install."""
        return self.config_store.get().version

    async def is_installed(self) -> bool:
        """Whether the stack is installed for the currently active network."""
        config = self.config_store.get()
        if not config.is_complete:
            return False

        network = await self.network_resolver.resolve()
        if network != config.network:
            logger.info(
                "network_changed",
                installed_chain_id=config.network.chain_id,
                installed_rpc_url=config.network.rpc_url,
                chain_id=network.chain_id,
                rpc_url=network.rpc_url,
            )
            return False

        status = await self.compose.status(self.stack)
        return status.state != StackState.NOT_FOUND

    async def install(self, from_source: bool = False) -> str:
        """Provision and create the stack for the active network.

        Args:
            from_source: Clone the upstream repository into the data directory
                        before resolving the version. Whenever a clone exists
                        the explorer images are built from the checked-out tag.

        Returns:
            The installed version.

        Raises:
            ProvisioningPermissionError: If provisioning files cannot be written.
        """
        network = await self.network_resolver.resolve()

        if from_source:
            await self.git.clone_repo(REPO_URL, self.repo_dir)
        version = await self.version_resolver.get_latest_version()
        source_dir = None
        if self.version_resolver.is_repo_cloned():
            await self.git.checkout(self.repo_dir, version)
            source_dir = self.repo_dir

        try:
            self.provisioner.provision(version, network, source_dir=source_dir)
        except OSError as e:
            if is_permission_error(e):
                raise ProvisioningPermissionError(
                    data={"path": getattr(e, "filename", None), "original_error": str(e)}
                ) from e
            raise

        await self.compose.create(self.stack)
        await self.injector.inject(self.stack, network)

        self.config_store.set(ModuleConfig(version=version, network=network))
        logger.info("module_installed", version=version, chain_id=network.chain_id)
        return version

    async def start(self) -> None:
        """Bring the stack up, clearing indexed state first if configured."""
        if self.reset_state_on_start:
            await self.compose.reset_indexed_state(self.stack)
        await self.compose.up(self.stack)
        logger.info("module_started", compose_file=str(self.stack.compose_file))

    async def wait_for_sync(
        self,
        on_progress: ProgressCallback | None = None,
        max_iterations: int | None = None,
    ) -> SyncResult:
        """Block until the explorer has indexed the network's latest block."""
        network = await self.network_resolver.resolve()
        return await self.monitor.wait_for_sync(
            network.rpc_url, on_progress=on_progress, max_iterations=max_iterations
        )

    async def stop(self) -> None:
        if not self.stack.compose_file.exists():
            logger.debug("stop_skipped", reason="no compose file")
            return
        await self.compose.stop(self.stack)

    async def clean(self) -> None:
        """Remove the stack's containers; config record is kept."""
        if not self.stack.compose_file.exists():
            logger.debug("clean_skipped", reason="no compose file")
            return
        await self.compose.down(self.stack)

    async def update(self) -> str:
        """Reinstall from scratch: clean then install."""
        await self.clean()
        return await self.install()

    async def is_running(self) -> bool:
        status = await self.compose.status(self.stack)
        return bool(status.running_services)

    async def get_logs(self) -> list[str]:
        if not self.stack.compose_file.exists():
            return []
        return await self.compose.logs(self.stack)

    def get_startup_info(self) -> list[str]:
        """Human-readable summary of the exposed endpoints."""
        api_url = self.monitor.api_url
        return [
            f"App: {self.app_url}/?network=local",
            "HTTP API:",
            f"  Endpoint: {api_url}",
            f"  Documentation: {api_url}/docs",
        ]

    async def network(self) -> NetworkDescriptor:
        """Currently active target network."""
        return await self.network_resolver.resolve()
