"""
Lifecycle management for a single MongoDB container.
"""
import asyncio
from typing import Optional
from urllib.parse import quote

from ..MODELS.launch_configuration import LaunchConfiguration
from ..MODELS.settings import RuntimeSettings
from ..RUNNERS.readiness_poller import ReadinessPoller
from ..RUNNERS.runtime import ContainerHandle, ContainerRuntime


class MongoDbContainer:
    """
    A MongoDB container bound to a validated launch configuration.
    """

    def __init__(
        self,
        configuration: LaunchConfiguration,
        runtime: ContainerRuntime,
        settings: Optional[RuntimeSettings] = None,
    ):
        """
        Initializes the container.

        :param configuration: Validated launch configuration.
        :param runtime: Runtime that creates the container.
        :param settings: Startup timeout and poll interval.
        """
        self.configuration = configuration
        self.runtime = runtime
        self.settings = settings or RuntimeSettings()
        self.handle: Optional[ContainerHandle] = None
        self._stopped = False

    @property
    def label(self) -> str:
        if self.handle is not None:
            return getattr(self.handle, "name", self.handle.id)
        return self.configuration.name or self.configuration.image or "mongodb"

    async def start(self, cancel_event: Optional[asyncio.Event] = None) -> "MongoDbContainer":
        """
        Creates and starts the container, then waits until it is ready.

        If the wait fails the container is stopped before the error is raised.

        :param cancel_event: Cancels the readiness wait once set.
        :return: This container.
        """
        if self.handle is not None:
            raise RuntimeError(f"Container {self.label} is already started")

        self.handle = await self.runtime.create_and_start(self.configuration)
        self._stopped = False

        if self.configuration.wait_strategy is None:
            return self

        poller = ReadinessPoller(
            timeout=self.settings.startup_timeout,
            interval=self.settings.poll_interval,
            cancel_event=cancel_event,
        )
        try:
            await poller.wait_until_ready(self.configuration.wait_strategy, self.handle)
        except BaseException as e:
            # Also covers task cancellation and Ctrl+C during the wait.
            print(f"[{self.label}] Readiness wait aborted: {e!r}")
            await self.stop()
            raise

        print(f"[{self.label}] Ready after {poller.attempts} checks")
        return self

    async def stop(self) -> None:
        """
        Stops the container. Does nothing if it was never started or is
        already stopped.
        """
        if self.handle is None or self._stopped:
            return
        await self.handle.stop()
        self._stopped = True

    def status(self) -> str:
        """
        Gets the current status of the container.

        :return: 'created', 'running' or 'stopped'.
        """
        if self.handle is None:
            return "created"
        if self._stopped:
            return "stopped"
        return "running"

    def _require_handle(self) -> ContainerHandle:
        if self.handle is None or self._stopped:
            raise RuntimeError(f"Container {self.label} is not running")
        return self.handle

    @property
    def host(self) -> str:
        return self._require_handle().host

    @property
    def port(self) -> int:
        """Host port mapped to the MongoDB port."""
        return self._require_handle().get_mapped_port(self.configuration.exposed_port)

    def get_connection_string(self) -> str:
        """
        Builds a mongodb:// URL for the running container.
        Credentials are included when both are set.
        """
        handle = self._require_handle()
        port = handle.get_mapped_port(self.configuration.exposed_port)
        userinfo = ""
        if self.configuration.username and self.configuration.password:
            userinfo = (
                f"{quote(self.configuration.username, safe='')}:"
                f"{quote(self.configuration.password, safe='')}@"
            )
        return f"mongodb://{userinfo}{handle.host}:{port}"

    async def __aenter__(self) -> "MongoDbContainer":
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
