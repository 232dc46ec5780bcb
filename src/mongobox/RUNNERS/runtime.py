"""
Contracts for the container runtime that creates, inspects and removes
containers on behalf of mongobox.
"""
from typing import Protocol, Tuple, runtime_checkable

from ..MODELS.launch_configuration import LaunchConfiguration


@runtime_checkable
class ContainerHandle(Protocol):
    """
    A live container. Readiness checks only read from it.
    """
    id: str
    host: str

    def get_mapped_port(self, container_port: int) -> int:
        """Host port bound to the given container port."""
        ...

    async def get_logs(self, timestamps_enabled: bool = False) -> Tuple[str, str]:
        """Full stdout and stderr captured so far."""
        ...

    async def stop(self) -> None:
        """Stops and removes the container."""
        ...


@runtime_checkable
class ContainerRuntime(Protocol):
    """
    Creates and starts containers from a launch configuration.
    """

    async def create_and_start(self, configuration: LaunchConfiguration) -> ContainerHandle:
        ...
