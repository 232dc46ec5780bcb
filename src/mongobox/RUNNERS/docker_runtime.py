# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Container runtime backed by the Docker SDK for Python.
"""
import asyncio
import functools
from typing import Any, Callable, Dict, Optional, Tuple

import docker

from ..MODELS.launch_configuration import LaunchConfiguration
from ..MODELS.settings import RuntimeSettings


async def _run_blocking(func: Callable[..., Any], *args, **kwargs) -> Any:
    """
    Runs a blocking Docker SDK call in the default executor.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


def _port_key(port: int) -> str:
    return f"{port}/tcp"


class DockerContainerHandle:
    """
    A running Docker container together with its resolved port mappings.
    """

    def __init__(
        self,
        container: Any,
        host: str,
        port_map: Dict[int, int],
        auto_remove: bool = False,
    ):
        """
        Initializes the handle.

        :param container: The docker.models.containers.Container instance.
        :param host: Hostname under which mapped ports are reachable.
        :param port_map: Mapping from container port to host port.
        :param auto_remove: Whether Docker removes the container on exit.
        """
        self._container = container
        self.id: str = container.id
        self.name: str = getattr(container, "name", None) or container.id[:12]
        self.host = host
        self.port_map = dict(port_map)
        self.auto_remove = auto_remove

    def get_mapped_port(self, container_port: int) -> int:
        """
        Returns the host port bound to a container port.

        :raises KeyError: If the port is not published.
        """
        if container_port not in self.port_map:
            raise KeyError(f"Port {container_port} is not published by {self.name}")
        return self.port_map[container_port]

    async def get_logs(self, timestamps_enabled: bool = False) -> Tuple[str, str]:
        """
        Reads the complete stdout and stderr of the container.

        Args:
            timestamps_enabled: Prefix every line with its Docker timestamp.

        Returns:
            Tuple of (stdout, stderr).
        """
        stdout = await _run_blocking(
            self._container.logs, stdout=True, stderr=False, timestamps=timestamps_enabled
        )
        stderr = await _run_blocking(
            self._container.logs, stdout=False, stderr=True, timestamps=timestamps_enabled
        )
        return (
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    async def stop(self) -> None:
        """
        Stops the container and removes it unless Docker already does.
        """
        print(f"[{self.name}] Stopping container...")
        await _run_blocking(self._container.stop)
        if not self.auto_remove:
            await _run_blocking(self._container.remove, force=True)


class DockerRuntime:
    """
    Creates and starts containers through a Docker daemon.
    """

    def __init__(self, settings: Optional[RuntimeSettings] = None, client: Any = None):
        """
        Initializes the runtime.

        Args:
            settings: Runtime settings; `docker_host` selects the daemon.
            client: An existing docker.DockerClient, mainly for tests.
        """
        self.settings = settings or RuntimeSettings()
        self._client = client

    @property
    def client(self) -> Any:
        """The Docker client, connected on first use."""
        if self._client is None:
            if self.settings.docker_host:
                self._client = docker.DockerClient(base_url=self.settings.docker_host)
            else:
                self._client = docker.from_env()
        return self._client

    def _run_arguments(self, configuration: LaunchConfiguration) -> Dict[str, Any]:
        """
        Translates a launch configuration into containers.run() arguments.
        """
        ports = {}
        if configuration.exposed_port is not None:
            host_port = None if configuration.port_binding_randomized else configuration.exposed_port
            ports[_port_key(configuration.exposed_port)] = host_port

        arguments: Dict[str, Any] = {
            "detach": True,
            "environment": dict(configuration.environment or {}),
            "ports": ports,
            "labels": dict(configuration.labels or {}),
            "auto_remove": bool(configuration.auto_remove),
        }
        if configuration.name:
            arguments["name"] = configuration.name
        if configuration.command:
            arguments["command"] = list(configuration.command)
        return arguments

    def _resolve_ports(self, container: Any, configuration: LaunchConfiguration) -> Dict[int, int]:
        """
        Reads the host ports Docker bound for the container.
        """
        # Port bindings are only visible after the daemon reports back.
        container.reload()

        port_map: Dict[int, int] = {}
        published = container.ports or {}
        if configuration.exposed_port is not None:
            bindings = published.get(_port_key(configuration.exposed_port)) or []
            if bindings:
                port_map[configuration.exposed_port] = int(bindings[0]["HostPort"])
        return port_map

    def _start(self, configuration: LaunchConfiguration) -> DockerContainerHandle:
        container = self.client.containers.run(
            configuration.image, **self._run_arguments(configuration)
        )
        try:
            port_map = self._resolve_ports(container, configuration)
        except BaseException:
            # Running but no handle was returned yet.
            print(f"[{container.id[:12]}] Failed to inspect container, removing it")
            container.remove(force=True)
            raise

        handle = DockerContainerHandle(
            container,
            host=self.settings.host,
            port_map=port_map,
            auto_remove=bool(configuration.auto_remove),
        )
        print(f"[{handle.name}] Started container from {configuration.image}")
        return handle

    async def create_and_start(self, configuration: LaunchConfiguration) -> DockerContainerHandle:
        """
        Creates and starts a container.

        :param configuration: Validated launch configuration.
        :return: Handle to the running container.
        """
        return await _run_blocking(self._start, configuration)
