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
Unit tests for the Docker runtime, using a mocked Docker client.
"""
from unittest.mock import MagicMock, patch

import pytest

from mongobox.BUILDERS.mongo_builder import MongoDbBuilder
from mongobox.MODELS.settings import RuntimeSettings
from mongobox.RUNNERS.docker_runtime import DockerContainerHandle, DockerRuntime
from mongobox.RUNNERS.runtime import ContainerHandle, ContainerRuntime


def _mock_container(host_port="49160"):
    container = MagicMock()
    container.id = "abc123def4567890"
    container.name = "quirky_mongo"
    container.ports = {"27017/tcp": [{"HostIp": "0.0.0.0", "HostPort": host_port}]}
    return container


def _mock_client(container):
    client = MagicMock()
    client.containers.run.return_value = container
    return client


class TestDockerRuntime:
    """Tests for DockerRuntime."""

    def test_implements_runtime_contract(self):
        """Test that the runtime satisfies the protocol."""
        assert isinstance(DockerRuntime(client=MagicMock()), ContainerRuntime)

    @pytest.mark.asyncio
    async def test_create_and_start(self):
        """Test translation of the default configuration into run() arguments."""
        container = _mock_container()
        client = _mock_client(container)
        runtime = DockerRuntime(RuntimeSettings(host="docker.local"), client=client)
        config = MongoDbBuilder(runtime=runtime).with_name("orders-db").configuration

        handle = await runtime.create_and_start(config)

        args, kwargs = client.containers.run.call_args
        assert args == ("mongo:6.0",)
        assert kwargs["detach"] is True
        assert kwargs["ports"] == {"27017/tcp": None}
        assert kwargs["name"] == "orders-db"
        assert kwargs["environment"] == {
            "MONGO_INITDB_ROOT_USERNAME": "mongo",
            "MONGO_INITDB_ROOT_PASSWORD": "mongo",
        }
        assert kwargs["labels"] == {"org.mongobox.managed": "true"}
        assert kwargs["auto_remove"] is False
        assert "command" not in kwargs
        container.reload.assert_called_once()

        assert isinstance(handle, ContainerHandle)
        assert handle.host == "docker.local"
        assert handle.get_mapped_port(27017) == 49160

    @pytest.mark.asyncio
    async def test_fixed_port_binding(self):
        """Test that a non-randomized binding reuses the container port."""
        client = _mock_client(_mock_container("27017"))
        runtime = DockerRuntime(client=client)
        config = MongoDbBuilder(runtime=runtime).with_port_binding(27017, False).configuration

        handle = await runtime.create_and_start(config)

        assert client.containers.run.call_args.kwargs["ports"] == {"27017/tcp": 27017}
        assert handle.get_mapped_port(27017) == 27017

    @pytest.mark.asyncio
    async def test_failed_inspect_removes_container(self):
        """Test that a container is removed when its ports cannot be read."""
        from docker.errors import APIError

        container = _mock_container()
        container.reload.side_effect = APIError("inspect failed")
        client = _mock_client(container)
        runtime = DockerRuntime(client=client)

        with pytest.raises(APIError):
            await runtime.create_and_start(MongoDbBuilder(runtime=runtime).configuration)

        container.remove.assert_called_once_with(force=True)

    @pytest.mark.asyncio
    async def test_malformed_binding_removes_container(self):
        """Test that a binding without HostPort does not orphan the container."""
        container = _mock_container()
        container.ports = {"27017/tcp": [{"HostIp": "0.0.0.0"}]}
        runtime = DockerRuntime(client=_mock_client(container))

        with pytest.raises(KeyError):
            await runtime.create_and_start(MongoDbBuilder(runtime=runtime).configuration)

        container.remove.assert_called_once_with(force=True)

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        """Test that Docker errors are not wrapped."""
        from docker.errors import ImageNotFound

        client = MagicMock()
        client.containers.run.side_effect = ImageNotFound("no such image")
        runtime = DockerRuntime(client=client)

        with pytest.raises(ImageNotFound):
            await runtime.create_and_start(MongoDbBuilder(runtime=runtime).configuration)

    def test_client_from_docker_host(self):
        """Test that docker_host selects the daemon."""
        with patch("mongobox.RUNNERS.docker_runtime.docker.DockerClient") as client_cls:
            runtime = DockerRuntime(RuntimeSettings(docker_host="tcp://10.0.0.5:2375"))
            assert runtime.client is client_cls.return_value
            client_cls.assert_called_once_with(base_url="tcp://10.0.0.5:2375")

    def test_client_from_env(self):
        """Test the default client."""
        with patch("mongobox.RUNNERS.docker_runtime.docker.from_env") as from_env:
            assert DockerRuntime().client is from_env.return_value


class TestDockerContainerHandle:
    """Tests for DockerContainerHandle."""

    @pytest.mark.asyncio
    async def test_get_logs_reads_both_streams(self):
        """Test that stdout and stderr are fetched separately and decoded."""
        container = _mock_container()
        container.logs.side_effect = [b"out line\n", b"err line\n"]
        handle = DockerContainerHandle(container, "localhost", {27017: 49160})

        stdout, stderr = await handle.get_logs()

        assert stdout == "out line\n"
        assert stderr == "err line\n"
        first, second = container.logs.call_args_list
        assert first.kwargs == {"stdout": True, "stderr": False, "timestamps": False}
        assert second.kwargs == {"stdout": False, "stderr": True, "timestamps": False}

    @pytest.mark.asyncio
    async def test_stop_removes_container(self):
        """Test that stop also removes the container."""
        container = _mock_container()
        handle = DockerContainerHandle(container, "localhost", {})
        await handle.stop()
        container.stop.assert_called_once()
        container.remove.assert_called_once_with(force=True)

    @pytest.mark.asyncio
    async def test_stop_with_auto_remove(self):
        """Test that auto-removed containers are only stopped."""
        container = _mock_container()
        handle = DockerContainerHandle(container, "localhost", {}, auto_remove=True)
        await handle.stop()
        container.stop.assert_called_once()
        container.remove.assert_not_called()

    def test_unpublished_port(self):
        """Test the error for a port that is not published."""
        handle = DockerContainerHandle(_mock_container(), "localhost", {})
        with pytest.raises(KeyError):
            handle.get_mapped_port(27017)
