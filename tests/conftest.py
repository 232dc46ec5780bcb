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
Shared fakes for the container runtime.
"""
from typing import Dict, List, Optional, Tuple

import pytest

from mongobox.MODELS.launch_configuration import LaunchConfiguration
from mongobox.MODELS.settings import RuntimeSettings


class FakeHandle:
    """In-memory container handle with scripted log output."""

    def __init__(self, logs: Optional[List[Tuple[str, str]]] = None,
                 port_map: Optional[Dict[int, int]] = None, host: str = "127.0.0.1"):
        self.id = "f00dfeedbeef"
        self.name = "fake-mongo"
        self.host = host
        self.port_map = port_map or {27017: 49153}
        # Each get_logs call returns the next snapshot; the last one repeats.
        self.logs = logs or [("", "")]
        self.log_calls = 0
        self.timestamps_requested: List[bool] = []
        self.stopped = False

    def get_mapped_port(self, container_port: int) -> int:
        return self.port_map[container_port]

    async def get_logs(self, timestamps_enabled: bool = False) -> Tuple[str, str]:
        self.timestamps_requested.append(timestamps_enabled)
        snapshot = self.logs[min(self.log_calls, len(self.logs) - 1)]
        self.log_calls += 1
        return snapshot

    async def stop(self) -> None:
        self.stopped = True


class FakeRuntime:
    """Runtime that records configurations and hands out a FakeHandle."""

    def __init__(self, handle: Optional[FakeHandle] = None):
        self.handle = handle or FakeHandle()
        self.started: List[LaunchConfiguration] = []

    async def create_and_start(self, configuration: LaunchConfiguration) -> FakeHandle:
        self.started.append(configuration)
        return self.handle


MARKER_LINE = '{"t":{"$date":"2024-05-01T10:00:00.000+00:00"},"s":"I","c":"NETWORK","msg":"Waiting for connections"}'


@pytest.fixture
def fake_handle():
    return FakeHandle()


@pytest.fixture
def fake_runtime(fake_handle):
    return FakeRuntime(fake_handle)


@pytest.fixture
def fast_settings():
    """Settings with a short timeout so failing waits end quickly."""
    return RuntimeSettings(startup_timeout=0.3, poll_interval=0.01)


@pytest.fixture
def make_handle():
    """Factory for handles with scripted logs."""
    return FakeHandle


@pytest.fixture
def make_runtime():
    return FakeRuntime


@pytest.fixture
def marker_line():
    return MARKER_LINE
