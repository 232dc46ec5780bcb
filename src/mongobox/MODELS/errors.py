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
Exception types raised by mongobox.

Failures coming from the Docker runtime itself are not wrapped; they reach
the caller as the SDK raised them.
"""
from typing import Optional


class MongoBoxError(Exception):
    """Base exception for mongobox."""


class ConfigurationError(MongoBoxError, ValueError):
    """
    A launch configuration is incomplete or invalid.

    Raised before any container resource is allocated.
    """

    def __init__(self, field: str, message: str = "must not be empty"):
        self.field = field
        self.message = message
        super().__init__(f"{field} {message}")


class ContainerNotReadyError(MongoBoxError, TimeoutError):
    """The container did not satisfy its wait strategy in time."""

    def __init__(self, timeout: float, attempts: int = 0, container: Optional[str] = None):
        self.timeout = timeout
        self.attempts = attempts
        self.container = container
        name = container or "container"
        super().__init__(
            f"{name} did not become ready within {timeout:g}s ({attempts} checks)"
        )


class ReadinessCancelledError(MongoBoxError):
    """Waiting for readiness was cancelled before the container became ready."""

    def __init__(self, attempts: int = 0):
        self.attempts = attempts
        super().__init__(f"Readiness wait cancelled after {attempts} checks")
