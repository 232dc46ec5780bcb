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
Readiness conditions attached to a launch configuration.

The set of variants is closed: a port check, a log marker check and an
all-of composite over those two. Evaluation lives in RUNNERS/wait_checks.
"""
from typing import Literal, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field

MONGODB_READY_MARKER = "Waiting for connections"


class PortOpenWait(BaseModel):
    """
    Ready once the host port mapped to a container port accepts TCP connections.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["port_open"] = "port_open"
    port: int = Field(ge=1, le=65535)
    connect_timeout: float = Field(default=1.0, gt=0)


class LogMarkerWait(BaseModel):
    """
    Ready once the combined stdout/stderr lines contain the marker on
    exactly `occurrences` lines.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["log_marker"] = "log_marker"
    marker: str = Field(min_length=1)
    occurrences: int = Field(default=1, ge=1)


class AllOfWait(BaseModel):
    """
    Ready once every contained strategy is ready.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["all_of"] = "all_of"
    strategies: Tuple[Union[PortOpenWait, LogMarkerWait], ...] = ()


WaitStrategy = Union[PortOpenWait, LogMarkerWait, AllOfWait]


def all_of(*strategies: WaitStrategy) -> AllOfWait:
    """
    Combines strategies into one composite, flattening nested composites.
    """
    leaves = []
    for strategy in strategies:
        if isinstance(strategy, AllOfWait):
            leaves.extend(strategy.strategies)
        else:
            leaves.append(strategy)
    return AllOfWait(strategies=tuple(leaves))


def mongo_wait_strategy(port: int, authenticated: bool = True) -> AllOfWait:
    """
    Default MongoDB readiness: the port is open and the server has logged
    the connection marker twice.

    mongod prints the marker once for the temporary server the entrypoint
    starts to create the root user, and once more for the final listener.
    Without a root user there is no temporary server, hence a single marker
    when `authenticated` is False.
    """
    return all_of(
        PortOpenWait(port=port),
        LogMarkerWait(marker=MONGODB_READY_MARKER, occurrences=2 if authenticated else 1),
    )
