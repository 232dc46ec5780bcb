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
The immutable description of how to launch a container, and the
right-biased merge used to derive updated configurations.
"""
from types import MappingProxyType
from typing import Annotated, Dict, Mapping, Optional, Tuple

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer

from .wait_strategy import WaitStrategy


def _freeze(value: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(value))


# Read-only view over a private copy; dumps back to a plain dict.
FrozenMapping = Annotated[
    Mapping[str, str],
    AfterValidator(_freeze),
    PlainSerializer(dict, return_type=Dict[str, str]),
]


class LaunchConfiguration(BaseModel):
    """
    Launch parameters for a single container.

    Every field defaults to None, meaning "not set". A configuration is
    never modified after construction; updates go through `merge`.
    """
    model_config = ConfigDict(frozen=True)

    # Image and networking
    image: Optional[str] = None
    exposed_port: Optional[int] = None
    port_binding_randomized: Optional[bool] = None

    # Process
    environment: Optional[FrozenMapping] = None
    command: Optional[Tuple[str, ...]] = None

    # Readiness
    wait_strategy: Optional[WaitStrategy] = None

    # Credentials
    username: Optional[str] = None
    password: Optional[str] = None

    # Metadata and lifecycle
    name: Optional[str] = None
    labels: Optional[FrozenMapping] = None
    auto_remove: Optional[bool] = None

    def is_set(self, field: str) -> bool:
        """
        Checks whether a field carries a value.

        :param field: Field name.
        :return: True if the field is not None.
        """
        return getattr(self, field) is not None


def merge(old: LaunchConfiguration, new: LaunchConfiguration) -> LaunchConfiguration:
    """
    Merges two configurations field by field. A field set on `new` wins,
    otherwise the value from `old` is kept.

    :param old: The existing configuration.
    :param new: The configuration holding the overrides.
    :return: A new configuration; neither argument is modified.
    """
    values = {}
    for name in LaunchConfiguration.model_fields:
        value = getattr(new, name)
        values[name] = value if value is not None else getattr(old, name)
    return LaunchConfiguration(**values)
