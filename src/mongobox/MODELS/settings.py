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
Runtime settings read from the environment.
"""
from typing import Dict, Optional
from pydantic import BaseModel, Field

ENV_PREFIX = "MONGOBOX_"


class RuntimeSettings(BaseModel):
    """
    Settings that control how containers are reached and how long to wait
    for them.
    """
    startup_timeout: float = Field(default=60.0, gt=0)
    poll_interval: float = Field(default=1.0, gt=0)
    docker_host: Optional[str] = None
    host: str = "localhost"

    @classmethod
    def from_environment(cls, env: Dict[str, str]) -> "RuntimeSettings":
        """
        Builds settings from MONGOBOX_* variables, e.g. MONGOBOX_STARTUP_TIMEOUT.
        Unknown MONGOBOX_* variables are ignored.

        Args:
            env: Environment mapping to read from.

        Returns:
            Validated settings.
        """
        values = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if env.get(key):
                values[name] = env[key]
        return cls(**values)
