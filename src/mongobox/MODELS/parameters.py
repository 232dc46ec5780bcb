"""
Partial parameter sets applied onto a launch configuration by shared code
(fixtures, plugins) that does not know about service-specific settings.
"""
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict

from .launch_configuration import FrozenMapping
from .wait_strategy import WaitStrategy


class CreateParameters(BaseModel):
    """
    Settings applied when the container is created.
    """
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    labels: Optional[FrozenMapping] = None
    environment: Optional[FrozenMapping] = None
    command: Optional[Tuple[str, ...]] = None


class ContainerParameters(BaseModel):
    """
    Settings describing what to run and when it counts as started.
    """
    model_config = ConfigDict(frozen=True)

    image: Optional[str] = None
    exposed_port: Optional[int] = None
    port_binding_randomized: Optional[bool] = None
    wait_strategy: Optional[WaitStrategy] = None
    auto_remove: Optional[bool] = None
